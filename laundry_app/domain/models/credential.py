"""Security credential record: one question plus the digest of its answer, keyed by normalized email."""

import random
from dataclasses import dataclass
from typing import Any, Dict

from laundry_app.domain.exceptions import MalformedRecordError

SECURITY_QUESTIONS: tuple[str, ...] = (
    "What was the name of your first-grade teacher?",
    "What is the name of the street you grew up on?",
    "What was the name of your first pet?",
    "In what city were you born?",
    "What is your mother's maiden name?",
    "What was the make and model of your first car?",
)


def random_security_question(rng: random.Random | None = None) -> str:
    """Pick one question from the fixed pool for the signup form."""
    return (rng or random).choice(SECURITY_QUESTIONS)


def is_known_question(question: str) -> bool:
    return question in SECURITY_QUESTIONS


@dataclass(frozen=True)
class SecurityCredentialRecord:
    """Never holds the plaintext answer. email is the normalized lookup key."""

    email: str
    question: str
    answer_hash: str

    def to_document(self) -> Dict[str, Any]:
        return {"question": self.question, "answer_hash": self.answer_hash}

    @classmethod
    def from_document(cls, email: str, data: Dict[str, Any]) -> "SecurityCredentialRecord":
        question = data.get("question")
        answer_hash = data.get("answer_hash")
        if not isinstance(question, str) or not isinstance(answer_hash, str):
            raise MalformedRecordError(f"Security credential record for {email} is malformed")
        return cls(email=email, question=question, answer_hash=answer_hash)
