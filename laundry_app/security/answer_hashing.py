"""Security answer normalization and one-way hashing. No FastAPI."""

import hashlib


def normalize_answer(answer: str) -> str:
    """Answers are case-insensitive and ignore surrounding whitespace."""
    return (answer or "").strip().lower()


def hash_answer(answer: str) -> str:
    """SHA-256 of the normalized answer, as 64 lowercase hex characters."""
    return hashlib.sha256(normalize_answer(answer).encode("utf-8")).hexdigest()


def answer_matches(answer: str, stored_hash: str) -> bool:
    """Compare a freshly computed digest with the stored one. Plain string equality."""
    return hash_answer(answer) == stored_hash
