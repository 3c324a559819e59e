"""Security: RBAC and security-answer hashing. No FastAPI."""

from laundry_app.security.answer_hashing import answer_matches, hash_answer, normalize_answer
from laundry_app.security.rbac import RBACService

__all__ = [
    "RBACService",
    "answer_matches",
    "hash_answer",
    "normalize_answer",
]
