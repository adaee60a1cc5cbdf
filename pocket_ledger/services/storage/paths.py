"""
Record key scheme.

Everything a user owns lives under ``users/{uid}``:

    users/{uid}                              profile
    users/{uid}/transactions/{id}
    users/{uid}/accounts/{id}
    users/{uid}/categories/{id}
    users/{uid}/monthly_stats/{yyyy_MM}
"""

from enum import Enum

USERS_COLLECTION = "users"


class Family(str, Enum):
    """The per-user record families."""
    TRANSACTIONS = "transactions"
    ACCOUNTS = "accounts"
    CATEGORIES = "categories"
    MONTHLY_STATS = "monthly_stats"


def _segment(value: str, what: str) -> str:
    if not value or "/" in value:
        raise ValueError(f"Invalid {what}: {value!r}")
    return value


def user_path(user_id: str) -> str:
    return f"{USERS_COLLECTION}/{_segment(user_id, 'user id')}"


def collection_path(user_id: str, family: Family) -> str:
    return f"{user_path(user_id)}/{family.value}"


def document_path(user_id: str, family: Family, doc_id: str) -> str:
    return f"{collection_path(user_id, family)}/{_segment(doc_id, 'document id')}"
