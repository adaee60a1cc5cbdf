"""
Session context.

The signed-in user is passed explicitly into every ledger call instead of
being read from global state. Authentication itself happens elsewhere;
this module only carries its result.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UnauthenticatedError(Exception):
    """A ledger operation was attempted without a signed-in user."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class SessionContext(BaseModel):
    """Who is making the call."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls()

    def current_user_id(self) -> Optional[str]:
        return self.user_id or None

    def require_user_id(self) -> str:
        """Return the user ID or raise UnauthenticatedError."""
        user_id = self.current_user_id()
        if user_id is None:
            raise UnauthenticatedError()
        return user_id
