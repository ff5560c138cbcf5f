"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel

from realty_api.db.enums import Role


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: UUID  # user_id
    email: str
    role: str


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency; identifies the actor
    every booking operation is performed for.
    """
    user_id: UUID
    email: str
    role: Role  # Validated enum
