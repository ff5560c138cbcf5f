"""User lookups used by appointment scheduling."""

from uuid import UUID

from sqlalchemy.orm import Session

from realty_api.db.enums import Role
from realty_api.db.models import User


def get_user(db: Session, user_id: UUID) -> User | None:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_active_agent(db: Session, user_id: UUID) -> User | None:
    """Get an active user holding the agent role, or None."""
    user = get_user(db, user_id)
    if not user or not user.is_active or user.role != Role.AGENT.value:
        return None
    return user
