"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from realty_api.core.security import decode_session_token
from realty_api.db.session import SessionLocal


AUTH_HEADER = "Authorization"
AUTH_SCHEME = "bearer"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _bearer_token(request: Request) -> str:
    header = request.headers.get(AUTH_HEADER)
    if not header:
        raise HTTPException(status_code=401, detail="Not authenticated")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != AUTH_SCHEME or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header")
    return token.strip()


def get_current_session(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Get session context: user_id, email, role.

    This is the PRIMARY auth dependency for appointment endpoints.

    Validates:
    - Bearer token exists
    - JWT is valid and not expired
    - User exists and is active
    - Stored role is known and matches the token

    Raises:
        HTTPException 401: Authentication failed
    """
    # Import here to avoid circular imports
    from realty_api.db.enums import Role
    from realty_api.schemas.auth import TokenPayload, UserSession
    from realty_api.services import user_service

    token = _bearer_token(request)
    try:
        payload = TokenPayload.model_validate(decode_session_token(token))
    except (jwt.InvalidTokenError, ValidationError):
        raise HTTPException(status_code=401, detail="Invalid session")

    user = user_service.get_user(db, payload.sub)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")

    # Authorization uses the stored role; a token minted before a role change is stale
    if not Role.has_value(user.role):
        raise HTTPException(status_code=401, detail=f"Unknown role '{user.role}'")
    if user.role != payload.role:
        raise HTTPException(status_code=401, detail="Session role changed")

    return UserSession(
        user_id=user.id,
        email=user.email,
        role=Role(user.role),
    )


def require_roles(allowed_roles: list):
    """
    Dependency factory for role-based authorization.

    Uses enum values (not strings) to prevent drift.

    Usage:
        @router.patch("/{id}/complete", dependencies=[Depends(require_roles([Role.ADMIN, Role.AGENT]))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{session.role.value}' not authorized for this action"
            )
        return session
    return dependency
