import logging
from typing import Optional

from fastapi import Depends, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from topup import config, crud
from topup.errors import AuthError, ValidationError
from topup.security import hash_password, verify_password
from topup.sessions import AdminSession, SessionStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
MIN_PASSWORD_LENGTH = 8


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def encode_session_cookie(session: AdminSession) -> str:
    # Expiry is enforced by the session store, the JWT only proves origin
    return jwt.encode({"sid": session.token}, config.SESSION_SECRET, algorithm=ALGORITHM)


def decode_session_cookie(value: Optional[str]) -> Optional[str]:
    """Return the session token carried by a signed cookie, or None."""
    if not value:
        return None
    try:
        payload = jwt.decode(value, config.SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


def login(db: Session, store: SessionStore, username: Optional[str],
          password: Optional[str]) -> AdminSession:
    if not username or not password:
        raise ValidationError("missing fields")

    admin = crud.get_admin_by_username(db, username)
    if admin is None or not verify_password(password, admin.password_hash):
        logger.info("Rejected admin login for '%s'", username)
        raise AuthError("unauthorized")

    session = store.create(admin.id, admin.username, must_rotate=admin.must_rotate)
    logger.info("Admin '%s' logged in", admin.username)
    return session


def logout(store: SessionStore, token: Optional[str]) -> None:
    session = store.destroy(token)
    if session is not None:
        logger.info("Admin '%s' logged out", session.username)


def current_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> AdminSession:
    token = decode_session_cookie(request.cookies.get(config.SESSION_COOKIE))
    session = store.get(token) if token else None
    if session is None:
        raise AuthError("unauthenticated")
    return session


def require_session(session: AdminSession = Depends(current_session)) -> AdminSession:
    """Guard for admin-only operations.

    In production the bootstrap account is locked out of everything but the
    password change until its default password has been replaced.
    """
    if session.must_rotate and config.is_production():
        raise AuthError("password rotation required")
    return session


def change_password(db: Session, store: SessionStore, session: AdminSession,
                    current_password: Optional[str], new_password: Optional[str]) -> None:
    if not current_password or not new_password:
        raise ValidationError("missing fields")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password too short")
    if new_password == current_password:
        raise ValidationError("password unchanged")

    admin = crud.get_admin_by_username(db, session.username)
    if admin is None or not verify_password(current_password, admin.password_hash):
        raise AuthError("unauthorized")

    crud.update_admin_password(db, admin.id, hash_password(new_password))
    store.mark_rotated(admin.id)
    logger.info("Admin '%s' changed password", admin.username)
