import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import APIRouter, Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from config import Settings, get_settings
from database import ADMIN, create_document, find_admin_by_email, get_db
from errors import Forbidden, InvalidCredentials, Unauthenticated
from schemas import Admin, LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

router = APIRouter(prefix="/api/auth", tags=["auth"])
bearer_scheme = HTTPBearer(auto_error=False)


# --- Credentials ---

def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash, or a password bcrypt refuses (over 72 bytes).
        return False


def bootstrap_admin(db: Database, settings: Settings) -> bool:
    """Create the configured administrator unless one with that email exists.

    Returns True when a record was inserted.
    """
    if find_admin_by_email(db, settings.admin_email) is not None:
        logger.info("Admin user already present: %s", settings.admin_email)
        return False
    admin = Admin(
        email=settings.admin_email,
        password=hash_password(settings.admin_password, rounds=settings.bcrypt_rounds),
    )
    create_document(db, ADMIN, admin)
    logger.info("Admin user created: %s", settings.admin_email)
    return True


# --- Session issuer ---

def issue_token(admin: Dict[str, Any], settings: Settings, issued_at: Optional[datetime] = None) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    payload = {
        "id": admin["id"],
        "email": admin["email"],
        "iat": issued_at,
        "exp": issued_at + settings.token_ttl,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def authenticate(db: Database, settings: Settings, email: str, password: str) -> str:
    admin = find_admin_by_email(db, email.strip().lower())
    if admin is None or not verify_password(password, admin["password"]):
        logger.info("Rejected login for %s", email)
        raise InvalidCredentials()
    logger.info("Admin logged in: %s", admin["email"])
    return issue_token(admin, settings)


# --- Access guard ---

def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError as e:
        raise Forbidden() from e


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    x_auth_token: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    token = credentials.credentials if credentials else x_auth_token
    if not token:
        raise Unauthenticated()
    return decode_token(token, settings)


# Plain def: bcrypt verification runs in the threadpool, off the event loop.
@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    token = authenticate(db, settings, payload.email, payload.password)
    return LoginResponse(token=token)
