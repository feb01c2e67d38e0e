import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

from dotenv import load_dotenv
from fastapi import Request


DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_name: str

    jwt_secret: str

    # Bootstrap administrator, created on start-up when missing.
    admin_email: str
    admin_password: str

    token_ttl: timedelta = timedelta(hours=24)
    bcrypt_rounds: int = 12

    # Where payment proofs are written and served from
    upload_dir: str = "uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    cors_origins: Tuple[str, ...] = ("*",)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected an integer.") from e
    if value < 1:
        raise RuntimeError(f"{name} must be >= 1")
    return value


def _bcrypt_rounds() -> int:
    rounds = _positive_int("BCRYPT_ROUNDS", "12")
    # bcrypt accepts cost factors 4..31
    if not 4 <= rounds <= 31:
        raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31")
    return rounds


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _parse_origins(raw: str) -> Tuple[str, ...]:
    parts = [p.strip() for p in raw.split(",")]
    return tuple(p for p in parts if p) or ("*",)


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    return Settings(
        database_url=_require("DATABASE_URL"),
        database_name=_require("DATABASE_NAME"),
        jwt_secret=_require("JWT_SECRET"),
        admin_email=_require("ADMIN_EMAIL").strip().lower(),
        admin_password=_require("ADMIN_PASSWORD"),
        token_ttl=timedelta(hours=_positive_int("TOKEN_TTL_HOURS", "24")),
        bcrypt_rounds=_bcrypt_rounds(),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        max_upload_bytes=_positive_int("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES)),
        cors_origins=_parse_origins(os.getenv("CORS_ORIGINS", "*")),
    )
