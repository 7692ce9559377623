from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# .env never overrides variables already set in the environment.
load_dotenv()


def get_backend_url() -> str:
    """Base URL of the hosted backend (`BIZDASH_BACKEND_URL`), without trailing slash."""
    return os.getenv("BIZDASH_BACKEND_URL", "").rstrip("/")


def get_backend_key() -> str:
    return os.getenv("BIZDASH_BACKEND_KEY", "")


def get_timeout() -> float:
    """Request timeout in seconds (`BIZDASH_TIMEOUT`, default 10)."""
    return float(os.getenv("BIZDASH_TIMEOUT", "10"))


def get_log_level() -> str:
    return os.getenv("BIZDASH_LOG_LEVEL", "INFO").upper()


class Settings(BaseModel):
    backend_url: str = ""
    backend_key: str = Field(default="", repr=False)
    timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            backend_url=get_backend_url(),
            backend_key=get_backend_key(),
            timeout=get_timeout(),
            log_level=get_log_level(),
        )
