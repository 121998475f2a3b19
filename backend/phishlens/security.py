# backend/phishlens/security.py
import logging

import bcrypt
from fastapi import Depends, Request

from .errors import AuthenticationRequired
from .schemas import Account
from .services.store import Store

logger = logging.getLogger("phishlens.auth")

SESSION_USER_KEY = "user_id"

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        logger.warning("Unreadable password hash encountered")
        return False


# ---------------------------------------------------
# Session helpers
# ---------------------------------------------------
def start_session(request: Request, account: Account) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = account.id


def end_session(request: Request) -> None:
    request.session.clear()


def session_user_id(request: Request) -> str | None:
    return request.session.get(SESSION_USER_KEY)


# ---------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------
def get_store(request: Request) -> Store:
    return request.app.state.store


async def require_user(request: Request, store: Store = Depends(get_store)) -> Account:
    """Session guard: resolves the signed-in account or fails with 401."""
    user_id = session_user_id(request)
    if not user_id:
        raise AuthenticationRequired()

    account = await store.get_account(user_id)
    if account is None:
        # session outlived its account (e.g. in-memory store after a restart)
        end_session(request)
        raise AuthenticationRequired()
    return account
