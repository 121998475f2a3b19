# backend/phishlens/services/credentials.py
import logging
import uuid
from functools import lru_cache

from starlette.concurrency import run_in_threadpool

from ..errors import DuplicateAccount, InvalidCredentials
from ..schemas import Account
from ..security import hash_password, verify_password
from .store import Store

logger = logging.getLogger("phishlens.auth")


@lru_cache(maxsize=None)
def dummy_hash(rounds: int) -> str:
    """Hash checked when the email is unknown, at the same cost as real account hashes."""
    return hash_password("phishlens-dummy-password", rounds)


async def register(store: Store, email: str, password: str, name: str, rounds: int = 10) -> Account:
    if await store.get_account_by_email(email) is not None:
        raise DuplicateAccount()

    password_hash = await run_in_threadpool(hash_password, password, rounds)
    account = Account(
        id=uuid.uuid4().hex,
        email=email,
        password_hash=password_hash,
        name=name,
    )
    # the store re-checks uniqueness atomically
    await store.create_account(account)
    logger.info("Registered account %s", account.id)
    return account


async def login(store: Store, email: str, password: str, rounds: int = 10) -> Account:
    account = await store.get_account_by_email(email)
    if account is None:
        await run_in_threadpool(verify_password, password, dummy_hash(rounds))
        raise InvalidCredentials()

    ok = await run_in_threadpool(verify_password, password, account.password_hash)
    if not ok:
        raise InvalidCredentials()

    logger.info("Login for account %s", account.id)
    return account
