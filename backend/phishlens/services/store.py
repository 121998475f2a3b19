# backend/phishlens/services/store.py
"""
Account directory and per-user scan history.

Two backends share one interface: ``InMemoryStore`` (default, nothing
survives a restart) and ``DatabaseStore`` (SQLAlchemy async). Handlers get
the instance from ``app.state.store`` so tests can hand in a fresh one.
"""
import abc
import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..errors import DuplicateAccount
from ..models.scan import ScanEntry, ScanKind
from ..models.user import User
from ..schemas import Account

logger = logging.getLogger("phishlens.store")

DEFAULT_HISTORY_LIMIT = 50


class Store(abc.ABC):

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.history_limit = history_limit

    @abc.abstractmethod
    async def create_account(self, account: Account) -> Account:
        """Insert ``account``; raise ``DuplicateAccount`` if the email is taken."""

    @abc.abstractmethod
    async def get_account_by_email(self, email: str) -> Optional[Account]:
        ...

    @abc.abstractmethod
    async def get_account(self, user_id: str) -> Optional[Account]:
        ...

    @abc.abstractmethod
    async def record(self, user_id: str, entry: dict) -> None:
        """Prepend ``entry`` to the user's history and keep the newest ``history_limit``."""

    @abc.abstractmethod
    async def list_scans(self, user_id: str) -> List[dict]:
        """History newest first."""

    async def close(self) -> None:
        return None


class InMemoryStore(Store):

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        super().__init__(history_limit)
        self._by_email: dict[str, Account] = {}
        self._by_id: dict[str, Account] = {}
        self._scans: dict[str, list[dict]] = {}

    async def create_account(self, account: Account) -> Account:
        # check and insert without yielding to the loop
        if account.email in self._by_email:
            raise DuplicateAccount()
        self._by_email[account.email] = account
        self._by_id[account.id] = account
        self._scans[account.id] = []
        return account

    async def get_account_by_email(self, email: str) -> Optional[Account]:
        return self._by_email.get(email)

    async def get_account(self, user_id: str) -> Optional[Account]:
        return self._by_id.get(user_id)

    async def record(self, user_id: str, entry: dict) -> None:
        scans = self._scans.setdefault(user_id, [])
        scans.insert(0, entry)
        del scans[self.history_limit:]

    async def list_scans(self, user_id: str) -> List[dict]:
        return list(self._scans.get(user_id, []))


def _to_account(row: User) -> Account:
    return Account(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name,
        created_at=row.created_at,
    )


class DatabaseStore(Store):

    def __init__(self, session_maker: async_sessionmaker, history_limit: int = DEFAULT_HISTORY_LIMIT):
        super().__init__(history_limit)
        self._session_maker = session_maker

    async def create_account(self, account: Account) -> Account:
        async with self._session_maker() as session:
            session.add(User(
                id=account.id,
                email=account.email,
                password_hash=account.password_hash,
                name=account.name,
                created_at=account.created_at,
            ))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise DuplicateAccount()
        return account

    async def get_account_by_email(self, email: str) -> Optional[Account]:
        async with self._session_maker() as session:
            q = await session.execute(select(User).where(User.email == email))
            row = q.scalars().first()
            return _to_account(row) if row else None

    async def get_account(self, user_id: str) -> Optional[Account]:
        async with self._session_maker() as session:
            row = await session.get(User, user_id)
            return _to_account(row) if row else None

    async def record(self, user_id: str, entry: dict) -> None:
        kind = ScanKind.email if "extractedUrls" in entry else ScanKind.url
        async with self._session_maker() as session:
            session.add(ScanEntry(user_id=user_id, kind=kind.value, payload=entry))
            await session.flush()

            stale = await session.execute(
                select(ScanEntry.id)
                .where(ScanEntry.user_id == user_id)
                .order_by(ScanEntry.id.desc())
                .offset(self.history_limit)
            )
            stale_ids = list(stale.scalars().all())
            if stale_ids:
                await session.execute(delete(ScanEntry).where(ScanEntry.id.in_(stale_ids)))
                logger.debug("Trimmed %d old scans for user %s", len(stale_ids), user_id)

            await session.commit()

    async def list_scans(self, user_id: str) -> List[dict]:
        async with self._session_maker() as session:
            q = await session.execute(
                select(ScanEntry.payload)
                .where(ScanEntry.user_id == user_id)
                .order_by(ScanEntry.id.desc())
                .limit(self.history_limit)
            )
            return list(q.scalars().all())

    @property
    def engine(self):
        return self._session_maker.kw.get("bind")

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def build_store(cfg) -> Store:
    """Store selected by ``STORE_BACKEND``."""
    backend = (cfg.STORE_BACKEND or "memory").lower()
    if backend == "memory":
        return InMemoryStore(history_limit=cfg.HISTORY_LIMIT)
    if backend == "database":
        from ..db import get_session_maker
        return DatabaseStore(get_session_maker(cfg.DATABASE_URL), history_limit=cfg.HISTORY_LIMIT)
    raise ValueError(f"Unknown STORE_BACKEND: {cfg.STORE_BACKEND!r}")


