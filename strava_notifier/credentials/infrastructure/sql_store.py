"""SQLAlchemy-backed implementation of the credential store."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import BigInteger, String, Text, create_engine, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from ...models.credential import Credential
from ..application.ports import CredentialStore, StorageError

T = TypeVar("T")

_UPSERT_DIALECTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class Base(DeclarativeBase):
    """Declarative base for credential tables."""


class CredentialRecord(Base):
    __tablename__ = "credentials"

    athlete_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    display_name: Mapped[str] = mapped_column(String(255))
    notify_target: Mapped[str] = mapped_column(String(64), index=True)
    access_token: Mapped[str] = mapped_column(Text)
    refresh_token: Mapped[str] = mapped_column(Text)
    expires_at: Mapped[int] = mapped_column(BigInteger)

    def to_credential(self) -> Credential:
        return Credential(
            athlete_id=self.athlete_id,
            display_name=self.display_name,
            notify_target=self.notify_target,
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=self.expires_at,
        )


def create_credentials_engine(database_url: str) -> Engine:
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


class SqlCredentialStore(CredentialStore):
    """Store credentials in a relational database (PostgreSQL or SQLite file)."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        dialect = engine.dialect.name
        if dialect not in _UPSERT_DIALECTS:
            raise ValueError(f"Unsupported credential database dialect: {dialect}")
        self._insert = _UPSERT_DIALECTS[dialect]

    async def initialize(self) -> None:
        await self._run(lambda: Base.metadata.create_all(bind=self._engine))

    async def upsert(self, credential: Credential) -> None:
        values = credential.model_dump()
        statement = self._insert(CredentialRecord).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=[CredentialRecord.athlete_id],
            set_={key: value for key, value in values.items() if key != "athlete_id"},
        )

        def _write() -> None:
            with self._sessions.begin() as session:
                session.execute(statement)

        await self._run(_write)

    async def find_by_athlete_id(self, athlete_id: int) -> Optional[Credential]:
        def _read() -> Optional[Credential]:
            with self._sessions() as session:
                record = session.get(CredentialRecord, athlete_id)
                return record.to_credential() if record else None

        return await self._run(_read)

    async def find_by_notify_target(self, notify_target: str) -> Optional[Credential]:
        def _read() -> Optional[Credential]:
            with self._sessions() as session:
                record = session.scalars(
                    select(CredentialRecord)
                    .where(CredentialRecord.notify_target == notify_target)
                    .limit(1)
                ).first()
                return record.to_credential() if record else None

        return await self._run(_read)

    async def list_credentials(self) -> List[Credential]:
        def _read() -> List[Credential]:
            with self._sessions() as session:
                records = session.scalars(
                    select(CredentialRecord).order_by(CredentialRecord.athlete_id)
                )
                return [record.to_credential() for record in records]

        return await self._run(_read)

    async def update_tokens(
        self,
        athlete_id: int,
        access_token: str,
        refresh_token: str,
        expires_at: int,
    ) -> None:
        statement = (
            update(CredentialRecord)
            .where(CredentialRecord.athlete_id == athlete_id)
            .values(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
            )
        )

        def _write() -> int:
            with self._sessions.begin() as session:
                return session.execute(statement).rowcount

        updated = await self._run(_write)
        if not updated:
            raise StorageError(f"No credential stored for athlete {athlete_id}")

    async def _run(self, operation: Callable[[], T]) -> T:
        try:
            return await run_in_threadpool(operation)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc


__all__ = [
    "Base",
    "CredentialRecord",
    "SqlCredentialStore",
    "create_credentials_engine",
]
