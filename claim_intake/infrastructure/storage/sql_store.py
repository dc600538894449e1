"""SQL implementations of the claim and parameter stores."""

import asyncio
import hashlib
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar
from uuid import uuid4

from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from ...domain.errors import StorageUnavailableError
from ...domain.models.claim import Claim, ClaimType
from ...domain.models.instance import Instance
from .sql_models import Base, ClaimRecord, InstanceRecord, SystemParameterRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def dedup_hash(dedup_key: str) -> str:
    return hashlib.sha256(dedup_key.encode("utf-8")).hexdigest()


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def create_sql_engine(database_url: str, pool_timeout: float = 30.0) -> Engine:
    """Create an engine, relaxing pool options SQLite does not support."""
    engine_kwargs: Dict[str, Any] = {
        "echo": False,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": pool_timeout,
        "pool_recycle": 1800,
    }
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs.pop("pool_size", None)
        engine_kwargs.pop("max_overflow", None)
        engine_kwargs.pop("pool_recycle", None)
    return create_engine(database_url, **engine_kwargs)


class SqlDatabase:
    """Engine and session factory shared by the SQL stores."""

    def __init__(self, database_url: str, pool_timeout: float = 30.0):
        self._database_url = database_url
        self._pool_timeout = pool_timeout
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return
        try:
            engine = create_sql_engine(self._database_url, self._pool_timeout)
            await asyncio.to_thread(Base.metadata.create_all, bind=engine)
        except (OperationalError, InterfaceError) as e:
            raise StorageUnavailableError(f"Failed to open database: {e}")
        self._engine = engine
        self._sessions = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("🗄️ SQL store ready")

    async def close(self) -> None:
        if self._engine is not None:
            await asyncio.to_thread(self._engine.dispose)
            self._engine = None
            self._sessions = None

    async def run(self, work: Callable[[Session], T]) -> T:
        """Run ``work`` with a fresh session in a worker thread.

        Raises:
            StorageUnavailableError: Connection-level database failure
        """
        if self._sessions is None:
            raise StorageUnavailableError("Database not opened")
        return await asyncio.to_thread(self._run_sync, work)

    def _run_sync(self, work: Callable[[Session], T]) -> T:
        session = self._sessions()
        try:
            return work(session)
        except (OperationalError, InterfaceError) as e:
            session.rollback()
            raise StorageUnavailableError(f"Database unavailable: {e}")
        finally:
            session.close()


class SqlClaimStore:
    """Claim store on a relational database.

    ``insert_claim_if_absent`` relies on the unique ``(type, dedup_hash)``
    constraint: a losing concurrent insert hits ``IntegrityError``, rolls back
    and returns the winner.
    """

    def __init__(
        self,
        database_url: str = "sqlite:///./claim_intake.db",
        pool_timeout: float = 30.0,
        database: Optional[SqlDatabase] = None,
        provider_name: str = "sql",
    ):
        self._db = database or SqlDatabase(database_url, pool_timeout)
        self._name = provider_name

    @property
    def database(self) -> SqlDatabase:
        return self._db

    def parameter_store(self) -> "SqlParameterStore":
        return SqlParameterStore(self._db)

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def is_available(self) -> bool:
        return self._db.is_open

    async def initialize(self) -> None:
        await self._db.open()

    async def shutdown(self) -> None:
        await self._db.close()

    async def find_claims(self, claim_type: ClaimType, dedup_key: str) -> List[Claim]:
        return await self._db.run(partial(self._find_claims, ClaimType(claim_type), dedup_key))

    def _find_claims(self, claim_type: ClaimType, dedup_key: str, session: Session) -> List[Claim]:
        records = session.scalars(
            select(ClaimRecord)
            .where(
                ClaimRecord.type == claim_type.value,
                ClaimRecord.dedup_hash == dedup_hash(dedup_key),
                ClaimRecord.dedup_key == dedup_key,
            )
            .order_by(ClaimRecord.seq)
        ).all()
        return [self._to_claim(record) for record in records]

    async def insert_claim_if_absent(self, claim: Claim) -> Tuple[str, bool]:
        if claim.dedup_key is None:
            raise ValueError("Claim has no dedup key")
        return await self._db.run(partial(self._insert_claim_if_absent, claim))

    def _insert_claim_if_absent(self, claim: Claim, session: Session) -> Tuple[str, bool]:
        existing = self._find_claims(claim.type, claim.dedup_key, session)
        if existing:
            return existing[0].id, False

        claim_id = uuid4().hex
        session.add(
            ClaimRecord(
                id=claim_id,
                type=claim.type.value,
                dedup_hash=dedup_hash(claim.dedup_key),
                dedup_key=claim.dedup_key,
                category=claim.category,
                content=claim.content,
                fingerprint=claim.fingerprint,
                first_seen_at=claim.first_seen_at,
                poll_started=claim.poll_started,
                assessed=claim.assessed,
                truth_score=claim.truth_score,
                is_irrelevant=claim.is_irrelevant,
                is_scam=claim.is_scam,
                custom_reply=claim.custom_reply,
                media_ref=claim.media_ref,
                mime_type=claim.mime_type,
                storage_location=claim.storage_location,
            )
        )
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            winner = self._find_claims(claim.type, claim.dedup_key, session)
            if not winner:
                raise
            logger.info(f"🔁 Lost insert race for {claim.type.value} claim, using {winner[0].id}")
            return winner[0].id, False
        return claim_id, True

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        return await self._db.run(partial(self._get_claim, claim_id))

    def _get_claim(self, claim_id: str, session: Session) -> Optional[Claim]:
        record = session.scalars(select(ClaimRecord).where(ClaimRecord.id == claim_id)).first()
        return self._to_claim(record) if record else None

    async def append_instance(self, claim_id: str, instance: Instance) -> str:
        return await self._db.run(partial(self._append_instance, claim_id, instance))

    def _append_instance(self, claim_id: str, instance: Instance, session: Session) -> str:
        if session.scalars(select(ClaimRecord.seq).where(ClaimRecord.id == claim_id)).first() is None:
            raise KeyError(f"Claim {claim_id} not found")

        instance_id = uuid4().hex
        session.add(
            InstanceRecord(
                id=instance_id,
                claim_id=claim_id,
                source=instance.source,
                delivery_id=instance.delivery_id,
                timestamp=instance.timestamp,
                type=instance.type.value,
                content=instance.content,
                sender=instance.sender,
                forwarded=instance.forwarded,
                frequently_forwarded=instance.frequently_forwarded,
                replied=instance.replied,
                fingerprint=instance.fingerprint,
                media_ref=instance.media_ref,
                mime_type=instance.mime_type,
            )
        )
        session.commit()
        return instance_id

    async def list_instances(self, claim_id: str) -> List[Instance]:
        return await self._db.run(partial(self._list_instances, claim_id))

    def _list_instances(self, claim_id: str, session: Session) -> List[Instance]:
        records = session.scalars(
            select(InstanceRecord)
            .where(InstanceRecord.claim_id == claim_id)
            .order_by(InstanceRecord.seq)
        ).all()
        return [
            Instance(
                id=record.id,
                claim_id=record.claim_id,
                source=record.source,
                delivery_id=record.delivery_id,
                timestamp=_utc(record.timestamp),
                type=ClaimType(record.type),
                content=record.content,
                sender=record.sender,
                forwarded=record.forwarded,
                frequently_forwarded=record.frequently_forwarded,
                replied=record.replied,
                fingerprint=record.fingerprint,
                media_ref=record.media_ref,
                mime_type=record.mime_type,
            )
            for record in records
        ]

    async def count_claims(self) -> int:
        return await self._db.run(
            lambda session: session.scalar(select(func.count()).select_from(ClaimRecord))
        )

    @staticmethod
    def _to_claim(record: ClaimRecord) -> Claim:
        return Claim(
            id=record.id,
            type=ClaimType(record.type),
            category=record.category,
            content=record.content,
            fingerprint=record.fingerprint,
            first_seen_at=_utc(record.first_seen_at),
            poll_started=record.poll_started,
            assessed=record.assessed,
            truth_score=record.truth_score,
            is_irrelevant=record.is_irrelevant,
            is_scam=record.is_scam,
            custom_reply=record.custom_reply,
            media_ref=record.media_ref,
            mime_type=record.mime_type,
            storage_location=record.storage_location,
        )


class SqlParameterStore:
    """``systemParameters`` documents stored as JSON rows."""

    def __init__(self, database: SqlDatabase):
        self._db = database

    async def get_parameters(self, name: str) -> Optional[Dict[str, Any]]:
        def _get(session: Session) -> Optional[Dict[str, Any]]:
            record = session.get(SystemParameterRecord, name)
            return dict(record.document) if record else None

        return await self._db.run(_get)

    async def set_parameters(self, name: str, values: Dict[str, Any]) -> None:
        def _set(session: Session) -> None:
            session.merge(SystemParameterRecord(name=name, document=dict(values)))
            session.commit()

        await self._db.run(_set)
