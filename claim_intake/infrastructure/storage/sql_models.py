"""SQLAlchemy tables backing the SQL claim store."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ClaimRecord(Base):
    __tablename__ = "claims"
    # Enforces one claim per distinct content; the registry relies on it.
    __table_args__ = (UniqueConstraint("type", "dedup_hash", name="uq_claims_type_dedup"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False)

    type = Column(String(16), nullable=False)
    dedup_hash = Column(
        String(64),   # sha256 of the dedup key, keeps the index small for long texts
        nullable=False
    )
    dedup_key = Column(Text, nullable=False)

    category = Column(String(32), nullable=False)
    content = Column(Text, nullable=True)
    fingerprint = Column(String(64), nullable=True)
    first_seen_at = Column(DateTime(timezone=True), nullable=False)

    poll_started = Column(Boolean, nullable=False, default=False)
    assessed = Column(Boolean, nullable=False, default=False)
    truth_score = Column(Float, nullable=True)
    is_irrelevant = Column(Boolean, nullable=True)
    is_scam = Column(Boolean, nullable=True)
    custom_reply = Column(Text, nullable=True)

    media_ref = Column(String(128), nullable=True)
    mime_type = Column(String(64), nullable=True)
    storage_location = Column(String(256), nullable=True)


class InstanceRecord(Base):
    __tablename__ = "instances"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False)
    claim_id = Column(
        String(32),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    source = Column(String(16), nullable=False)
    delivery_id = Column(String(128), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    type = Column(String(16), nullable=False)
    content = Column(Text, nullable=True)
    sender = Column(String(32), nullable=True)
    forwarded = Column(Boolean, nullable=True)
    frequently_forwarded = Column(Boolean, nullable=True)
    replied = Column(Boolean, nullable=False, default=False)

    fingerprint = Column(String(64), nullable=True)
    media_ref = Column(String(128), nullable=True)
    mime_type = Column(String(64), nullable=True)


class SystemParameterRecord(Base):
    __tablename__ = "system_parameters"

    name = Column(String(64), primary_key=True)
    document = Column(JSON, nullable=False)
