"""SQLAlchemy models for the momoetl ledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    Enum,
    CheckConstraint,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from momoetl.domain.entities import (
    PartyType,
    AccountType,
    TransactionStatus,
    FeeType,
    LogLevel,
)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _enum(enum_class, name: str) -> Enum:
    # Store the human-readable values ("Completed"), not the member names
    return Enum(
        enum_class,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class Party(Base):
    """Party (individual, business or agent) model."""

    __tablename__ = "parties"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    party_type = Column(_enum(PartyType, "party_type"), nullable=False)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)
    national_id = Column(String(50), unique=True, nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("length(phone_number) >= 10", name="ck_party_phone_length"),
    )

    # Relationships
    accounts = relationship("Account", back_populates="party", cascade="all, delete-orphan")


class Account(Base):
    """Balance-bearing account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    account_type = Column(_enum(AccountType, "account_type"), default=AccountType.WALLET, nullable=False)
    currency = Column(String(3), nullable=False)
    current_balance = Column(Numeric(15, 2), default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("current_balance >= 0", name="ck_account_balance_non_negative"),
    )

    # Relationships
    party = relationship("Party", back_populates="accounts")


class Category(Base):
    """Transaction category model."""

    __tablename__ = "transaction_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_code = Column(String(50), unique=True, nullable=False, index=True)
    sender_account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    receiver_account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("transaction_categories.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(_enum(TransactionStatus, "transaction_status"), default=TransactionStatus.PENDING, nullable=False, index=True)
    transaction_timestamp = Column(DateTime, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    reversal_of_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        CheckConstraint("sender_account_id != receiver_account_id", name="ck_transaction_distinct_accounts"),
    )

    # Relationships
    sender_account = relationship("Account", foreign_keys=[sender_account_id])
    receiver_account = relationship("Account", foreign_keys=[receiver_account_id])
    category = relationship("Category", back_populates="transactions")
    fees = relationship("Fee", back_populates="transaction", cascade="all, delete-orphan", passive_deletes=True)
    tags = relationship("TransactionTag", back_populates="transaction", cascade="all, delete-orphan", passive_deletes=True)


class Fee(Base):
    """Fee charged on a transaction."""

    __tablename__ = "fees"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_amount = Column(Numeric(15, 2), nullable=False)
    fee_type = Column(_enum(FeeType, "fee_type"), nullable=False)
    fee_percentage = Column(Numeric(5, 3), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("fee_amount >= 0", name="ck_fee_amount_non_negative"),
    )

    # Relationships
    transaction = relationship("Transaction", back_populates="fees")


class ProcessingLog(Base):
    """Append-only processing log entry."""

    __tablename__ = "processing_logs"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True, index=True)
    log_level = Column(_enum(LogLevel, "log_level"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    log_timestamp = Column(DateTime, default=_utcnow, nullable=False, index=True)
    process_name = Column(String(100), nullable=True, index=True)
    status = Column(String(50), nullable=True)
    reference_code = Column(String(50), nullable=True, index=True)
    batch_id = Column(String(32), nullable=True, index=True)


class Tag(Base):
    """Tag label model."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)

    # Relationships
    assignments = relationship("TransactionTag", back_populates="tag", cascade="all, delete-orphan")


class TransactionTag(Base):
    """Join entity between transactions and tags."""

    __tablename__ = "transaction_tags"

    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
    assigned_at = Column(DateTime, default=_utcnow, nullable=False)
    assigned_by = Column(String(100), nullable=True)

    __table_args__ = (UniqueConstraint("transaction_id", "tag_id", name="uq_transaction_tag"),)

    # Relationships
    transaction = relationship("Transaction", back_populates="tags")
    tag = relationship("Tag", back_populates="assignments")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement for SQLite connections."""
    module = type(dbapi_connection).__module__
    if module.startswith("sqlite3") or module.startswith("pysqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Worker threads share the engine; wait on the file lock instead of failing
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
