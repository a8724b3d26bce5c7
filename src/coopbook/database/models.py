"""SQLAlchemy models for coopbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class PaymentMethod(Base):
    """Payment method model."""

    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    method_type = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    transactions = relationship("Transaction", back_populates="payment_method")


class Category(Base):
    """Category model. Rule blobs are stored as JSON."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    transaction_type = Column(String, nullable=False, default="expense")
    color = Column(String, nullable=True)
    auto_classification_rules = Column(JSON, nullable=True)
    validation_rules = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    patterns = relationship("Pattern", back_populates="category", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="category")


class Pattern(Base):
    """Classification pattern model."""

    __tablename__ = "bank_withdrawal_patterns"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    description_pattern = Column(String(500), nullable=False)
    amount_range_min = Column(Numeric(15, 2), nullable=True)
    amount_range_max = Column(Numeric(15, 2), nullable=True)
    frequency = Column(String, nullable=False, default="irregular")
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    confidence_score = Column(Integer, nullable=False, default=80)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    category = relationship("Category", back_populates="patterns")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(String, nullable=False)
    transaction_type = Column(String, nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    payment_method_id = Column(Integer, ForeignKey("payment_methods.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="transactions")
    payment_method = relationship("PaymentMethod", back_populates="transactions")


class ClassificationLog(Base):
    """Ledger of submissions that kept (or were logged against) a suggestion."""

    __tablename__ = "classification_logs"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    suggested_category_id = Column(Integer, nullable=True)
    actual_category_id = Column(Integer, nullable=False)
    confidence_score = Column(Float, nullable=False, default=0.0)
    pattern_matched = Column(String, nullable=True)
    is_manual_override = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("confidence_score >= 0 AND confidence_score <= 100", name="ck_classification_confidence"),
    )


class ManualOverrideLog(Base):
    """Ledger of submissions whose category differs from the suggestion."""

    __tablename__ = "manual_override_logs"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    original_category_id = Column(Integer, nullable=True)
    new_category_id = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    confidence_score = Column(Float, nullable=False, default=0.0)
    pattern_matched = Column(String, nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("confidence_score >= 0 AND confidence_score <= 100", name="ck_override_confidence"),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
