"""SQLAlchemy models for caixa database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    bank_code = Column(String, nullable=False, default="")
    agency = Column(String, nullable=False, default="")
    account_number = Column(String, nullable=False, default="")
    initial_balance = Column(Numeric(12, 2), nullable=False, default=0)
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    is_primary = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="bank_account")
    statement_lines = relationship(
        "BankStatementLine", back_populates="bank_account", cascade="all, delete-orphan"
    )


class CategoryType(Base):
    """Category model mapped onto an income statement group."""

    __tablename__ = "category_types"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    type = Column(String, nullable=False)
    dre_group = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class CostCenter(Base):
    """Cost center model."""

    __tablename__ = "cost_centers"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class Transaction(Base):
    """Transaction model.

    Category and cost center are referenced by name, matching the domain
    entity; renaming a category rewrites the name here.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False, default="")
    category = Column(String, nullable=True, index=True)
    competence_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="pending")
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    supplier = Column(String, nullable=True)
    cost_center = Column(String, nullable=True)
    invoice_number = Column(String, nullable=True)
    reconciled = Column(Boolean, default=False, nullable=False)
    transfer_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    bank_account = relationship("BankAccount", back_populates="transactions")


class BankStatementLine(Base):
    """Bank statement line model."""

    __tablename__ = "bank_statement_lines"

    id = Column(Integer, primary_key=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    transaction_date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    reconciled = Column(Boolean, default=False, nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    fit_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # FITIDs are unique per account
    __table_args__ = (
        UniqueConstraint("bank_account_id", "fit_id", name="uq_statement_account_fit_id"),
    )

    # Relationships
    bank_account = relationship("BankAccount", back_populates="statement_lines")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
