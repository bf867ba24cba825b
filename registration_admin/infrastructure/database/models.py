"""SQLAlchemy ORM models for the registration tables"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Prospectus(Base):
    """Lead that has advanced to contracting"""

    __tablename__ = "prospectus"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_id = Column(Integer, nullable=True, index=True)
    client_name = Column(Text, nullable=True)
    reg_id = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(String(32), nullable=True)
    department = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    tech_person = Column(Text, nullable=True)
    requirement = Column(Text, nullable=True)
    isregistered = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PaymentTransaction(Base):
    """Payment record owned by exactly one registration"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_type = Column(Text, nullable=True)
    transaction_id = Column(Text, nullable=True)  # external payment reference
    amount = Column(Float, nullable=False, default=0)
    transaction_date = Column(Date, nullable=True)
    additional_info = Column(Text, nullable=True)
    entity_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)


class BankAccount(Base):
    """Receiving bank account"""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_name = Column(Text, nullable=False)
    account_holder_name = Column(Text, nullable=False)
    account_number = Column(Text, nullable=False)
    ifsc_code = Column(Text, nullable=False)
    account_type = Column(Text, nullable=True)
    bank = Column(Text, nullable=False)
    upi_id = Column(Text, nullable=True)
    branch = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Service(Base):
    """Offered service"""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Registration(Base):
    """Client registration; owns its transaction"""

    __tablename__ = "registration"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prospectus_id = Column(Integer, ForeignKey("prospectus.id"), nullable=False, index=True)
    # Transaction is deleted before its registration; the reference is cleared, not cascaded
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)
    services = Column(JSON, nullable=True)
    init_amount = Column(Float, nullable=True)
    accept_amount = Column(Float, nullable=True)
    discount = Column(Float, nullable=True)
    total_amount = Column(Float, nullable=True)
    accept_period = Column(Text, nullable=True)
    pub_period = Column(Text, nullable=True)
    month = Column(Text, nullable=True)
    year = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="pending")
    assigned_to = Column(Integer, nullable=True, index=True)
    admin_assigned = Column(Boolean, nullable=False, default=False)
    bank_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    notes = Column(Text, nullable=True)
    registered_by = Column(Integer, nullable=True)
    client_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)


MODELS_BY_TABLE = {
    model.__tablename__: model
    for model in (Prospectus, PaymentTransaction, BankAccount, Service, Registration)
}
