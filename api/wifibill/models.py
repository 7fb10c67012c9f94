from datetime import datetime

from sqlalchemy import Column, Integer, BigInteger, String, Date, DateTime, Enum, Float, Text, Index

from .database import Base

# Reusable enums
BILL_STATUS_ENUM = Enum("pending", "paid", name="bill_status")
PAYMENT_METHOD_ENUM = Enum("transfer", "cash", name="bill_payment_method")


class CustomerBill(Base):
    __tablename__ = "customer_bills"

    __table_args__ = (
        Index("ix_customer_bills_position", "position"),
    )

    id              = Column(String(64), primary_key=True)
    # ledger (display) order
    position        = Column(Integer, nullable=False, default=0)
    name            = Column(String(200), nullable=False)
    amount          = Column(BigInteger, nullable=False, default=0)
    status          = Column(BILL_STATUS_ENUM, nullable=False, default="pending")
    due_date        = Column(Date, nullable=False)
    created_at      = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    phone_number    = Column(String(50),  nullable=True)
    address         = Column(String(255), nullable=True)
    package_name    = Column(String(120), nullable=True)
    notes           = Column(Text, nullable=True)
    payment_method  = Column(PAYMENT_METHOD_ENUM, nullable=True)
    latitude        = Column(Float, nullable=True)
    longitude       = Column(Float, nullable=True)
    photo_reference = Column(String(255), nullable=True)
