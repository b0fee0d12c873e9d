from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from models.base import Base


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True)
    invoice_no = Column(String(140), unique=True, index=True, nullable=False)  # natural idempotency key
    fob_value = Column(Float, nullable=False, default=0.0)
    hs_code = Column(String(32), nullable=True)  # single code or "MIXED"
    status = Column(String(32), index=True, nullable=False, default="Audited")

    lead_time_days = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    audit = relationship("AuditLog", back_populates="shipment", uselist=False, cascade="all, delete-orphan")
