from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from models.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), unique=True, nullable=False)

    assessable_value = Column(Float, nullable=False, default=0.0)
    incentive_amount = Column(Float, nullable=False, default=0.0)
    ldc_risk_value = Column(Float, nullable=False, default=0.0)
    risk_score = Column(Integer, nullable=False, default=0)
    net_margin = Column(Float, nullable=False, default=0.0)

    items_hash = Column(String(64), index=True, nullable=True)
    audit_json = Column(JSON, nullable=False, default=dict)  # report blob, stored verbatim

    audited_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    shipment = relationship("Shipment", back_populates="audit")
