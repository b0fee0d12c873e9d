from sqlalchemy import Column, Integer, Float, String, DateTime
from sqlalchemy.sql import func

from models.base import Base


class RegulatoryRate(Base):
    __tablename__ = "regulatory_rates"

    id = Column(Integer, primary_key=True)
    category = Column(String(64), unique=True, nullable=False)  # e.g. "General", "Textile"
    incentive_rate = Column(Float, nullable=False, default=0.08)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
