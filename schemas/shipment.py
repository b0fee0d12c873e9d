from pydantic import BaseModel
from typing import Optional


class AuditLogOut(BaseModel):
    """Headline figures of the latest audit for a shipment."""
    assessable_value: float
    incentive_amount: float
    ldc_risk_value: float
    risk_score: int
    net_margin: float
    audited_at: Optional[str] = None


class ShipmentOut(BaseModel):
    invoice_no: str
    fob_value: float
    hs_code: Optional[str] = None
    status: str
    lead_time_days: Optional[int] = None

    audit: Optional[AuditLogOut] = None


class RateIn(BaseModel):
    incentive_rate: float


class RateOut(BaseModel):
    category: str
    incentive_rate: float
    source: str  # "db" | "default"


class ChatMessageIn(BaseModel):
    role: str
    content: str


class ChatIn(BaseModel):
    messages: list[ChatMessageIn]
