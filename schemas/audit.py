from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# -------------------------
# Engine input
# -------------------------

class LineItem(_Frozen):
    description: str = ""
    hs_code: Optional[str] = None
    estimated_hs_code: Optional[str] = None
    quantity: float = 0.0
    unit_price: float = 0.0
    declared_total: float = 0.0
    net_weight_kg: float = 0.0


class ValidatedLineItem(LineItem):
    corrected_total: float
    math_flag: bool = False


class LineMathCheck(_Frozen):
    is_valid: bool
    corrected_total: float


class TariffRecord(_Frozen):
    hs_code: str
    description: str
    duty_rate_percent: float  # TTI
    cd: float = 0.0
    sd: float = 0.0
    vat: float = 0.0
    ait: float = 0.0
    at: float = 0.0
    rd: float = 0.0
    is_correction: bool = False
    correction_note: Optional[str] = None
    original_code: Optional[str] = None


# -------------------------
# Per-item results
# -------------------------

class ErpAnalysis(_Frozen):
    classification: str
    recommendation: str


class CbamLiability(_Frozen):
    applicable: bool
    liability_eur: float = 0.0
    note: str = ""


CarbonScore = Literal["Low", "Medium", "High"]


class CarbonImpact(_Frozen):
    score: CarbonScore
    intensity: float
    unit: str = "kg CO2e/unit"
    advice: str


class ItemFinancialResult(_Frozen):
    assessable_value: float
    duty_rate: float
    revenue_at_risk: float
    ldc_risk_score: int = Field(ge=1, le=10)
    erp_analysis: ErpAnalysis
    cbam_liability: CbamLiability
    carbon_impact: CarbonImpact


class ItemCompliance(_Frozen):
    valid: bool
    hs_code_used: Optional[str] = None
    is_estimated: bool = False
    tariff_rate: Optional[float] = None
    description_match: Optional[bool] = None
    correction_suggestion: Optional[str] = None
    note: Optional[str] = None


class LdcImpact(_Frozen):
    impacted: bool
    double_transformation_required: bool
    note: str


class AuditedLineItem(ValidatedLineItem):
    compliance: ItemCompliance
    financial: Optional[ItemFinancialResult] = None
    ldc_impact: Optional[LdcImpact] = None


# -------------------------
# Aggregate + advisors
# -------------------------

class InvoiceAggregate(_Frozen):
    declared_total: float
    calculated_sum: float
    true_total_fob: float
    global_assessable_value: float
    global_risk_value: float
    global_math_error: bool
    math_errors_found: bool
    rex_required: bool
    rex_present: bool
    rex_status: Literal["MISSING", "N/A"]


RoadStatus = Literal["Clear", "Congested", "Unknown"]
SeaStatus = Literal["Smooth", "Delayed", "At Anchor", "Unknown"]
WeatherStatus = Literal["Safe", "Storm", "Unknown"]


class LogisticsSignals(_Frozen):
    """Discrete sensor readings; 'Unknown' whenever a feed is unreachable."""
    road: RoadStatus = "Unknown"
    sea: SeaStatus = "Unknown"
    weather: WeatherStatus = "Unknown"
    road_delay_hours: Optional[float] = None


class AuditContext(_Frozen):
    incentive_rate: float = 0.08
    signals: LogisticsSignals = LogisticsSignals()
    rex_present: bool = False
    road_delay_critical_hours: float = 6.0


class AdvisorContext(AuditContext):
    """AuditContext plus the per-item facts advisors are allowed to read."""
    product_description: str = ""
    erp_recommendation: Optional[str] = None
    cbam_applicable: bool = False
    cbam_liability_eur: float = 0.0


StrategyType = Literal["Logistics", "Incentive", "Drawback", "Compliance", "Strategic", "Math Integrity"]


class StrategyOutput(_Frozen):
    type: StrategyType
    advice: str
    savings: float = Field(0.0, ge=0.0)


class LogisticsAdvice(_Frozen):
    recommended: Literal["Air", "Sea"]
    air_cost: float
    sea_cost: float
    savings: float
    lead_time_days: int
    message: str


# -------------------------
# Report
# -------------------------

class ReportMetadata(_Frozen):
    invoice_number: Optional[str] = None
    date: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    buyer_details: Optional[str] = None
    total_invoice_value: float = 0.0
    generated_at: str
    extraction_incomplete: bool = False
    extraction_error: Optional[str] = None


class ComplianceSummary(_Frozen):
    sum_check_passed: bool
    calculated_total: float
    declared_total: float
    true_total_fob: float
    math_errors_found: bool
    risk_level: Literal["Low", "High"]
    rex_required: bool
    rex_present: bool
    rex_status: Literal["MISSING", "N/A"]
    invalid_items: int = 0
    extraction_incomplete: bool = False


class FinancialSummary(_Frozen):
    true_total_fob: float
    total_assessable_value: float
    total_revenue_risk: float
    incentive_rate_percent: float
    total_incentives: float
    duty_drawback: float
    total_benefit: float
    efficiency_penalty_percent: float
    net_margin_percent: float
    margin_status: Literal["HEDGED", "AT RISK"]
    ldc_graduation_risk_score: int
    current_tti_rate: float
    future_tti_rate: float
    cbam_liability_eur: float


class ShipmentHealth(_Frozen):
    road: RoadStatus
    sea: SeaStatus
    weather: WeatherStatus
    road_delay_hours: Optional[float] = None
    overall_score: int


class SustainabilitySummary(_Frozen):
    overall_score: CarbonScore
    high_intensity_items: int
    cbam_applicable: bool
    cbam_liability_eur: float
    advice: str


class Report(_Frozen):
    metadata: ReportMetadata
    compliance_summary: ComplianceSummary
    line_items: List[AuditedLineItem] = []
    financial_summary: FinancialSummary
    recommendations: List[StrategyOutput] = []
    logistics: LogisticsAdvice
    shipment_health: ShipmentHealth
    sustainability: SustainabilitySummary
    sync_status: Optional[str] = None


# -------------------------
# HTTP payloads
# -------------------------

class ExtractedLineItemIn(BaseModel):
    description: Optional[str] = None
    hs_code: Optional[str] = None
    estimated_hs_code: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    net_weight: Optional[float] = None


class ExtractedInvoiceIn(BaseModel):
    """Same shape the document extractor returns; lets callers skip OCR."""
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    buyer_details: Optional[str] = None
    invoice_total: Optional[float] = None
    line_items: List[ExtractedLineItemIn] = []
    rex_statement_present: bool = False
    document_text: Optional[str] = None
