"""
Per-item financial calculator.

Regulatory constants for the 2026 rule set are fixed here on purpose:
no database row or request parameter can change them.

  AV   = (FOB x 1.01) x 1.01        insurance 1% then landing 1%
  Risk = AV x 0.119                  LDC graduation MFN jump
"""
import re

from schemas.audit import (
    CarbonImpact,
    CbamLiability,
    ErpAnalysis,
    ItemFinancialResult,
    TariffRecord,
    ValidatedLineItem,
)
from services.tariffs import effective_hs_code, hs_chapter


AV_UPLIFT = 1.01
LDC_RISK_RATE = 0.119
LDC_RISK_RATE_PERCENT = 11.9

# Raw-material input tariff used as the ERP baseline
RAW_MATERIAL_INPUT_TARIFF = 15.0

TEXTILE_APPAREL_CHAPTERS = ("61", "62")
HIGH_CARBON_CHAPTERS = ("39", "42", "61", "64")

CBAM_ANNEX_I = ("cement", "iron", "steel", "aluminum", "fertilizer", "electricity", "hydrogen")
CBAM_EMISSION_FACTOR = 1.8      # tCO2e per tonne
CBAM_CARBON_PRICE_EUR = 85.0    # EUR per tCO2e
CBAM_VALUE_FALLBACK_RATE = 0.05

_MEDIUM_MATERIALS = re.compile(r"synthetic|polyester|\bpu\b")
_LOW_MATERIALS = re.compile(r"cotton|leather")
_HIGH_MATERIALS = re.compile(r"cement|steel|fertilizer")


def assessable_value(fob_value: float) -> float:
    """Exactly two compounding 1% charges; never estimated, never rounded here."""
    return (fob_value * AV_UPLIFT) * AV_UPLIFT


def revenue_at_risk(av: float) -> float:
    return av * LDC_RISK_RATE


def is_textile_or_apparel(hs_code: str | None) -> bool:
    return hs_chapter(hs_code) in TEXTILE_APPAREL_CHAPTERS


def ldc_risk_score(current_rate: float, future_rate: float, apparel_bump: bool) -> int:
    delta = future_rate - current_rate
    if delta <= 0:
        score = 1
    elif delta < 5:
        score = 3
    elif delta < 10:
        score = 5
    elif delta < 15:
        score = 7
    else:
        score = 9

    if apparel_bump:
        score += 1

    return min(10, max(1, score))


def erp_analysis(input_tariff: float, output_tariff: float) -> ErpAnalysis:
    if input_tariff > output_tariff:
        return ErpAnalysis(
            classification="Negative Protection (Duty Inversion)",
            recommendation=(
                "Use Bonded Warehouse to import raw materials duty-free. "
                "Current structure penalizes local value addition."
            ),
        )
    return ErpAnalysis(
        classification="Positive Protection",
        recommendation="Standard import procedure is acceptable. Local manufacturing is protected.",
    )


def cbam_liability(description: str, weight_kg: float, hs_code: str | None, corrected_total: float) -> CbamLiability:
    desc = (description or "").lower()
    is_annex_i = any(k in desc for k in CBAM_ANNEX_I)
    chapter_override = hs_chapter(hs_code) in HIGH_CARBON_CHAPTERS

    if not is_annex_i and not chapter_override:
        return CbamLiability(applicable=False, liability_eur=0.0, note="Not Annex I")

    weight_tonnes = weight_kg / 1000
    liability = weight_tonnes * CBAM_EMISSION_FACTOR * CBAM_CARBON_PRICE_EUR
    note = f"CBAM Annex I Good ({weight_tonnes:.2f}T * {CBAM_EMISSION_FACTOR} factor * EUR {CBAM_CARBON_PRICE_EUR:g})"

    if liability == 0 and chapter_override:
        liability = corrected_total * CBAM_VALUE_FALLBACK_RATE
        note = f"High-carbon HS chapter {hs_chapter(hs_code)}: {CBAM_VALUE_FALLBACK_RATE:.0%} of line value"

    return CbamLiability(applicable=True, liability_eur=liability, note=note)


def carbon_impact(material: str, hs_code: str | None) -> CarbonImpact:
    mat = (material or "").lower()

    score, intensity = "Low", 5.5
    if _MEDIUM_MATERIALS.search(mat):
        score, intensity = "Medium", 12.5
    elif _LOW_MATERIALS.search(mat):
        score, intensity = "Low", 8.2
    elif _HIGH_MATERIALS.search(mat):
        score, intensity = "High", 25.0

    if hs_chapter(hs_code) in HIGH_CARBON_CHAPTERS:
        score = "High"

    if score == "High":
        advice = "CRITICAL: Switch suppliers immediately. High CBAM Levy Risk."
    elif score == "Medium":
        advice = "Switch to Recycled Materials (e.g., Ocean Plastic) to reduce carbon scoring."
    else:
        advice = "Maintain current sustainable sourcing."

    return CarbonImpact(score=score, intensity=intensity, advice=advice)


def compute_item_financials(item: ValidatedLineItem, tariff: TariffRecord) -> ItemFinancialResult:
    """
    Full-precision figures for one validated line.
    Callers must not invoke this without a tariff record.
    """
    hs_code = effective_hs_code(item)
    av = assessable_value(item.corrected_total)

    current_rate = tariff.duty_rate_percent
    future_rate = current_rate + LDC_RISK_RATE_PERCENT
    score = ldc_risk_score(current_rate, future_rate, is_textile_or_apparel(hs_code))

    return ItemFinancialResult(
        assessable_value=av,
        duty_rate=current_rate,
        revenue_at_risk=revenue_at_risk(av),
        ldc_risk_score=score,
        erp_analysis=erp_analysis(RAW_MATERIAL_INPUT_TARIFF, current_rate),
        cbam_liability=cbam_liability(item.description, item.net_weight_kg, hs_code, item.corrected_total),
        carbon_impact=carbon_impact(item.description, hs_code),
    )
