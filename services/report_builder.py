from datetime import datetime, timezone
from typing import Any, Optional

from schemas.audit import (
    AdvisorContext,
    AuditedLineItem,
    ComplianceSummary,
    FinancialSummary,
    InvoiceAggregate,
    LogisticsAdvice,
    Report,
    ReportMetadata,
    ShipmentHealth,
    StrategyOutput,
    SustainabilitySummary,
)
from services.calculations import LDC_RISK_RATE_PERCENT
from services.money import round2
from services.strategies import (
    NET_MARGIN_PERCENT,
    drawback_amount,
    efficiency_penalty,
    net_margin_percent,
    resolve_incentive,
    shipment_health_score,
)

_CARBON_RANK = {"Low": 0, "Medium": 1, "High": 2}


def _round_item(item: AuditedLineItem) -> AuditedLineItem:
    update: dict[str, Any] = {
        "declared_total": round2(item.declared_total),
        "corrected_total": round2(item.corrected_total),
    }
    fin = item.financial
    if fin is not None:
        update["financial"] = fin.model_copy(
            update={
                "assessable_value": round2(fin.assessable_value),
                "revenue_at_risk": round2(fin.revenue_at_risk),
                "cbam_liability": fin.cbam_liability.model_copy(
                    update={"liability_eur": round2(fin.cbam_liability.liability_eur)}
                ),
            }
        )
    return item.model_copy(update=update)


def _sustainability(items: list[AuditedLineItem], cbam_total: float) -> SustainabilitySummary:
    impacts = [it.financial.carbon_impact for it in items if it.financial is not None]
    if not impacts:
        return SustainabilitySummary(
            overall_score="Low",
            high_intensity_items=0,
            cbam_applicable=False,
            cbam_liability_eur=cbam_total,
            advice="No priced line items; carbon exposure not assessed.",
        )

    worst = max(impacts, key=lambda c: _CARBON_RANK[c.score])
    return SustainabilitySummary(
        overall_score=worst.score,
        high_intensity_items=sum(1 for c in impacts if c.score == "High"),
        cbam_applicable=any(it.financial.cbam_liability.applicable for it in items if it.financial is not None),
        cbam_liability_eur=cbam_total,
        advice=worst.advice,
    )


def build_report(
    *,
    metadata: dict,
    items: list[AuditedLineItem],
    aggregate: InvoiceAggregate,
    ctx: AdvisorContext,
    recommendations: list[StrategyOutput],
    logistics: LogisticsAdvice,
    extraction_error: Optional[str] = None,
    generated_at: Optional[str] = None,
) -> Report:
    """
    Single rounding boundary: every currency figure computed upstream in full
    precision is rounded here exactly once. Global AV / risk arrive already
    rounded by the aggregator and are carried as-is.
    """
    true_total_fob = round2(aggregate.true_total_fob)
    declared_total = round2(aggregate.declared_total)
    calculated_total = round2(aggregate.calculated_sum)

    rounded_recs = [r.model_copy(update={"savings": round2(r.savings)}) for r in recommendations]

    rate, incentive_raw, _ = resolve_incentive(aggregate, ctx)
    drawback_raw = drawback_amount(aggregate)
    total_incentives = round2(incentive_raw) if rate > 0 else 0.0
    duty_drawback = round2(drawback_raw)

    priced = [it for it in items if it.financial is not None]
    cbam_total = round2(sum(it.financial.cbam_liability.liability_eur for it in priced))
    risk_score = max((it.financial.ldc_risk_score for it in priced), default=0)
    current_tti = priced[0].financial.duty_rate if priced else 0.0

    penalty = efficiency_penalty(ctx)
    margin = round2(net_margin_percent(ctx))

    extraction_incomplete = not items or aggregate.true_total_fob <= 0
    invalid_items = sum(1 for it in items if not it.compliance.valid)

    signals = ctx.signals

    return Report(
        metadata=ReportMetadata(
            invoice_number=metadata.get("invoice_number"),
            date=metadata.get("invoice_date"),
            origin=metadata.get("origin"),
            destination=metadata.get("destination"),
            buyer_details=metadata.get("buyer_details"),
            total_invoice_value=declared_total,
            generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
            extraction_incomplete=extraction_incomplete,
            extraction_error=extraction_error,
        ),
        compliance_summary=ComplianceSummary(
            sum_check_passed=not aggregate.global_math_error,
            calculated_total=calculated_total,
            declared_total=declared_total,
            true_total_fob=true_total_fob,
            math_errors_found=aggregate.math_errors_found,
            risk_level="High" if aggregate.math_errors_found or aggregate.rex_status == "MISSING" else "Low",
            rex_required=aggregate.rex_required,
            rex_present=aggregate.rex_present,
            rex_status=aggregate.rex_status,
            invalid_items=invalid_items,
            extraction_incomplete=extraction_incomplete,
        ),
        line_items=[_round_item(it) for it in items],
        financial_summary=FinancialSummary(
            true_total_fob=true_total_fob,
            total_assessable_value=aggregate.global_assessable_value,
            total_revenue_risk=aggregate.global_risk_value,
            incentive_rate_percent=round2(rate * 100),
            total_incentives=total_incentives,
            duty_drawback=duty_drawback,
            total_benefit=round2(incentive_raw + drawback_raw),
            efficiency_penalty_percent=penalty,
            net_margin_percent=margin,
            margin_status="HEDGED" if margin >= NET_MARGIN_PERCENT else "AT RISK",
            ldc_graduation_risk_score=risk_score,
            current_tti_rate=current_tti,
            future_tti_rate=round2(current_tti + LDC_RISK_RATE_PERCENT) if priced else 0.0,
            cbam_liability_eur=cbam_total,
        ),
        recommendations=rounded_recs,
        logistics=logistics.model_copy(
            update={
                "air_cost": round2(logistics.air_cost),
                "sea_cost": round2(logistics.sea_cost),
                "savings": round2(logistics.savings),
            }
        ),
        shipment_health=ShipmentHealth(
            road=signals.road,
            sea=signals.sea,
            weather=signals.weather,
            road_delay_hours=signals.road_delay_hours,
            overall_score=shipment_health_score(signals),
        ),
        sustainability=_sustainability(items, cbam_total),
    )
