"""
Financial compliance engine entry point.

raw line items -> validated -> per-item financials -> aggregate (barrier)
-> advisors -> report. No I/O happens here.
"""
from typing import Any, Optional

from schemas.audit import (
    AdvisorContext,
    AuditContext,
    AuditedLineItem,
    ItemCompliance,
    LdcImpact,
    LineItem,
    Report,
    ValidatedLineItem,
)
from services.aggregator import aggregate_invoice
from services.calculations import compute_item_financials, is_textile_or_apparel
from services.math_validator import validate_items
from services.money import safe_amount
from services.report_builder import build_report
from services.strategies import logistics_advice, run_advisors
from services.tariffs import effective_hs_code, hs_chapter, is_estimated_code, lookup_tariff

RAW_FABRIC_CHAPTERS = ("52", "55")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def line_items_from_extraction(raw_items: list[dict] | None) -> list[LineItem]:
    """Map extractor rows to typed LineItems; malformed numbers become 0."""
    out: list[LineItem] = []
    for it in raw_items or []:
        if not isinstance(it, dict):
            continue
        out.append(
            LineItem(
                description=_text(it.get("description")) or "",
                hs_code=_text(it.get("hs_code")),
                estimated_hs_code=_text(it.get("estimated_hs_code")),
                quantity=safe_amount(it.get("quantity")),
                unit_price=safe_amount(it.get("unit_price")),
                declared_total=safe_amount(it.get("total_price")),
                net_weight_kg=safe_amount(it.get("net_weight")),
            )
        )
    return out


def _ldc_impact(hs_code: str | None) -> LdcImpact | None:
    if is_textile_or_apparel(hs_code):
        return LdcImpact(
            impacted=True,
            double_transformation_required=True,
            note="Review for 2026 Graduation: EU GSP double transformation applies to apparel",
        )
    if hs_chapter(hs_code) in RAW_FABRIC_CHAPTERS:
        return LdcImpact(
            impacted=False,
            double_transformation_required=True,
            note="Imported fabric: verify local yarn-to-fabric stage for origin",
        )
    return None


def audit_line_item(item: ValidatedLineItem) -> AuditedLineItem:
    """Tariff lookup + financials for one line; independent of every other line."""
    hs_code = effective_hs_code(item)
    estimated = is_estimated_code(item)

    if not hs_code:
        return AuditedLineItem(
            **item.model_dump(include=set(ValidatedLineItem.model_fields)),
            compliance=ItemCompliance(valid=False, is_estimated=estimated, note="HS Code Missing & Inference Failed"),
        )

    tariff = lookup_tariff(hs_code, item.description)
    if tariff is None:
        return AuditedLineItem(
            **item.model_dump(include=set(ValidatedLineItem.model_fields)),
            compliance=ItemCompliance(
                valid=False, hs_code_used=hs_code, is_estimated=estimated, note="HS Code not found"
            ),
            ldc_impact=_ldc_impact(hs_code),
        )

    desc = item.description.lower()
    compliance = ItemCompliance(
        valid=not tariff.is_correction,
        hs_code_used=tariff.hs_code if tariff.is_correction else hs_code,
        is_estimated=estimated,
        tariff_rate=tariff.duty_rate_percent,
        description_match=(desc in tariff.description.lower()) if desc else None,
        correction_suggestion=tariff.correction_note if tariff.is_correction else None,
        note=None if tariff.is_correction else tariff.correction_note,
    )

    return AuditedLineItem(
        **item.model_dump(include=set(ValidatedLineItem.model_fields)),
        compliance=compliance,
        financial=compute_item_financials(item, tariff),
        ldc_impact=_ldc_impact(hs_code),
    )


def run_audit(
    line_items: list[LineItem],
    declared_invoice_total: float,
    context: AuditContext,
    *,
    metadata: dict | None = None,
    extraction_error: Optional[str] = None,
    generated_at: Optional[str] = None,
) -> Report:
    validated, line_math_error = validate_items(line_items)

    audited = [audit_line_item(it) for it in validated]

    # Barrier: needs every corrected total
    aggregate = aggregate_invoice(
        validated,
        declared_invoice_total,
        rex_present=context.rex_present,
        line_math_error=line_math_error,
    )

    priced = [it for it in audited if it.financial is not None]
    advisor_ctx = AdvisorContext(
        **context.model_dump(include=set(AuditContext.model_fields)),
        product_description=" ".join(it.description for it in audited if it.description),
        erp_recommendation=priced[0].financial.erp_analysis.recommendation if priced else None,
        cbam_applicable=any(it.financial.cbam_liability.applicable for it in priced),
        cbam_liability_eur=sum(it.financial.cbam_liability.liability_eur for it in priced),
    )

    return build_report(
        metadata=metadata or {},
        items=audited,
        aggregate=aggregate,
        ctx=advisor_ctx,
        recommendations=run_advisors(aggregate, advisor_ctx),
        logistics=logistics_advice(aggregate, advisor_ctx),
        extraction_error=extraction_error,
        generated_at=generated_at,
    )
