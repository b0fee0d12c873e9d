from schemas.audit import InvoiceAggregate, ValidatedLineItem
from services.calculations import LDC_RISK_RATE, assessable_value
from services.money import round2, safe_amount


INVOICE_TOLERANCE = 2.0

# USD equivalent of the EUR 6,000 EU self-certification (REX) threshold
REX_THRESHOLD_USD = 6480.0


def aggregate_invoice(
    items: list[ValidatedLineItem],
    declared_invoice_total: float,
    *,
    rex_present: bool = False,
    line_math_error: bool = False,
) -> InvoiceAggregate:
    """
    Sum Rule: add the corrected line totals first, then derive AV and risk
    from that single grand total. Never sum per-item AVs or risks for a
    figure labelled "total".
    """
    declared = safe_amount(declared_invoice_total)
    calculated_sum = sum(it.corrected_total for it in items)

    # With no extracted lines there is nothing to reconcile against
    global_math_error = bool(items) and abs(calculated_sum - declared) > INVOICE_TOLERANCE

    true_total_fob = calculated_sum if calculated_sum > 0 else declared

    global_av = round2(assessable_value(true_total_fob))
    global_risk = round2(global_av * LDC_RISK_RATE)

    rex_required = true_total_fob > REX_THRESHOLD_USD

    return InvoiceAggregate(
        declared_total=declared,
        calculated_sum=calculated_sum,
        true_total_fob=true_total_fob,
        global_assessable_value=global_av,
        global_risk_value=global_risk,
        global_math_error=global_math_error,
        math_errors_found=line_math_error or global_math_error or any(it.math_flag for it in items),
        rex_required=rex_required,
        rex_present=rex_present,
        rex_status="MISSING" if rex_required and not rex_present else "N/A",
    )
