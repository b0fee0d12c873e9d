from schemas.audit import LineItem, LineMathCheck, ValidatedLineItem
from services.money import safe_amount


# Absorbs rounding noise printed on the source document (currency units)
LINE_TOLERANCE = 1.0


def validate_line_math(qty: float, unit_price: float, declared_total: float) -> LineMathCheck:
    """
    qty x unit_price vs printed line total.
    On mismatch the unit arithmetic wins.
    """
    qty = safe_amount(qty)
    unit_price = safe_amount(unit_price)
    declared_total = safe_amount(declared_total)

    expected = qty * unit_price
    if abs(expected - declared_total) <= LINE_TOLERANCE:
        return LineMathCheck(is_valid=True, corrected_total=declared_total)
    return LineMathCheck(is_valid=False, corrected_total=expected)


def validate_items(items: list[LineItem]) -> tuple[list[ValidatedLineItem], bool]:
    """
    Pure fold: items -> (validated items, any line math error).
    Every numeric field leaves here finite and non-negative (NaN / negatives -> 0).
    """
    validated: list[ValidatedLineItem] = []
    math_error = False

    for it in items:
        check = validate_line_math(it.quantity, it.unit_price, it.declared_total)
        math_error = math_error or not check.is_valid
        validated.append(
            ValidatedLineItem(
                description=it.description,
                hs_code=it.hs_code,
                estimated_hs_code=it.estimated_hs_code,
                quantity=safe_amount(it.quantity),
                unit_price=safe_amount(it.unit_price),
                declared_total=safe_amount(it.declared_total),
                net_weight_kg=safe_amount(it.net_weight_kg),
                corrected_total=check.corrected_total,
                math_flag=not check.is_valid,
            )
        )

    return validated, math_error
