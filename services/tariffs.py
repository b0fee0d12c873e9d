from schemas.audit import LineItem, TariffRecord


PENDING = "Pending"
SPORTS_FOOTWEAR_CODE = "6404.11.00"
OTHER_FOOTWEAR_PREFIX = "640590"
FOOTWEAR_CHAPTER = "64"

_SPORTS_HINTS = ("shoe", "boot", "sports", "running")

# Static offline table (2026 schedule, footwear lines we audit most)
TARIFF_TABLE: dict[str, TariffRecord] = {
    "6404.11.00": TariffRecord(
        hs_code="6404.11.00",
        description="Sports footwear; tennis shoes, basketball shoes, gym shoes, training shoes and the like",
        cd=25.0, sd=0.0, vat=15.0, ait=5.0, at=5.0, rd=3.0,
        duty_rate_percent=58.60,
    ),
    "6405.90.00": TariffRecord(
        hs_code="6405.90.00",
        description="Other footwear",
        cd=25.0, sd=20.0, vat=15.0, ait=5.0, at=5.0, rd=3.0,
        duty_rate_percent=89.42,
    ),
}


def normalize_hs_code(hs_code: str | None) -> str:
    """
    Strip separators: '6404.11.00' -> '640411'.
    Empty national suffixes ('00' pairs past the 6-digit subheading) are dropped,
    so '6404.11.00' and '640411' resolve to the same line.
    """
    if not hs_code:
        return ""
    digits = "".join(ch for ch in str(hs_code) if ch.isdigit())
    while len(digits) > 6 and digits.endswith("00"):
        digits = digits[:-2]
    return digits


def hs_chapter(hs_code: str | None) -> str:
    return normalize_hs_code(hs_code)[:2]


def effective_hs_code(item: LineItem) -> str | None:
    """Declared code wins; the extractor's estimate is used only when declared is absent or 'Pending'."""
    declared = (item.hs_code or "").strip()
    if declared and declared.lower() != PENDING.lower():
        return declared
    estimated = (item.estimated_hs_code or "").strip()
    return estimated or None


def is_estimated_code(item: LineItem) -> bool:
    declared = (item.hs_code or "").strip()
    return not declared or declared.lower() == PENDING.lower()


def _is_synthetic_sports_shoe(description: str) -> bool:
    desc = (description or "").lower()
    return "synthetic" in desc and any(h in desc for h in _SPORTS_HINTS)


def lookup_tariff(hs_code: str | None, description: str = "") -> TariffRecord | None:
    """
    Resolve an HS code (+ description) to a duty-rate record.

    Order:
      1) forced correction: synthetic sports shoe declared as "other footwear"
      2) exact match on the normalized code
      3) chapter 64 generic footwear rate
    None means "compliance unknown" (never zero duty).
    """
    code = normalize_hs_code(hs_code)
    if not code:
        return None

    if code.startswith(OTHER_FOOTWEAR_PREFIX) and _is_synthetic_sports_shoe(description):
        correct = TARIFF_TABLE[SPORTS_FOOTWEAR_CODE]
        return correct.model_copy(
            update={
                "is_correction": True,
                "original_code": str(hs_code),
                "correction_note": f"Invalid HS Code for Synthetic Sports Shoes. Use {SPORTS_FOOTWEAR_CODE}",
            }
        )

    for key, record in TARIFF_TABLE.items():
        if normalize_hs_code(key) == code:
            return record

    if code.startswith(FOOTWEAR_CHAPTER):
        return TariffRecord(
            hs_code=str(hs_code),
            description="Footwear (General)",
            cd=25.0, sd=0.0, vat=15.0, ait=5.0, at=5.0, rd=3.0,
            duty_rate_percent=58.60,
            correction_note="Generic Rate Applied",
        )

    return None
