import hashlib
import json

from schemas.audit import LineItem


def _fingerprint_row(it: LineItem) -> tuple:
    return (
        (it.hs_code or "").strip(),
        (it.description or "").strip(),
        float(it.declared_total or 0),
        float(it.quantity or 0),
        float(it.unit_price or 0),
    )


def canonical_items(items: list[LineItem]) -> list[list]:
    """
    Content fingerprint of an invoice's goods. Row order on the page does not
    matter, so a re-scan of the same unnumbered document lands on the same
    shipment key.
    """
    return [list(row) for row in sorted(_fingerprint_row(it) for it in items or [])]


def items_hash(items: list[LineItem]) -> str:
    raw = json.dumps(canonical_items(items), separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def fallback_invoice_no(items: list[LineItem]) -> str:
    """Deterministic key when the document has no readable invoice number."""
    return f"UNKNOWN-{items_hash(items)[:12]}"
