from sqlalchemy.orm import Session, joinedload
from models.shipment import Shipment


def get_shipment_by_invoice_no(db: Session, invoice_no: str) -> Shipment | None:
    return (
        db.query(Shipment)
        .options(joinedload(Shipment.audit))
        .filter(Shipment.invoice_no == invoice_no)
        .first()
    )


def list_shipments(db: Session, limit: int = 300) -> list[Shipment]:
    return (
        db.query(Shipment)
        .options(joinedload(Shipment.audit))
        .order_by(Shipment.id.desc())
        .limit(limit)
        .all()
    )


def upsert_shipment(
    db: Session,
    *,
    invoice_no: str,
    fob_value: float,
    hs_code: str | None,
    status: str,
    lead_time_days: int | None = None,
    commit: bool = True,
) -> Shipment:
    """
    Re-auditing the same invoice_no updates the existing row (never duplicates).
    commit=False only flushes (row.id is assigned) so the caller can write the
    audit log in the same transaction and commit or roll back both together.
    """
    try:
        row = db.query(Shipment).filter(Shipment.invoice_no == invoice_no).first()
        if not row:
            row = Shipment(invoice_no=invoice_no)
            db.add(row)

        row.fob_value = float(fob_value or 0.0)
        row.hs_code = hs_code
        row.status = status
        row.lead_time_days = lead_time_days

        if commit:
            db.commit()
            db.refresh(row)
        else:
            db.flush()
        return row

    except Exception:
        db.rollback()
        raise
