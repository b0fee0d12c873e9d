from sqlalchemy.orm import Session, joinedload
from models.audit_log import AuditLog


def upsert_audit_log(
    db: Session,
    *,
    shipment_id: int,
    assessable_value: float,
    incentive_amount: float,
    risk_value: float,
    risk_score: int,
    net_margin: float,
    items_hash: str | None,
    report_json: dict,
) -> AuditLog:
    try:
        row = db.query(AuditLog).filter(AuditLog.shipment_id == shipment_id).first()
        if not row:
            row = AuditLog(shipment_id=shipment_id)
            db.add(row)

        row.assessable_value = assessable_value
        row.incentive_amount = incentive_amount
        row.ldc_risk_value = risk_value
        row.risk_score = risk_score
        row.net_margin = net_margin
        row.items_hash = items_hash
        row.audit_json = report_json

        db.commit()
        db.refresh(row)
        return row

    except Exception:
        db.rollback()
        raise


def list_audit_logs(db: Session, limit: int = 300) -> list[AuditLog]:
    return (
        db.query(AuditLog)
        .options(joinedload(AuditLog.shipment))
        .order_by(AuditLog.audited_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
