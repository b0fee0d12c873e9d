from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from db.session import get_db
from queries.shipments import get_shipment_by_invoice_no, list_shipments
from schemas.responses import ApiResponse
from schemas.shipment import AuditLogOut, ShipmentOut

router = APIRouter(prefix="/shipments", tags=["shipments"])


@router.get("", response_model=ApiResponse[list[ShipmentOut]])
def get_shipments(
    limit: int = Query(300, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """
    Returns shipments from DB, newest first, with their latest audit figures.
    """
    rows = list_shipments(db, limit=limit)

    out: list[ShipmentOut] = []
    for s in rows:
        audit_out = None
        if s.audit:
            audit_out = AuditLogOut(
                assessable_value=s.audit.assessable_value,
                incentive_amount=s.audit.incentive_amount,
                ldc_risk_value=s.audit.ldc_risk_value,
                risk_score=s.audit.risk_score,
                net_margin=s.audit.net_margin,
                audited_at=s.audit.audited_at.isoformat() if s.audit.audited_at else None,
            )

        out.append(
            ShipmentOut(
                invoice_no=s.invoice_no,
                fob_value=s.fob_value,
                hs_code=s.hs_code,
                status=s.status,
                lead_time_days=s.lead_time_days,
                audit=audit_out,
            )
        )

    return ApiResponse(data=out)


@router.get("/{invoice_no}/report", response_model=ApiResponse[dict])
def get_shipment_report(invoice_no: str, db: Session = Depends(get_db)):
    """Stored report blob, exactly as it was returned at audit time."""
    s = get_shipment_by_invoice_no(db, invoice_no)
    if not s or not s.audit:
        raise HTTPException(status_code=404, detail=f"No audit stored for invoice {invoice_no}")
    return ApiResponse(data=s.audit.audit_json)
