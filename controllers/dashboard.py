from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from core.config import settings
from db.session import get_db
from helpers import cache_get, cache_key, cache_set
from queries.audit_logs import list_audit_logs
from queries.shipments import list_shipments
from schemas.responses import ApiResponse
from services.money import format_usd, round2
from services.strategies import NET_MARGIN_PERCENT

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _margin_status(net_margin: float) -> str:
    return "HEDGED" if net_margin >= NET_MARGIN_PERCENT else "AT RISK"


@router.get("/summary", response_model=ApiResponse[dict])
def dashboard_summary(
    request: Request,
    limit: int = Query(500, ge=1, le=2000),
    db: Session = Depends(get_db),
):
    """
    Dashboard summary (DB-driven):
    - shipments by status
    - incentive / risk totals across stored audits
    - hedged vs at-risk counts
    Uses TTL cache to avoid recomputing often.
    """
    cache = request.app.state.ttl_cache
    key = cache_key("summary:", limit=limit)
    cached = cache_get(cache, key)
    if cached is not None:
        return ApiResponse(data=cached)

    shipments = list_shipments(db, limit=limit)

    status_counts: dict[str, int] = {}
    margin_counts = {"HEDGED": 0, "AT RISK": 0, "NOT_AUDITED": 0}
    total_fob = 0.0
    total_incentives = 0.0
    total_risk = 0.0

    for s in shipments:
        status_counts[s.status] = status_counts.get(s.status, 0) + 1
        total_fob += float(s.fob_value or 0.0)

        if s.audit:
            total_incentives += float(s.audit.incentive_amount or 0.0)
            total_risk += float(s.audit.ldc_risk_value or 0.0)
            margin_counts[_margin_status(s.audit.net_margin)] += 1
        else:
            margin_counts["NOT_AUDITED"] += 1

    data = {
        "total_shipments": len(shipments),
        "status_counts": status_counts,
        "margin_counts": margin_counts,
        "total_fob": round2(total_fob),
        "total_incentives": round2(total_incentives),
        "total_revenue_risk": round2(total_risk),
        "net_position": round2(total_incentives - total_risk),
        "meta": {"limit": limit},
    }

    cache_set(cache, key, data, ttl_seconds=settings.DASHBOARD_TTL_SECONDS)
    return ApiResponse(data=data)


@router.get("/audit-table", response_model=ApiResponse[list[dict]])
def audit_table(
    request: Request,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """One row per stored audit, with display strings for the UI table."""
    cache = request.app.state.ttl_cache
    key = cache_key("audit_table:", limit=limit)
    cached = cache_get(cache, key)
    if cached is not None:
        return ApiResponse(data=cached)

    rows = []
    for a in list_audit_logs(db, limit=limit):
        fob = a.shipment.fob_value if a.shipment else 0.0
        rows.append(
            {
                "invoice_no": a.shipment.invoice_no if a.shipment else None,
                "status": a.shipment.status if a.shipment else None,
                "fob_value": fob,
                "assessable_value": a.assessable_value,
                "incentive_amount": a.incentive_amount,
                "ldc_risk_value": a.ldc_risk_value,
                "risk_score": a.risk_score,
                "net_margin": a.net_margin,
                "margin_status": _margin_status(a.net_margin),
                "display": {
                    "fob": format_usd(fob),
                    "av": format_usd(a.assessable_value),
                    "incentive": format_usd(a.incentive_amount),
                    "risk": format_usd(a.ldc_risk_value),
                },
            }
        )

    cache_set(cache, key, rows, ttl_seconds=settings.DASHBOARD_TTL_SECONDS)
    return ApiResponse(data=rows)
