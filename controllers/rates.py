from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from core.config import settings
from db.session import get_db
from helpers import invalidate_dashboard
from queries.rates import get_rate, set_rate
from schemas.responses import ApiResponse
from schemas.shipment import RateIn, RateOut
from services.strategies import normalize_rate

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("/{category}", response_model=ApiResponse[RateOut])
def read_rate(category: str, db: Session = Depends(get_db)):
    row = get_rate(db, category)
    if row is None:
        return ApiResponse(
            data=RateOut(category=category, incentive_rate=settings.DEFAULT_INCENTIVE_RATE, source="default")
        )
    return ApiResponse(data=RateOut(category=row.category, incentive_rate=row.incentive_rate, source="db"))


@router.put("/{category}", response_model=ApiResponse[RateOut])
def write_rate(category: str, payload: RateIn, request: Request, db: Session = Depends(get_db)):
    """
    Incentive rate as a fraction (0.08) or a percentage (8); stored as a fraction.
    """
    if payload.incentive_rate < 0 or payload.incentive_rate > 100:
        raise HTTPException(status_code=400, detail="incentive_rate must be between 0 and 100")
    rate = normalize_rate(payload.incentive_rate)

    row = set_rate(db, category, rate)

    # incentive totals on the dashboard depend on the rate
    invalidate_dashboard(getattr(request.app.state, "ttl_cache", None))

    return ApiResponse(data=RateOut(category=row.category, incentive_rate=row.incentive_rate, source="db"))
