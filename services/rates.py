from sqlalchemy.orm import Session

from core.config import settings
from core.logger import log
from queries.rates import get_rate


def resolve_incentive_rate(db: Session, category: str | None = None) -> float:
    """
    The one place the incentive rate is resolved (once per audit).
    Any DB failure or missing row falls back to DEFAULT_INCENTIVE_RATE (0.08).
    The LDC risk rate is NOT resolved here: it is a fixed constant.
    """
    category = category or settings.INCENTIVE_CATEGORY
    try:
        row = get_rate(db, category)
    except Exception as e:
        db.rollback()
        log.warning("incentive rate lookup failed for %s: %s", category, e)
        return settings.DEFAULT_INCENTIVE_RATE

    if row is None or row.incentive_rate is None:
        log.info("no incentive rate for category %s; using default %s", category, settings.DEFAULT_INCENTIVE_RATE)
        return settings.DEFAULT_INCENTIVE_RATE

    return float(row.incentive_rate)
