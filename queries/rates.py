from sqlalchemy.orm import Session
from models.regulatory_rate import RegulatoryRate


def get_rate(db: Session, category: str) -> RegulatoryRate | None:
    return db.query(RegulatoryRate).filter(RegulatoryRate.category == category).first()


def set_rate(db: Session, category: str, incentive_rate: float) -> RegulatoryRate:
    row = get_rate(db, category)
    if not row:
        row = RegulatoryRate(category=category, incentive_rate=incentive_rate)
        db.add(row)
    else:
        row.incentive_rate = incentive_rate
    db.commit()
    db.refresh(row)
    return row
