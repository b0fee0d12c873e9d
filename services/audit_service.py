import asyncio
from typing import Any, Dict

from sqlalchemy.orm import Session

from core.config import settings
from core.logger import log
from queries.audit_logs import upsert_audit_log
from queries.shipments import upsert_shipment
from schemas.audit import AuditContext, LineItem, Report
from services.audit_engine import line_items_from_extraction, run_audit
from services.extraction import DocumentExtractor, detect_rex_statement
from services.hasher import fallback_invoice_no, items_hash
from services.money import safe_amount
from services.rates import resolve_incentive_rate
from services.sensors import LogisticsSensorClient
from services.tariffs import effective_hs_code


class AuditService:
    def __init__(self) -> None:
        self.extractor = DocumentExtractor()
        self.sensors = LogisticsSensorClient()

    async def audit_document(self, db: Session, *, content: bytes, mime_type: str) -> Report:
        """
        Upload flow:
        - extract fields with the multimodal model (off the event loop)
        - run the deterministic engine
        - persist once, best effort
        """
        extraction = await asyncio.to_thread(self.extractor.extract, content=content, mime_type=mime_type)
        return await self.audit_extraction(db, extraction)

    async def audit_extraction(self, db: Session, extraction: Dict[str, Any]) -> Report:
        items = line_items_from_extraction(extraction.get("line_items"))

        signals = await self.sensors.fetch_signals()
        incentive_rate = resolve_incentive_rate(db)

        ctx = AuditContext(
            incentive_rate=incentive_rate,
            signals=signals,
            rex_present=detect_rex_statement(extraction),
            road_delay_critical_hours=settings.ROAD_DELAY_CRITICAL_HOURS,
        )

        report = run_audit(
            items,
            safe_amount(extraction.get("invoice_total")),
            ctx,
            metadata=extraction,
            extraction_error=extraction.get("error"),
        )

        sync_status = self.persist(db, report, items)
        return report.model_copy(update={"sync_status": sync_status})

    def persist(self, db: Session, report: Report, items: list[LineItem]) -> str:
        """
        Upsert shipment (invoice_no is the idempotency key) + its audit log in one
        transaction: the shipment is only flushed, the audit-log write commits both.
        Failure never discards the computed report; it becomes a warning status.
        """
        invoice_no = report.metadata.invoice_number or fallback_invoice_no(items)
        fs = report.financial_summary

        codes = {c for c in (effective_hs_code(it) for it in items) if c}
        hs_code = codes.pop() if len(codes) == 1 else "MIXED"

        flagged = (
            report.compliance_summary.risk_level == "High"
            or report.compliance_summary.invalid_items > 0
            or report.compliance_summary.extraction_incomplete
        )

        try:
            shipment = upsert_shipment(
                db,
                invoice_no=invoice_no,
                fob_value=fs.true_total_fob,
                hs_code=hs_code,
                status="Flagged" if flagged else "Audited",
                lead_time_days=report.logistics.lead_time_days,
                commit=False,
            )

            upsert_audit_log(
                db,
                shipment_id=shipment.id,
                assessable_value=fs.total_assessable_value,
                incentive_amount=fs.total_incentives,
                risk_value=fs.total_revenue_risk,
                risk_score=fs.ldc_graduation_risk_score,
                net_margin=fs.net_margin_percent,
                items_hash=items_hash(items),
                report_json=report.model_dump(mode="json"),
            )

        except Exception as e:
            # IMPORTANT: keep session usable; report is still returned
            db.rollback()
            log.exception("audit persistence failed for %s: %s", invoice_no, e)
            return f"WARNING: audit computed but not saved for Invoice {invoice_no} ({e.__class__.__name__})"

        return f"Audit Data successfully synced for Invoice {invoice_no}."
