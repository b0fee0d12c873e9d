from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from db.session import get_db
from helpers import invalidate_dashboard
from schemas.audit import ExtractedInvoiceIn, Report
from schemas.responses import ApiResponse
from services.audit_service import AuditService

router = APIRouter(prefix="/audit", tags=["audit"])

_audit = AuditService()


@router.post("", response_model=ApiResponse[Report])
async def audit_document(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """
    Upload a commercial invoice (image / PDF) and get the full audit report.
    Persistence is best effort: see report.sync_status.
    """
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    mime_type = file.content_type or "application/octet-stream"
    report = await _audit.audit_document(db, content=content, mime_type=mime_type)

    invalidate_dashboard(getattr(request.app.state, "ttl_cache", None))
    return ApiResponse(data=report)


@router.post("/extracted", response_model=ApiResponse[Report])
async def audit_extracted(
    request: Request,
    payload: ExtractedInvoiceIn,
    db: Session = Depends(get_db),
):
    """Audit already-extracted invoice fields (no OCR step)."""
    report = await _audit.audit_extraction(db, payload.model_dump())

    invalidate_dashboard(getattr(request.app.state, "ttl_cache", None))
    return ApiResponse(data=report)
