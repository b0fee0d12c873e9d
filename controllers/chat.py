from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from db.session import get_db
from queries.audit_logs import list_audit_logs
from schemas.responses import ApiResponse
from schemas.shipment import ChatIn
from services.chat import ChatAssistant

router = APIRouter(prefix="/chat", tags=["chat"])

_assistant = ChatAssistant()

CONTEXT_AUDITS = 5


@router.post("", response_model=ApiResponse[dict])
def chat(payload: ChatIn, db: Session = Depends(get_db)):
    if not payload.messages:
        raise HTTPException(status_code=400, detail="messages must not be empty")

    logs = list_audit_logs(db, limit=CONTEXT_AUDITS)
    res = _assistant.reply(messages=[m.model_dump() for m in payload.messages], logs=logs)
    return ApiResponse(data=res)
