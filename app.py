from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logger import setup_logging
from db.session import engine
from models.base import Base
from schemas.responses import ApiResponse

# Import all models to register them with SQLAlchemy BEFORE any queries
from models.shipment import Shipment
from models.audit_log import AuditLog
from models.regulatory_rate import RegulatoryRate

from controllers.audit import router as audit_router
from controllers.chat import router as chat_router
from controllers.dashboard import router as dashboard_router
from controllers.health import router as health_router
from controllers.rates import router as rates_router
from controllers.shipments import router as shipments_router


setup_logging()

app = FastAPI(title="Export Compliance Auditor (Audit + DB + TTL)")

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error envelope ---
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    # same {data, error} shape as successful responses; status code unchanged
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


# --- DB tables ---
Base.metadata.create_all(bind=engine)

# --- Routers ---
app.include_router(audit_router)
app.include_router(chat_router)
app.include_router(dashboard_router)
app.include_router(health_router)
app.include_router(rates_router)
app.include_router(shipments_router)

# --- Internal TTL cache store (in-memory) ---
# Controllers use: from helpers import cache_get/cache_set/cache_clear_prefix
app.state.ttl_cache = {}  # dict[str, (expires_at, data)]
