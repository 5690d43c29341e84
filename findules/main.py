import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from findules.config import settings
from findules.database import engine
from findules.exceptions import setup_exception_handlers
from findules.models import Base
from findules.routers import (
    auth, users, branches, cashiers, branch_balance, reconciliations,
    imprest, fuel_coupons, exports, audit_logs, dashboard, analytics,
)

# 1. LOGGING
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 2. Create missing tables on startup
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.app_name, settings.app_version)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Branch cash, imprest, reconciliation and fuel coupon back-office",
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4. ERROR HANDLERS
setup_exception_handlers(app)

# 5. ROUTERS
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(branches.router, prefix="/api/branches", tags=["Branches"])
app.include_router(cashiers.router, prefix="/api/cashiers", tags=["Cashiers"])
app.include_router(branch_balance.router, prefix="/api/branch-balance", tags=["Branch Balance"])
app.include_router(reconciliations.router, prefix="/api/reconciliations", tags=["Reconciliations"])
app.include_router(imprest.router, prefix="/api/imprest", tags=["Imprest"])
app.include_router(fuel_coupons.router, prefix="/api/fuel-coupons", tags=["Fuel Coupons"])
app.include_router(exports.router, prefix="/api/export", tags=["Exports"])
app.include_router(audit_logs.router, prefix="/api/audit-logs", tags=["Audit Logs"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])


@app.get("/api/health")
def health():
    return {"status": "ok", "app": settings.app_name, "version": settings.app_version}


@app.exception_handler(404)
async def not_found_exception_handler(request: Request, exc):
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        detail = "Resource not found"
    return JSONResponse(status_code=404, content={"detail": detail})
