# -*- coding: utf-8 -*-
"""
caltrack API

Meal logging, nutrition goals, analytics, referral commissions and the admin
console (notifications, security, activity, system health).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .activity.api import router as activity_router
from .analytics.api import router as analytics_router
from .app_db import init_app_db
from .auth.api import router as auth_router
from .auth.security import get_client_ip, get_current_user_from_request
from .config import settings
from .goals.api import router as goals_router
from .meals.api import router as meals_router
from .notifications.api import router as notifications_router
from .planned_meals.api import router as planned_meals_router
from .referrals.admin_api import router as referral_admin_router
from .referrals.api import router as referrals_router
from .security_center.api import router as security_router
from .security_center.storage import is_ip_blocked
from .subscriptions.api import admin_router as subscription_admin_router
from .subscriptions.api import router as subscriptions_router
from .system.api import router as system_router
from .workouts.api import router as workouts_router

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="caltrack",
    description="Calorie tracking with analytics and a referral program",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.app_db_path)
    logger.info("caltrack %s using database %s", __version__, settings.app_db_path)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.app_db_path)


_AUTH_EXEMPT_PREFIXES = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith("/api") and path != "/api/health":
        client_ip = get_client_ip(request)
        if is_ip_blocked(client_ip):
            logger.warning("Refused request from blocked IP %s: %s", client_ip, path)
            return JSONResponse(status_code=403, content={"detail": "Access from this IP address is blocked"})
        if not any(path.startswith(p) for p in _AUTH_EXEMPT_PREFIXES):
            try:
                user = get_current_user_from_request(request)
                request.state.user = user
            except HTTPException as exc:
                return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(meals_router)
app.include_router(planned_meals_router)
app.include_router(workouts_router)
app.include_router(goals_router)
app.include_router(analytics_router)
app.include_router(subscriptions_router)
app.include_router(referrals_router)

# Admin console
app.include_router(referral_admin_router)
app.include_router(subscription_admin_router)
app.include_router(notifications_router)
app.include_router(security_router)
app.include_router(activity_router)
app.include_router(system_router)


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def run() -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    try:
        port = int(settings.port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("caltrack.api:app", host=settings.host, port=port, reload=False)
