from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings
from core.logging import setup_logging, RequestIdMiddleware

from auth.routes.auth_router import auth_router
from organization.router import organization_router
from member.router import member_router
from orgrole.router import orgrole_router
from shift.router import shift_router
from swaplog.router import history_router
from export.router import export_router
from notification.router import push_router
import models_bootstrap

setup_logging()

openapi_tags = [
    {
        "name": "Shifts",
        "description": "Post, claim, approve, decline and cancel shifts",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, openapi_tags=openapi_tags)

app.add_middleware(RequestIdMiddleware)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(auth_router, prefix="/api")
app.include_router(organization_router, prefix="/api")
app.include_router(member_router, prefix="/api")
app.include_router(orgrole_router, prefix="/api")
app.include_router(shift_router, prefix="/api")
app.include_router(history_router, prefix="/api")
app.include_router(export_router, prefix="/api")
app.include_router(push_router, prefix="/api")



@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}

@app.get("/api/status", tags=['Health Checks'])
def app_status():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "vapid_public_key": settings.VAPID_PUBLIC_KEY or "",
    }
