# invitation_engine/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from invitation_engine.config.settings import settings
from invitation_engine.delivery.api.invitations import router
from invitation_engine.domain.invitation_service import InvitationService

logger = logging.getLogger("uvicorn.error")

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.invitation_service = InvitationService(templates_dir=settings.TEMPLATES_DIR)
    logger.info(f"Service '{settings.PROJECT_NAME}' started (mode: {settings.ENVIRONMENT}).")
    logger.info(f"Templates directory: {settings.TEMPLATES_DIR}")
    yield
    logger.info("Service stopped.")

app = FastAPI(
    title="Invitation Compositing Service",
    description="Renders party invitations from template descriptors: raster, PDF, print and folded-card output",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": "Invitation Compositing Service", "version": "1.0.0", "status": "ok"}

@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "Invitation Engine 1.0"}
