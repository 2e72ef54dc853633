import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from donorhub.data.base import create_tables
from donorhub.presentation.auth_api import router as auth_router
from donorhub.presentation.campaigns_api import router as campaigns_router
from donorhub.presentation.donations_api import router as donations_router
from donorhub.presentation.donors_api import router as donors_router
from donorhub.presentation.errors import register_exception_handlers
from donorhub.presentation.tasks_api import router as tasks_router
from donorhub.utils.logging_config import configure_logging

load_dotenv()  # Load environment variables from .env
configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info("DonorHub API started", version=app.version)
    yield


app = FastAPI(title="DonorHub API", version="1.0.0", lifespan=lifespan)

cors_origins = os.getenv("CORS_ORIGINS", "")
origins = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(donors_router)
app.include_router(donations_router)
app.include_router(campaigns_router)
app.include_router(tasks_router)


@app.get("/api/health", tags=["health"])
def health_check():
    return {
        "data": {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }
