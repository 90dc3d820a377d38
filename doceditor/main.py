import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from doceditor.api.http import health_router, documents_router
from doceditor.core.config import settings
from doceditor.core.db import engine
from doceditor.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения"""
    setup_logging()
    logger.info(f"DocEditor API {settings.app_version} starting")

    yield

    await engine.dispose()
    logger.info("DocEditor API stopped")


app = FastAPI(
    title="DocEditor",
    description="Документы с историей версий и восстановлением",
    version=settings.app_version,
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(documents_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "DocEditor API",
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health"
    }
