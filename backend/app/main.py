# backend/app/main.py
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import AssistantConfig, build_assistant_config, settings
from .core.logging_config import setup_logging
from .core.middleware import ErrorMiddleware
from .core.observability import RequestIdMiddleware
from .db.database import connect_all, db, disconnect_all
from .llm.providers import GeminiProvider, LLMProvider
from .routers.chat import router as chat_router  # /api/chat
from .routers.system import router as system_router  # /, /api/health, /api/analytics/window
from .services.analytics.store import DatabaseOrderStore, OrderStore
from .services.chat_engine import ChatEngine

# Setup logging first, before anything else
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_logs=settings.ENV == "prod",
    app_name=settings.APP_NAME,
    env=settings.ENV,
)
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AssistantConfig] = None,
    store: Optional[OrderStore] = None,
    provider: Optional[LLMProvider] = None,
) -> FastAPI:
    """
    Uygulamayı kurar. Verilmeyen bağımlılıklar ortam ayarlarından üretilir;
    testler sahte depo ve sağlayıcı geçirir.
    """
    config = config or build_assistant_config(settings)
    uses_database = store is None
    if store is None:
        store = DatabaseOrderStore(
            db,
            limit=config.order_fetch_limit,
            high_volume_threshold=config.high_volume_threshold,
        )
    if provider is None and config.has_api_key:
        provider = GeminiProvider(
            api_key=config.api_key,
            base_url=settings.GENAI_BASE_URL,
            timeout=settings.GENAI_TIMEOUT_SECONDS,
        )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
    )

    app.state.assistant_config = config
    app.state.order_store = store
    app.state.llm_provider = provider
    # Anahtar yoksa motor kurulmaz; /api/chat MISSING_API_KEY döner
    app.state.chat_engine = ChatEngine(config, store, provider) if provider is not None else None

    # ---- Middleware'ler (son eklenen ilk çalışır) ----
    app.add_middleware(ErrorMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"ok": False, "error_code": "INVALID_REQUEST", "detail": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    # ---- Yaşam döngüsü ----
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"[STARTUP] Application starting in {settings.ENV} mode")
        logger.info(f"[STARTUP] GenAI key: {config.masked_key}")
        logger.info(f"[STARTUP] Model candidates: {', '.join(config.model_candidates)}")
        if uses_database:
            await connect_all()

    @app.on_event("shutdown")
    async def on_shutdown():
        if provider is not None:
            await provider.aclose()
        if uses_database:
            await disconnect_all()

    # ---- Router Kayıtları ----
    app.include_router(system_router)
    app.include_router(chat_router)

    return app


app = create_app()
