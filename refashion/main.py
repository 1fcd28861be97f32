import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from refashion.api.router import router
from refashion.config import Settings, settings as default_settings
from refashion.errors import ConfigurationError, StoreError
from refashion.logger import get_logger, setup_logging
from refashion.services.firebase import FirebaseClient
from refashion.services.mailer import ResendMailer
from refashion.services.remote_store import RemoteStore, SqliteRemoteStore
from refashion.state.background import BackgroundWriter
from refashion.state.products import ProductStore
from refashion.state.storage import LocalStorage, MemoryStorage, SqliteStorage

logger = get_logger(__name__)


def build_storage(settings: Settings) -> LocalStorage:
    if settings.LOCAL_STORAGE_BACKEND == "memory":
        return MemoryStorage()
    return SqliteStorage(settings.LOCAL_STORAGE_PATH)


async def build_remote(settings: Settings) -> RemoteStore:
    if settings.REMOTE_BACKEND == "firebase":
        if not (settings.FIREBASE_PROJECT_ID and settings.FIREBASE_API_KEY):
            raise ConfigurationError("FIREBASE_PROJECT_ID and FIREBASE_API_KEY are required")
        return FirebaseClient(settings.FIREBASE_PROJECT_ID, settings.FIREBASE_API_KEY)
    remote = SqliteRemoteStore(settings.SQLITE_DB_PATH)
    await remote.init()
    return remote


def create_app(settings: Settings = default_settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # startup: open storage, load the catalog cache, kick off the remote sync
        setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
        storage = build_storage(settings)
        await storage.open()
        remote = await build_remote(settings)
        writer = BackgroundWriter(settings.REMOTE_WRITE_ATTEMPTS, settings.REMOTE_WRITE_BACKOFF)
        products = ProductStore(storage, remote, writer, settings.PRODUCT_SYNC_POLICY)
        await products.load()
        if settings.AUTO_MIGRATE:
            report = await products.migrate()
            logger.info("Startup migration: %s", report.status)
        products.start_sync()

        app.state.settings = settings
        app.state.storage = storage
        app.state.remote = remote
        app.state.writer = writer
        app.state.products = products
        app.state.mailer = ResendMailer(
            settings.RESEND_API_KEY, settings.CONTACT_SENDER, settings.CONTACT_RECIPIENT
        )
        yield
        # shutdown: let queued remote writes finish, then close clients
        await writer.drain(timeout=10)
        await app.state.mailer.close()
        await remote.close()

    app = FastAPI(
        title="Dorodango ReFashion",
        description="Storefront API for upcycled, artisan-made textiles.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    app.include_router(router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
