import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import groups
import users
from config import Settings, load_settings
from database import Storage, connect, get_storage
from errors import ApiError, StorageConnectionError
from logging_config import setup_logging
from schemas import MessageResponse, StatusResponse

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    """Build the application.

    When storage is given it is used as-is; otherwise MongoDB is connected
    during startup and a failure aborts startup before any request is served.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if storage is not None:
            app.state.storage = storage
            yield
            return

        try:
            app.state.storage = await connect(
                settings.database_url,
                settings.database_name,
                users_collection=settings.users_collection,
                groups_collection=settings.groups_collection,
                timeout_ms=settings.server_selection_timeout_ms,
            )
        except StorageConnectionError:
            logger.exception("MongoDB connection failed, refusing to start")
            raise

        logger.info("Server running on http://%s:%d", settings.host, settings.port)
        try:
            yield
        finally:
            await app.state.storage.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(title="Gestión de usuarios y grupos", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError):
        logger.info("Rejected request body on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=400,
            content={"mensaje": "Cuerpo de la petición inválido.", "detalle": str(exc.errors())},
        )

    @app.get("/", response_model=MessageResponse)
    def read_root():
        return {"mensaje": "API de gestión de usuarios y grupos"}

    @app.get("/estado", response_model=StatusResponse, response_model_exclude_none=True)
    async def check_status(storage: Storage = Depends(get_storage)):
        """Check that the database answers a ping"""
        try:
            await storage.ping()
        except Exception as e:
            logger.warning("Database ping failed: %s", e)
            return {"servidor": "ok", "baseDeDatos": "error", "detalle": str(e)}
        return {"servidor": "ok", "baseDeDatos": "ok"}

    app.include_router(users.router)
    app.include_router(groups.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = load_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
