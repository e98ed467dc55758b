from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app.api.routes import entities, health
from app.core.config import Settings, settings as default_settings
from app.core.errors import register_exception_handlers
from app.core.logging_config import setup_logging
from app.core.observability import MetricsRegistry, ObservabilityMiddleware
from app.db.session import build_engine, build_session_factory, init_db

API_VERSION = "1.0.0"
FASTAPI_VALIDATION_SCHEMAS = ("HTTPValidationError", "ValidationError")


def _install_openapi(app: FastAPI) -> None:
    """Drop FastAPI's default 422 responses; malformed input is reported as 400."""

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        for path_item in openapi_schema.get("paths", {}).values():
            for operation in path_item.values():
                if isinstance(operation, dict):
                    operation.get("responses", {}).pop("422", None)
        schemas = openapi_schema.get("components", {}).get("schemas", {})
        for name in FASTAPI_VALIDATION_SCHEMAS:
            schemas.pop(name, None)

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Failure here is fatal: the server refuses to start without storage.
        init_db(app.state.engine)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=API_VERSION,
        description="CRUD REST API for entities.",
        lifespan=lifespan,
    )
    engine = build_engine(settings.sqlalchemy_url, echo=settings.sql_echo)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.metrics = MetricsRegistry()

    app.add_middleware(
        ObservabilityMiddleware,
        registry=app.state.metrics,
        exclude_paths={"/metrics", "/health"},
    )
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(entities.router)
    _install_openapi(app)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
