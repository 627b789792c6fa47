import logging
import sys
from typing import Optional

from fastapi import FastAPI
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator
from pymongo.database import Database

from storefront.api.handlers import register_exception_handlers
from storefront.api.v1 import routes_auth, routes_orders, routes_products, routes_users
from storefront.core.config import Settings, SettingsError
from storefront.core.logging import configure_logging
from storefront.db.models import ensure_indexes
from storefront.db.session import StoreConnectionError, connect
from storefront.security.tokens import TokenService
from storefront.security.utils import make_password_context
from storefront.version import VERSION

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """Build the application. Tests pass their own `db`; otherwise MongoDB is reached at startup."""
    settings = settings or Settings.from_env()
    prefix = settings.APP_PREFIX

    app = FastAPI(title='Storefront API', version=VERSION)
    app.state.settings = settings
    app.state.db = db
    app.state.mongo_client = None
    app.state.tokens = TokenService(settings.JWT_SECRET, settings.JWT_EXPIRES_IN_MINUTES, settings.JWT_ALGORITHM)
    app.state.pwd_ctx = make_password_context(settings.BCRYPT_ROUNDS)

    # Instrument the app BEFORE adding routes or middleware
    Instrumentator(registry=CollectorRegistry()).instrument(app).expose(
        app,
        include_in_schema=False,
        endpoint=f"{prefix}/metrics",
        should_gzip=True,
    )

    register_exception_handlers(app)

    @app.get('/health')
    def health(): return {'status': 'ok'}

    @app.get(f'{prefix}/health')
    def prefixed_health(): return {'status': 'ok'}

    @app.get(f'{prefix}/_info')
    def info(): return {'service': 'storefront', 'version': VERSION}

    @app.on_event("startup")
    def startup_event():
        if app.state.db is None:
            app.state.mongo_client, app.state.db = connect(settings)
        ensure_indexes(app.state.db)
        for route in app.routes:
            if hasattr(route, "methods") and hasattr(route, "path"):
                logger.debug("%s %s", sorted(route.methods), route.path)

    @app.on_event("shutdown")
    def shutdown_event():
        if app.state.mongo_client is not None:
            app.state.mongo_client.close()

    app.include_router(routes_auth.router, prefix=f'{prefix}/auth', tags=['auth'])
    app.include_router(routes_users.router, prefix=f'{prefix}/users', tags=['users'])
    app.include_router(routes_products.router, prefix=f'{prefix}/products', tags=['products'])
    app.include_router(routes_orders.router, prefix=f'{prefix}/orders', tags=['orders'])
    return app


def run() -> None:
    import uvicorn

    try:
        settings = Settings.from_env()
    except SettingsError as e:
        configure_logging()
        logger.error("%s", e)
        sys.exit(1)
    configure_logging(settings.LOG_LEVEL)
    try:
        client, db = connect(settings)
    except StoreConnectionError:
        sys.exit(1)
    app = create_app(settings, db)
    app.state.mongo_client = client
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
