from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from browsable_sql.common.logger import configure_logging
from browsable_sql.common.settings import GatewaySettings
from browsable_sql.execution.sqlalchemy_executor import SQLAlchemyExecutor
from browsable_sql.gateway import BrowsableGateway
from browsable_sql.middleware import install_browsable
from browsable_sql.routes import health


def create_app(
    settings: Optional[GatewaySettings] = None,
    executor: Optional[SQLAlchemyExecutor] = None,
) -> FastAPI:
    """Builds the standalone gateway application.

    The gateway answers ``/query/raw`` and ``/studio``; everything else falls
    through to the application's own routes.
    """
    settings = settings or GatewaySettings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    executor = executor or SQLAlchemyExecutor(settings.database_url)
    gateway = BrowsableGateway(executor, settings.gateway_options())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        executor.dispose()

    app = FastAPI(
        title="Browsable SQL Gateway",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.executor = executor
    app.state.gateway = gateway

    app.include_router(health.router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it runs first: the gateway answers its own preflights.
    install_browsable(app, gateway)
    return app
