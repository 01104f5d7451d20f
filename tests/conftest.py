import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from browsable_sql.execution.sqlalchemy_executor import SQLAlchemyExecutor
from browsable_sql.gateway import BrowsableGateway
from browsable_sql.middleware import install_browsable
from browsable_sql.options import BasicAuthCredentials, BrowsableOptions
from browsable_sql.security.auth import basic_authorization

USERNAME = "admin"
PASSWORD = "s3cret:pw"


@pytest.fixture
def credentials():
    return BasicAuthCredentials(username=USERNAME, password=PASSWORD)


@pytest.fixture
def auth_headers():
    return {"Authorization": basic_authorization(USERNAME, PASSWORD)}


@pytest.fixture
def executor():
    """In-memory SQLite executor seeded with three rows."""
    executor = SQLAlchemyExecutor("sqlite://")
    executor(
        "CREATE TABLE test_data ("
        " id INTEGER PRIMARY KEY AUTOINCREMENT,"
        " name TEXT NOT NULL,"
        " value INTEGER)"
    )
    executor(
        "INSERT INTO test_data (name, value) VALUES "
        "('Sample 1', 100), ('Sample 2', 200), ('Sample 3', 300)"
    )
    yield executor
    executor.dispose()


@pytest.fixture
def make_app(executor, credentials):
    """Builds a host app with the gateway installed in front of its own routes."""

    def _make_app(**options) -> FastAPI:
        options.setdefault("basic_auth", credentials)
        app = FastAPI()

        @app.get("/host/ping")
        async def ping():
            return {"pong": True}

        install_browsable(app, BrowsableGateway(executor, BrowsableOptions(**options)))
        return app

    return _make_app


@pytest.fixture
def make_client(make_app):
    def _make_client(**options) -> TestClient:
        return TestClient(make_app(**options))

    return _make_client


@pytest.fixture
def client(make_client):
    return make_client()
