# tests/conftest.py
import os

# Settings se instancia al importar la app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-test-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "super-secret-jwt-token-for-tests")
os.environ.setdefault("RESEND_API_KEY", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import strive_studio.models  # noqa: F401 (registra los modelos)
from strive_studio.database import Base, SessionLocal, get_db
from strive_studio.main import app
from strive_studio.services.supabase_storage import SupabaseGateway, get_supabase
from tests.helpers import FakeSupabaseClient


@pytest.fixture()
def engine():
    # SQLite en memoria; StaticPool para que todas las sesiones vean la misma base
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def supabase_client():
    return FakeSupabaseClient()


@pytest.fixture()
def storage(supabase_client):
    return SupabaseGateway(client=supabase_client)


@pytest.fixture()
def client(session_factory, storage):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_supabase] = lambda: storage
    app.state.session_factory = session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.session_factory = SessionLocal
