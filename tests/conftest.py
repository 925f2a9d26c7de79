"""
Configuraciones y fixtures compartidos para las pruebas automatizadas con pytest.
Cada prueba usa su propia base SQLite (archivo temporal) inyectada en la app
mediante dependency_overrides de get_db.
"""

import os
import uuid

# Debe definirse antes de importar user_service: evita construir la URL de MySQL
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from user_service.db import Base, build_engine, get_db
from user_service.main import app
from user_service import models  # noqa: F401  registra la tabla 'users'

OPERATIONS_URL = "/operations"


@pytest.fixture
def db_engine(tmp_path):
    """Engine SQLite en un archivo temporal, con la tabla 'users' ya creada."""
    engine = build_engine(f"sqlite:///{tmp_path / 'users.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """TestClient con get_db apuntando a la base temporal (sin eventos de startup)."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unique_email() -> str:
    """Email único por prueba."""
    return f"user_{uuid.uuid4().hex[:12]}@example.com"


def create_user(client, name="Ann Lee", email="ann@example.com", phone="+1-555-0100"):
    """Función auxiliar: POST ?action=create y devuelve la respuesta."""
    return client.post(OPERATIONS_URL, params={"action": "create"},
                       data={"name": name, "email": email, "phone": phone})


def list_users(client) -> list:
    r = client.get(OPERATIONS_URL, params={"action": "list"})
    assert r.status_code == 200, f"List falló: {r.status_code} {r.text}"
    body = r.json()
    assert body["success"] is True
    return body["data"]
