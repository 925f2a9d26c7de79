"""Prueba de concurrencia: la unicidad del email se mantiene con escritores simultáneos."""

import logging
import threading

from fastapi.testclient import TestClient

from conftest import OPERATIONS_URL, create_user, list_users
from user_service import operations
from user_service.main import app

logger = logging.getLogger(__name__)


# --- Función ejecutada por cada Hilo ---
def create_thread(barrier: threading.Barrier, email: str, results: list, index: int):
    """Ejecuta un único Create; todos los hilos arrancan juntos gracias a la barrera."""
    thread_client = TestClient(app)
    barrier.wait(timeout=10)
    try:
        r = create_user(thread_client, name="Race Runner", email=email, phone="")
        results[index] = (r.status_code, r.json().get("error"))
        logger.info(f"Hilo {index}: Create -> Status {r.status_code} - Respuesta: {r.text[:100]}")
    except Exception as e:
        results[index] = ("ERROR", str(e))
        logger.error(f"Hilo {index}: Error inesperado en el hilo -> {e}", exc_info=True)


def test_concurrent_creates_same_email_only_one_succeeds(client, unique_email):
    """
    Lanza varios Create simultáneos con el mismo email no usado.
    Exactamente uno debe tener éxito (201); el resto recibe ConflictError (409).
    """
    num_threads = 4
    barrier = threading.Barrier(num_threads)
    results = [None] * num_threads

    threads = [
        threading.Thread(target=create_thread, args=(barrier, unique_email, results, i))
        for i in range(num_threads)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
        assert not t.is_alive(), "Un hilo de creación no terminó a tiempo."

    print(f"\n[Test] Concurrencia: Resultados = {results}")
    success_count = sum(1 for status, _ in results if status == 201)
    conflict_count = sum(1 for status, error in results if status == 409 and error == "conflict")

    assert success_count == 1, f"Se esperaba exactamente 1 creación exitosa, se obtuvieron {success_count}: {results}"
    assert conflict_count == num_threads - 1, f"El resto debió ser ConflictError: {results}"
    assert [u["email"] for u in list_users(client)].count(unique_email) == 1


def test_store_constraint_is_the_backstop_when_precheck_misses(client, monkeypatch):
    """
    Simula la ventana de carrera: el pre-chequeo no ve el duplicado,
    la restricción única de la BD lo rechaza y se reporta como ConflictError.
    """
    assert create_user(client).status_code == 201
    monkeypatch.setattr(operations, "find_user_by_email", lambda db, email, exclude_id=None: None)

    r = create_user(client, name="Other Person")
    assert r.status_code == 409
    assert r.json() == {"success": False, "message": "Email already exists", "error": "conflict"}
    assert len(list_users(client)) == 1


def test_update_backstop_when_precheck_misses(client, monkeypatch):
    create_user(client, email="ann@example.com")
    create_user(client, name="Bob Stone", email="bob@example.com")
    bob = next(u for u in list_users(client) if u["email"] == "bob@example.com")
    monkeypatch.setattr(operations, "find_user_by_email", lambda db, email, exclude_id=None: None)

    r = client.post(OPERATIONS_URL, params={"action": "update"},
                    data={"id": bob["id"], "name": "Bob Stone", "email": "ann@example.com"})
    assert r.status_code == 409
    assert r.json()["error"] == "conflict"

    unchanged = client.get(OPERATIONS_URL, params={"action": "get", "id": bob["id"]}).json()["data"]
    assert unchanged["email"] == "bob@example.com"
