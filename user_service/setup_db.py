"""
Script de inicialización: crea la base de datos (MySQL/MariaDB), la tabla 'users'
y carga usuarios de ejemplo si la tabla está vacía.

Uso:
    python -m user_service.setup_db [--no-sample-data]
"""

import argparse
import logging
import sys

from sqlalchemy import create_engine, exc, text
from sqlalchemy.engine import make_url

from user_service import db
from user_service.models import User

logger = logging.getLogger("setup_db")

SAMPLE_USERS = [
    ("John Doe", "john.doe@example.com", "+1234567890"),
    ("Jane Smith", "jane.smith@example.com", "+0987654321"),
    ("Bob Johnson", "bob.johnson@example.com", "+1122334455"),
    ("Alice Brown", "alice.brown@example.com", "+5566778899"),
    ("Charlie Wilson", "charlie.wilson@example.com", "+9988776655"),
]


def create_database(url: str) -> None:
    """Crea la base de datos con utf8mb4 si no existe. SQLite no lo necesita."""
    url = make_url(url)
    if url.get_backend_name() == "sqlite" or not url.database:
        return

    server_engine = create_engine(url.set(database=None))
    try:
        with server_engine.connect() as connection:
            connection.execute(text(
                f"CREATE DATABASE IF NOT EXISTS `{url.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            ))
        logger.info(f"✓ Base de datos '{url.database}' verificada/creada.")
    finally:
        server_engine.dispose()


def seed_sample_users(session) -> int:
    """Inserta los usuarios de ejemplo solo si la tabla está vacía. Devuelve cuántos se insertaron."""
    count = session.query(User).count()
    if count:
        logger.info(f"✓ Ya existen datos de ejemplo ({count} usuarios).")
        return 0

    session.add_all([User(name=name, email=email, phone=phone) for name, email, phone in SAMPLE_USERS])
    session.commit()
    logger.info(f"✓ Se agregaron {len(SAMPLE_USERS)} usuarios de ejemplo.")
    return len(SAMPLE_USERS)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Inicializa la base de datos del User Service.")
    parser.add_argument("--no-sample-data", action="store_true", help="No cargar usuarios de ejemplo.")
    args = parser.parse_args(argv)

    try:
        create_database(db.SQLALCHEMY_DATABASE_URL)
        db.init_db()
        if not args.no_sample_data:
            session = db.SessionLocal()
            try:
                seed_sample_users(session)
            finally:
                session.close()
    except exc.SQLAlchemyError as e:
        logger.error(f"❌ Falló la inicialización: {e}", exc_info=True)
        return 1

    logger.info("🎉 Inicialización completada.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
