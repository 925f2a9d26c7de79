"""Configuración de la conexión a la base de datos MySQL/MariaDB usando SQLAlchemy para el User Service."""

import os
import logging
import time
from sqlalchemy import create_engine, exc, text
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

# Configuración del logger
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Carga variables de entorno desde el archivo .env
load_dotenv()

# Lee las credenciales de la base de datos desde el entorno
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_HOST = os.getenv("DB_HOST")
DB_PORT = int(os.getenv("DB_PORT", 3306))
DB_NAME = os.getenv("DB_NAME")

DB_CONNECT_ATTEMPTS = int(os.getenv("DB_CONNECT_ATTEMPTS", 30))
DB_CONNECT_WAIT = int(os.getenv("DB_CONNECT_WAIT", 10))  # segundos

# DATABASE_URL tiene prioridad (útil para SQLite en desarrollo y pruebas)
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL")

if not SQLALCHEMY_DATABASE_URL:
    # Valida que las variables necesarias estén presentes
    required_db_vars = {"DB_USER", "DB_PASS", "DB_HOST", "DB_NAME"}
    missing_vars = required_db_vars - set(os.environ)
    if missing_vars:
        logger.error(f"Faltan variables de entorno para la base de datos: {', '.join(sorted(missing_vars))}")

    SQLALCHEMY_DATABASE_URL = f"mysql+pymysql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4"


def build_engine(url: str):
    """Crea el engine. SQLite necesita compartir conexiones entre hilos del threadpool."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(SQLALCHEMY_DATABASE_URL)

# Crea una fábrica de sesiones (SessionLocal)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Crea una clase base (Base) para los modelos declarativos
Base = declarative_base()


def wait_for_db(attempts: int = DB_CONNECT_ATTEMPTS, wait_time: int = DB_CONNECT_WAIT) -> bool:
    """
    Intenta conectar hasta `attempts` veces, esperando `wait_time` segundos entre intentos.
    Devuelve True si la conexión quedó establecida.
    """
    for attempt in range(1, attempts + 1):
        try:
            logger.info(f"Intentando conectar a la base de datos (Intento {attempt}/{attempts})...")
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            logger.info("✅ Conexión a la base de datos establecida exitosamente.")
            return True
        except exc.SQLAlchemyError as e:
            logger.warning(f"Fallo al conectar a la base de datos: {e}")
            if attempt < attempts:
                time.sleep(wait_time)

    logger.error("No se pudo conectar a la base de datos después de %d intentos.", attempts)
    return False


def init_db() -> None:
    """Crea la tabla 'users' si no existe (sin migraciones)."""
    import user_service.models  # noqa: F401  registra el modelo en Base.metadata

    Base.metadata.create_all(bind=engine)
    logger.info("Tablas de base de datos verificadas/creadas.")


def get_db():
    """Una sesión por request; rollback ante cualquier error y cierre garantizado."""
    db = SessionLocal()
    try:
        yield db
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error de base de datos durante la petición: {e}", exc_info=True)
        raise
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
