import logging
import time
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

# Importaciones locales
from user_service.db import get_db, init_db, wait_for_db
from user_service.operations import dispatch
from user_service.schemas import Action
from user_service.utils import CORS_ORIGINS

# Configura logger
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Acciones que leen sus campos del formulario (POST); el resto usa la query string
WRITE_ACTIONS = {Action.CREATE.value, Action.UPDATE.value, Action.DELETE.value}
ACTION_VALUES = {action.value for action in Action}

# Inicializa FastAPI
app = FastAPI(
    title="User Service",
    description="CRUD de usuarios (nombre, email, teléfono) sobre una única tabla relacional.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# --- Métricas Prometheus ---
REQUEST_COUNT = Counter(
    "user_requests_total",
    "Total requests processed by User Service",
    ["method", "endpoint", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "user_request_latency_seconds",
    "Request latency in seconds for User Service",
    ["endpoint"]
)
USER_OPERATIONS = Counter(
    "user_operations_total",
    "CRUD operations dispatched by User Service",
    ["action", "outcome"]
)


@app.on_event("startup")
def startup_event():
    # Espera a la BD y crea la tabla si no existe
    if wait_for_db():
        try:
            init_db()
        except Exception as e:
            logger.error(f"Error al inicializar la base de datos: {e}", exc_info=True)
    else:
        logger.error("Servicio iniciado sin base de datos; las operaciones responderán con error.")


# --- Middleware para Métricas ---
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    response = None
    status_code = 500

    try:
        response = await call_next(request)
        status_code = response.status_code
    except Exception as exc:
        logger.error(f"Unhandled exception during request processing: {exc}", exc_info=True)
        response = JSONResponse({"success": False, "message": "Internal Server Error", "error": "store_error"}, status_code=500)
    finally:
        latency = time.time() - start_time
        endpoint = request.url.path
        final_status_code = getattr(response, 'status_code', status_code)

        REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=final_status_code
        ).inc()

    return response


# --- Endpoints de Salud y Métricas ---
@app.get("/metrics", tags=["Monitoring"])
def metrics():
    """Exposes application metrics for Prometheus."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health", tags=["Monitoring"])
def health_check():
    """Performs a basic health check of the service."""
    return {"status": "ok", "service": "user_service"}


# --- Endpoint de API ---

@app.api_route("/operations", methods=["GET", "POST"], tags=["Users"])
async def operations(request: Request, db: Session = Depends(get_db)):
    """
    Punto único de entrada CRUD: ?action=list|get|create|update|delete.
    'get' lee el id de la query string; create/update/delete leen el formulario.
    """
    query = dict(request.query_params)
    form = {}
    if request.method == "POST":
        form_data = await request.form()
        form = {key: value for key, value in form_data.items() if isinstance(value, str)}

    raw_action = query.get("action") or form.get("action")
    params = form if raw_action in WRITE_ACTIONS else query
    logger.info(f"Acción '{raw_action}' recibida ({request.method})")

    status_code, envelope = await run_in_threadpool(dispatch, raw_action, params, db)

    USER_OPERATIONS.labels(
        action=raw_action if raw_action in ACTION_VALUES else "invalid",
        outcome="success" if envelope.success else envelope.error
    ).inc()
    return JSONResponse(envelope.to_content(), status_code=status_code)
