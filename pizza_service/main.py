import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pizza_service.config import CORS_ORIGINS, LOG_LEVEL
from pizza_service.database import init_db
from pizza_service.errors import PizzaServiceError
from pizza_service.routes import auth, orders

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(title="Pizza Service API", lifespan=lifespan)

_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_cors_origins.extend(CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(orders.router, prefix="/api", tags=["order"])


@app.exception_handler(PizzaServiceError)
async def service_error_handler(request: Request, exc: PizzaServiceError):
    """Map classified service failures to their HTTP status"""
    logger.info(f"{request.method} {request.url.path} -> {exc.http_status}: {exc}")
    return JSONResponse(status_code=exc.http_status, content={"detail": str(exc)})


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify the service is up"""
    return {"app_name": "Pizza Service API", "status": "healthy"}
