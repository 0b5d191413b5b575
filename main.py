import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beacon_app.config import settings
from beacon_app.dependencies import get_client_ip, get_store
from beacon_app.exceptions import BeaconError
from beacon_app.logging_config import configure_logging
from beacon_app.schemas.beacon import ErrorResponse
from beacon_app.store.strategies import CounterStoreStrategy
from beacon_app.api.v1 import beacon

configure_logging(settings.log_level)
logger = logging.getLogger("beacon_app.requests")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the counting store (with its startup ping) before serving hits"""
    get_store()
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A JSONP visitor counter backed by Redis",
    debug=settings.debug,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    allow_headers=["Origin", "Content-Length", "Content-Type"],
)


@app.middleware("http")
async def log_request(request: Request, call_next):
    """Log client and referring page of every request"""
    logger.info("IP: %s, Url: %s", get_client_ip(request), request.headers.get("referer", ""))
    return await call_next(request)


@app.exception_handler(BeaconError)
async def beacon_error_handler(request: Request, exc: BeaconError):
    """Render rejected hits as {"code": ..., "message": ...}"""
    body = ErrorResponse(code=exc.status_code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/health")
async def health_check(store: CounterStoreStrategy = Depends(get_store)):
    """Health check endpoint"""
    try:
        store_up = await store.ping()
    except Exception as e:
        logger.error("Store ping failed: %r", e)
        store_up = False
    return {
        "status": "healthy",
        "environment": settings.environment,
        "store": "up" if store_up else "down"
    }




######## Include routers
app.include_router(beacon.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
