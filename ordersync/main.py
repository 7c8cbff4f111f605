"""
ordersync — FastAPI application entrypoint
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from ordersync.api import cart, delivery, health, menu, orders
from ordersync.api.deps import shutdown
from ordersync.core.config import get_settings
from ordersync.core.logging import configure_logging

settings = get_settings()
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown()


app = FastAPI(
    title="OrderSync",
    description="Offline-tolerant cart, cached menu, and order submission with pending/history bookkeeping.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(cart.router)
app.include_router(menu.router)
app.include_router(delivery.router)
app.include_router(orders.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
