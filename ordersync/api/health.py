"""
ordersync — Health endpoint
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ordersync.api.deps import get_api_client
from ordersync.clients.order_api import OrderApiClient
from ordersync.core.config import get_settings
from ordersync.core.redis_client import ping_redis

settings = get_settings()
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(api: OrderApiClient = Depends(get_api_client)):
    deps: dict[str, str] = {}
    healthy = True

    deps["redis"] = await ping_redis(settings)
    if deps["redis"] != "ok":
        healthy = False

    # The app still serves cached menus and queues orders while the upstream is down
    deps["order-api"] = "ok" if await api.ping() else "unreachable"
    if deps["order-api"] != "ok":
        healthy = False

    return JSONResponse(
        content={
            "status": "healthy" if healthy else "degraded",
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "dependencies": deps,
        },
        status_code=200 if healthy else 503,
    )
