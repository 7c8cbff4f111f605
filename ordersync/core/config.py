"""
ordersync — Configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "ordersync"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8010
    LOG_LEVEL: str = "INFO"

    # ── Redis (local key-value store) ─────────────────────────
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_SOCKET_TIMEOUT: float = 5.0

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── Remote Order/Menu Service ─────────────────────────────
    ORDER_API_BASE_URL: str = "https://www.spkdroid.com/orange"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    CHECKOUT_TIMEOUT_SECONDS: float = 15.0

    # ── Menu Cache ────────────────────────────────────────────
    MENU_CACHE_TTL_SECONDS: int = 900
    MENU_CACHE_FRESHNESS_ENABLED: bool = False

    # ── Pricing ───────────────────────────────────────────────
    TAX_RATE: float = 0.08
    DELIVERY_FEE: float = 5.00
    CURRENCY: str = "USD"

    # ── Order Bookkeeping ─────────────────────────────────────
    ORDER_HISTORY_LIMIT: int = 50
    CHECKOUT_MAX_ATTEMPTS: int = 3
    CHECKOUT_RETRY_DELAY_SECONDS: float = 0.0

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
