import os
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import httpx
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
import uvicorn
from navigator.routers.chat import router as chat_router
from navigator.routers.info import router as info_router
from .config import CONFIG
from .conversation import Conversation
from .deps import ConversationStore
from .provider import GeminiItineraryProvider, ItineraryProvider
from .weather import ForecastGateway, OpenMeteoGateway


# --- Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler()  # Ensure logs go to stdout/stderr
    ]
)
# --------------------------


def create_app(
    provider: Optional[ItineraryProvider] = None,
    gateway: Optional[ForecastGateway] = None,
) -> FastAPI:
    """Build the app; the provider and gateway default to Gemini and Open-Meteo."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client = httpx.AsyncClient(timeout=CONFIG.http_timeout_sec)
        app.state.http_client = http_client
        itinerary_provider = provider or GeminiItineraryProvider()
        forecast_gateway = gateway or OpenMeteoGateway(http_client)
        app.state.conversations = ConversationStore(
            lambda: Conversation(itinerary_provider, forecast_gateway)
        )
        try:
            yield
        finally:
            await http_client.aclose()

    limiter = Limiter(key_func=get_remote_address, default_limits=[CONFIG.rate_limit])
    app = FastAPI(title="Campervan Navigator", lifespan=lifespan)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=512)
    app.include_router(chat_router, prefix="/chat")
    app.include_router(info_router, prefix="/info")

    @app.get("/")
    async def root(_: Request):
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3002"))
    uvicorn.run(app, host="0.0.0.0", port=port)
