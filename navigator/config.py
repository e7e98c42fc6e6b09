import os
from typing import Final


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


class _Config:
    def __init__(self) -> None:
        # Generative provider
        self.gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # "text" -> labeled blocks inside markdown, "json" -> structured object
        self.response_mode: str = os.getenv("NAVIGATOR_RESPONSE_MODE", "text").lower()

        # Limits
        self.rate_limit: str = os.getenv("NAVIGATOR_RATE_LIMIT", "30/minute")

        # HTTP behavior
        self.user_agent: str = os.getenv("NAVIGATOR_USER_AGENT", "CampervanNavigator")
        self.http_timeout_sec: float = _float_env("HTTP_TIMEOUT_SEC", 10.0)

        # External API bases
        self.open_meteo_base: str = os.getenv("OPEN_METEO_BASE", "https://api.open-meteo.com/v1/forecast")

        # Fallback caller location (Taipei)
        self.default_lat: float = _float_env("DEFAULT_LAT", 25.0330)
        self.default_lng: float = _float_env("DEFAULT_LNG", 121.5654)


CONFIG: Final[_Config] = _Config()
