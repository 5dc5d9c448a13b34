import os
from typing import List, Optional

from pydantic import BaseModel

OPIK_PROJECT_NAME = "git-recipes"
WEAVIATE_RECIPE_CLASS = "Recipe"

DEFAULT_USER_AGENT = (
    "git-recipes/1.0 (+https://github.com/git-recipes; recipe importer) "
    "python-requests"
)


class ConfigError(Exception):
    """Raised when required environment variables are missing."""

    def __init__(self, missing: List[str], prefix: str = "Missing required environment variables"):
        self.missing = missing
        super().__init__(f"{prefix}: {', '.join(missing)}")


class WeaviateConfig(BaseModel):
    url: str
    api_key: str


class OpikConfig(BaseModel):
    api_key: str
    workspace: str
    url_override: Optional[str] = None


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def get_weaviate_config() -> WeaviateConfig:
    url = _env("WEAVIATE_URL")
    api_key = _env("WEAVIATE_API_KEY")

    missing = [name for name, value in (("WEAVIATE_URL", url), ("WEAVIATE_API_KEY", api_key)) if not value]
    if missing:
        raise ConfigError(missing)

    return WeaviateConfig(url=url, api_key=api_key)


def get_opik_config() -> OpikConfig:
    api_key = _env("OPIK_API_KEY")
    workspace = _env("OPIK_WORKSPACE")
    url_override = _env("OPIK_URL_OVERRIDE")

    missing = [name for name, value in (("OPIK_API_KEY", api_key), ("OPIK_WORKSPACE", workspace)) if not value]
    if missing:
        raise ConfigError(missing, prefix="Missing required Opik environment variables")

    return OpikConfig(api_key=api_key, workspace=workspace, url_override=url_override or None)


def get_allowed_origins() -> List[str]:
    return [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "").split(",") if origin.strip()]


def get_scraper_user_agent() -> str:
    return _env("SCRAPER_USER_AGENT") or DEFAULT_USER_AGENT


def get_scraper_timeout() -> float:
    return float(os.getenv("SCRAPER_TIMEOUT", "15"))


def get_search_limit() -> int:
    return int(os.getenv("SEARCH_LIMIT", "10"))


def get_rate_limits() -> List[str]:
    raw = os.getenv("RATE_LIMITS", "100/hour;1000/day")
    return [limit.strip() for limit in raw.split(";") if limit.strip()]


def rate_limit_enabled() -> bool:
    return os.getenv("RATE_LIMIT_ENABLED", "true").strip().lower() not in ("0", "false", "no", "off")


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "git_recipes": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
