import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError

# ======================================================================
# --- Catalog Constants ---
# ======================================================================
DEFAULT_BOT_USERNAME = "Cineflix_Streembot"
DEFAULT_DB_NAME = "movie_db"

# 'Exclusive' titles are shown as the main banner by the delivery site
SITE_CATEGORIES = ["Exclusive", "Series", "Korean Drama", "All"]
QUALITY_OPTIONS = ["4K HDR", "4K", "Dolby Vision", "1080p", "720p", "WEB-DL", "HDCam"]

DEFAULT_CATEGORY = "Exclusive"
DEFAULT_YEAR = "2024"
DEFAULT_RATING = "9.0"
DEFAULT_QUALITY = "4K HDR"
DEFAULT_DURATION = "N/A"

# Admin view only loads the latest entries to avoid lag
ADMIN_LIST_LIMIT = 100

HTTP_TIMEOUT = 15

AUTH_PROVIDERS = ("credentials", "firebase")


# ======================================================================
# --- Environment Variables & Configuration ---
# ======================================================================
@dataclass(frozen=True)
class Config:
    mongo_uri: str
    secret_key: str
    mongo_db_name: str = DEFAULT_DB_NAME
    auth_provider: str = "credentials"
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    firebase_api_key: Optional[str] = None
    bot_username: str = DEFAULT_BOT_USERNAME
    port: int = 5000
    log_level: str = "INFO"


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Read the console configuration from the environment.

    Every missing required variable is reported at once in a single
    ``ConfigError``.
    """
    env = os.environ if environ is None else environ

    auth_provider = env.get("AUTH_PROVIDER", "credentials").strip().lower()
    if auth_provider not in AUTH_PROVIDERS:
        raise ConfigError(f"Unknown AUTH_PROVIDER '{auth_provider}', expected one of: {', '.join(AUTH_PROVIDERS)}")

    required_vars = {"MONGO_URI": env.get("MONGO_URI"), "SECRET_KEY": env.get("SECRET_KEY")}
    if auth_provider == "credentials":
        required_vars["ADMIN_USERNAME"] = env.get("ADMIN_USERNAME")
        required_vars["ADMIN_PASSWORD"] = env.get("ADMIN_PASSWORD")
    else:
        required_vars["FIREBASE_API_KEY"] = env.get("FIREBASE_API_KEY")

    missing_vars = [name for name, value in required_vars.items() if not value]
    if missing_vars:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing_vars)}")

    port = env.get("PORT", "5000")
    try:
        port = int(port)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got '{port}'")

    return Config(
        mongo_uri=env["MONGO_URI"],
        secret_key=env["SECRET_KEY"],
        mongo_db_name=env.get("MONGO_DB_NAME") or DEFAULT_DB_NAME,
        auth_provider=auth_provider,
        admin_username=env.get("ADMIN_USERNAME"),
        admin_password=env.get("ADMIN_PASSWORD"),
        firebase_api_key=env.get("FIREBASE_API_KEY"),
        bot_username=(env.get("BOT_USERNAME") or DEFAULT_BOT_USERNAME).lstrip("@"),
        port=port,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
