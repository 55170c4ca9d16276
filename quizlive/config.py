import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3001"))
    # Width of the numeric join code
    PIN_DIGITS = int(os.getenv("PIN_DIGITS", "4"))
    # Period of the "Active sessions" log line (seconds). 0 disables.
    STATS_INTERVAL_SEC = int(os.getenv("STATS_INTERVAL_SEC", "300"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    SOCKETIO_LOGGER = _env_bool("SOCKETIO_LOGGER")
    PING_TIMEOUT = int(os.getenv("PING_TIMEOUT", "60"))
    PING_INTERVAL = int(os.getenv("PING_INTERVAL", "25"))
