import os
from dotenv import load_dotenv

from photoframe.defaults import FETCH_TIMEOUT, DEFAULT_OUTPUT_FORMAT

load_dotenv()


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name, default):
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


PHOTOFRAME_FETCH_TIMEOUT = _env_float("PHOTOFRAME_FETCH_TIMEOUT", FETCH_TIMEOUT)
PHOTOFRAME_ALLOW_LOCAL_SOURCES = _env_bool("PHOTOFRAME_ALLOW_LOCAL_SOURCES")
PHOTOFRAME_OUTPUT_FORMAT = os.getenv("PHOTOFRAME_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT).strip().lower()
