"""Runtime configuration loaded from the environment."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATA_DIR = "data"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_AI_TIMEOUT = 30.0
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122


def get_data_dir() -> str:
    """Return the directory holding the persisted entities."""
    return os.environ.get("PELADA_DATA_DIR", DEFAULT_DATA_DIR)


def get_gemini_api_key() -> Optional[str]:
    """Return GEMINI_API_KEY, or None when AI balancing is not configured."""
    key = os.environ.get("GEMINI_API_KEY", "").strip()
    return key or None


def get_gemini_model() -> str:
    return os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)


def get_ai_timeout() -> float:
    raw = os.environ.get("PELADA_AI_TIMEOUT")
    try:
        return float(raw) if raw else DEFAULT_AI_TIMEOUT
    except ValueError:
        return DEFAULT_AI_TIMEOUT


def get_server_address() -> tuple:
    """Return (host, port) for the web server."""
    host = os.environ.get("PELADA_HOST", DEFAULT_HOST)
    try:
        port = int(os.environ.get("PELADA_PORT", DEFAULT_PORT))
    except ValueError:
        port = DEFAULT_PORT
    return host, port
