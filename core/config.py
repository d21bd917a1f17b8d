"""
Shared configuration for the Google Docs MCP server.

Values come from the environment; a .env file next to this project is loaded
first so local settings do not need to be exported by hand.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=PROJECT_ROOT / ".env")

CONFIG_DIR = Path.home() / ".config" / "gdrive-mcp"

SCOPES = [
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/drive",
]

SERVICE_ACCOUNT_PATH: Optional[str] = os.getenv("SERVICE_ACCOUNT_PATH")
GOOGLE_IMPERSONATE_USER: Optional[str] = os.getenv("GOOGLE_IMPERSONATE_USER")

MAX_BATCH_REQUESTS = int(os.getenv("GDOCS_MAX_BATCH_REQUESTS", "500"))
DEFAULT_READ_FORMAT = os.getenv("GDOCS_DEFAULT_READ_FORMAT", "text")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

_transport_mode = os.getenv("MCP_TRANSPORT", "stdio")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))


def resolve_path(env_var: str, filename: str) -> Path:
    """
    Locate a credentials file.

    The environment variable wins, then the current working directory, then
    ~/.config/gdrive-mcp/. Falls back to the working directory so that a
    missing file is reported with a predictable path.
    """
    explicit = os.getenv(env_var)
    if explicit:
        return Path(explicit)
    cwd_path = Path.cwd() / filename
    if cwd_path.exists():
        return cwd_path
    config_path = CONFIG_DIR / filename
    if config_path.exists():
        return config_path
    return cwd_path


def get_token_path() -> Path:
    return resolve_path("GDRIVE_MCP_TOKEN_PATH", "token.json")


def get_transport_mode() -> str:
    return _transport_mode


def set_transport_mode(mode: str) -> None:
    global _transport_mode
    if mode not in ("stdio", "streamable-http"):
        raise ValueError(f"Unsupported transport mode: {mode}")
    _transport_mode = mode
