import logging
from importlib import metadata

from starlette.requests import Request
from starlette.responses import JSONResponse

from fastmcp import FastMCP

from core.config import (
    get_transport_mode,
    set_transport_mode as _set_transport_mode,
)

logger = logging.getLogger(__name__)

PACKAGE_NAME = "google-docs-mcp"

server = FastMCP(name="google_docs")


def set_transport_mode(mode: str):
    """Sets the transport mode for the server."""
    _set_transport_mode(mode)
    logger.info(f"Transport: {mode}")


def get_version() -> str:
    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return "dev"


@server.custom_route("/health", methods=["GET"])
async def health_check(request: Request):
    return JSONResponse(
        {
            "status": "healthy",
            "service": PACKAGE_NAME,
            "version": get_version(),
            "transport": get_transport_mode(),
        }
    )
