"""
Google API client set.

The Docs and Drive clients are built once at process start and handed to every
tool explicitly. Nothing in the server keeps module-level client handles.
"""
import logging
from dataclasses import dataclass
from typing import Any

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from core import config

logger = logging.getLogger(__name__)


class CredentialsUnavailableError(RuntimeError):
    """Raised when neither a service account key nor a token file can be loaded."""


@dataclass(frozen=True)
class ClientSet:
    docs: Any
    drive: Any

    @classmethod
    def from_credentials(cls, credentials) -> "ClientSet":
        return cls(
            docs=build("docs", "v1", credentials=credentials, cache_discovery=False),
            drive=build("drive", "v3", credentials=credentials, cache_discovery=False),
        )


def _service_account_credentials(path: str):
    creds = service_account.Credentials.from_service_account_file(path, scopes=config.SCOPES)
    if config.GOOGLE_IMPERSONATE_USER:
        logger.info(f"Impersonating {config.GOOGLE_IMPERSONATE_USER} via domain-wide delegation")
        creds = creds.with_subject(config.GOOGLE_IMPERSONATE_USER)
    return creds


def load_credentials():
    """
    Return usable Google credentials.

    Uses the service account key at SERVICE_ACCOUNT_PATH when set, otherwise an
    authorized-user token file. Expired user credentials with a refresh token
    are refreshed in place; obtaining a new token is out of scope here.
    """
    if config.SERVICE_ACCOUNT_PATH:
        logger.info(f"Using service account credentials from {config.SERVICE_ACCOUNT_PATH}")
        return _service_account_credentials(config.SERVICE_ACCOUNT_PATH)

    token_path = config.get_token_path()
    if not token_path.exists():
        raise CredentialsUnavailableError(
            f"Token file not found: {token_path}. Set SERVICE_ACCOUNT_PATH, or "
            "GDRIVE_MCP_TOKEN_PATH to an authorized-user token file."
        )

    creds = Credentials.from_authorized_user_file(str(token_path), config.SCOPES)
    if creds.expired and creds.refresh_token:
        creds.refresh(Request())
        logger.debug("Refreshed user credentials")
    return creds


def build_client_set() -> ClientSet:
    return ClientSet.from_credentials(load_credentials())
