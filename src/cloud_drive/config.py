"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Display and
    transport constants have sensible defaults but can be overridden via
    environment variables.
    """

    # Required, no defaults, fail at startup if missing
    api_base_url: str
    client_id: str
    client_secret: str
    tenant_id: str
    api_scope: str

    # Defaults provided, overridable via env
    download_dir: str = "downloads"
    home_folder_name: str = "Home"
    recent_limit: int = 4
    request_timeout: float = 30.0


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        CD_API_BASE_URL: Base URL of the remote file service (e.g. https://drive.example.com/api).
        CD_CLIENT_ID: Azure AD application (client) ID used to call the service.
        CD_CLIENT_SECRET: Azure AD application client secret.
        CD_TENANT_ID: Azure AD tenant ID.
        CD_API_SCOPE: Scope requested for the service token (e.g. api://<app-id>/.default).

    Optional environment variables (with defaults):
        CD_DOWNLOAD_DIR: Directory where downloaded files are written (default: downloads).
        CD_HOME_FOLDER_NAME: Display name of the root folder (default: Home).
        CD_RECENT_LIMIT: Number of entries in the recent view (default: 4).
        CD_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 30).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        api_base_url=os.environ["CD_API_BASE_URL"],
        client_id=os.environ["CD_CLIENT_ID"],
        client_secret=os.environ["CD_CLIENT_SECRET"],
        tenant_id=os.environ["CD_TENANT_ID"],
        api_scope=os.environ["CD_API_SCOPE"],
        download_dir=os.environ.get("CD_DOWNLOAD_DIR", "downloads"),
        home_folder_name=os.environ.get("CD_HOME_FOLDER_NAME", "Home"),
        recent_limit=int(os.environ.get("CD_RECENT_LIMIT", "4")),
        request_timeout=float(os.environ.get("CD_REQUEST_TIMEOUT", "30")),
    )
