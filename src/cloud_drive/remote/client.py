"""HTTP client for the remote file service with MSAL authentication."""

from __future__ import annotations

import json
import logging
import mimetypes
import uuid
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode

import msal

if TYPE_CHECKING:
    from cloud_drive.config import AppConfig

logger = logging.getLogger(__name__)

AUTHORITY_BASE_URL = "https://login.microsoftonline.com"
DEFAULT_TIMEOUT = 30.0


class DriveError(Exception):
    """Base class for remote file service failures."""


class DriveAuthError(DriveError):
    """Raised when MSAL token acquisition fails."""


class DriveApiError(DriveError):
    """Raised when the file service returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Drive API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DriveConnectionError(DriveError):
    """Raised when the file service cannot be reached."""


class DriveApiClient:
    """Authenticated client for the remote file service REST API."""

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        scope: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialise the MSAL confidential client application.

        Args:
            base_url: Base URL of the file service; request paths are appended to it.
            client_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.
            tenant_id: Azure AD tenant ID.
            scope: Scope requested for the access token.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._scopes = [scope]
        self._timeout = timeout
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=f"{AUTHORITY_BASE_URL}/{tenant_id}",
        )

    def _acquire_token(self) -> str:
        """Acquire a Bearer token using client credentials flow.

        Returns:
            Access token string.

        Raises:
            DriveAuthError: If MSAL cannot acquire a token.
        """
        result: dict[str, Any] = self._app.acquire_token_for_client(scopes=self._scopes) or {}
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] MSAL token acquisition failed; error:%s", error)
            raise DriveAuthError(f"Token acquisition failed: {error}: {description}")
        return str(result["access_token"])

    def _build_url(self, path: str, params: dict[str, str] | None = None) -> str:
        url = f"{self._base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def _send(self, req: urllib_request.Request) -> bytes:
        """Send a prepared request and return the raw response body.

        Raises:
            DriveApiError: If the service returns a non-2xx status code.
            DriveConnectionError: If the service cannot be reached.
        """
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                return resp.read()  # type: ignore[no-any-return]
        except HTTPError as exc:
            raw = exc.read()
            try:
                body = json.loads(raw)
                detail = body.get("message") or body.get("error") or exc.reason
            except Exception:
                detail = exc.reason
            raise DriveApiError(exc.code, str(detail)) from exc
        except URLError as exc:
            logger.error("[_send] request failed; url:%s;reason:%s", req.full_url, exc.reason)
            raise DriveConnectionError(str(exc.reason)) from exc

    def _authorized_request(
        self,
        method: str,
        url: str,
        data: bytes | None = None,
        content_type: str | None = None,
    ) -> urllib_request.Request:
        headers = {
            "Authorization": f"Bearer {self._acquire_token()}",
            "Accept": "application/json",
        }
        if content_type is not None:
            headers["Content-Type"] = content_type
        return urllib_request.Request(url, data=data, headers=headers, method=method)

    @staticmethod
    def _decode_json(body: bytes) -> Any:
        return json.loads(body) if body else None

    def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """Perform an authenticated GET request and decode the JSON body.

        Args:
            path: URL path relative to the base URL (must start with '/').
            params: Optional query parameters.

        Returns:
            Parsed JSON response body.

        Raises:
            DriveAuthError: If token acquisition fails.
            DriveApiError: If the API returns a non-2xx status code.
            DriveConnectionError: If the service cannot be reached.
        """
        req = self._authorized_request("GET", self._build_url(path, params))
        return self._decode_json(self._send(req))

    def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """Perform an authenticated POST request with a JSON body."""
        req = self._authorized_request(
            "POST",
            self._build_url(path),
            data=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )
        return self._decode_json(self._send(req))

    def put_json(self, path: str, payload: dict[str, Any]) -> Any:
        """Perform an authenticated PUT request with a JSON body."""
        req = self._authorized_request(
            "PUT",
            self._build_url(path),
            data=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )
        return self._decode_json(self._send(req))

    def delete(self, path: str) -> None:
        """Perform an authenticated DELETE request, ignoring the response body."""
        self._send(self._authorized_request("DELETE", self._build_url(path)))

    def post_multipart(
        self,
        path: str,
        fields: dict[str, str],
        file_field: str,
        filename: str,
        content: bytes,
    ) -> Any:
        """Perform an authenticated multipart/form-data POST carrying one file.

        Args:
            path: URL path relative to the base URL (must start with '/').
            fields: Plain form fields sent alongside the file.
            file_field: Form field name for the file part.
            filename: File name reported in the file part.
            content: Raw file bytes.

        Returns:
            Parsed JSON response body.
        """
        boundary = uuid.uuid4().hex
        body = encode_multipart(boundary, fields, file_field, filename, content)
        req = self._authorized_request(
            "POST",
            self._build_url(path),
            data=body,
            content_type=f"multipart/form-data; boundary={boundary}",
        )
        return self._decode_json(self._send(req))

    def fetch_url(self, url: str) -> bytes:
        """Fetch raw bytes from an absolute content locator.

        Content locators point at public storage, so no Authorization
        header is sent.

        Args:
            url: Absolute URL of the content.

        Returns:
            Raw response body bytes.
        """
        return self._send(urllib_request.Request(url, method="GET"))


def encode_multipart(
    boundary: str,
    fields: dict[str, str],
    file_field: str,
    filename: str,
    content: bytes,
) -> bytes:
    """Encode form fields and a single file as a multipart/form-data body."""
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    parts.append(
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{file_field}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n".encode()
    )
    parts.append(content)
    parts.append(f"\r\n--{boundary}--\r\n".encode())
    return b"".join(parts)


def drive_api_client_from_config(config: AppConfig) -> DriveApiClient:
    """Construct a DriveApiClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveApiClient instance.
    """
    return DriveApiClient(
        base_url=config.api_base_url,
        client_id=config.client_id,
        client_secret=config.client_secret,
        tenant_id=config.tenant_id,
        scope=config.api_scope,
        timeout=config.request_timeout,
    )
