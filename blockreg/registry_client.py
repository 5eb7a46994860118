"""Client for the asset registry's reservation and lookup API."""

from __future__ import annotations

import json
import socket
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from .core.exceptions import RegistryAPIError, RegistryConnectionError, ReservationError
from .core.models.registry import AssetVersion, Reservation
from .services.auth import Authentication


def _get_logger():
    from .core.di import resolve_or_default
    from .core.interfaces.logger import ILogger
    from .services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)


def get_registry_url() -> str | None:
    """Registry URL from config (which also honours BLOCKREG_REGISTRY_URL)."""
    from .config import config_get

    return config_get("registry.url")


def _asset_path(name: str, version: str) -> str:
    handle, _, short_name = name.partition("/")
    return "/" + "/".join(urllib.parse.quote(part, safe="") for part in (handle, short_name, version))


class RegistryClient:
    """
    Client for the asset registry.

    Lookups answer ``None`` for 404. Connection failures raise
    RegistryConnectionError naming the registry URL; other error responses
    raise RegistryAPIError carrying the server's ``message``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        auth: Authentication | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or get_registry_url()
        if self.base_url:
            self.base_url = self.base_url.rstrip("/")
        self.auth = auth or Authentication()
        if timeout is None:
            from .config import config_get

            timeout = config_get("registry.timeout") or 30.0
        self.timeout = timeout

    def is_configured(self) -> bool:
        """Check if a registry URL is configured."""
        return bool(self.base_url)

    def _parse_json_response(
        self, response_body: str, http_status: int
    ) -> tuple[Any | None, str | None]:
        """Parse JSON response with descriptive error messages.

        Returns (parsed, error_message).
        """
        if not response_body or not response_body.strip():
            return None, f"Registry returned empty response (HTTP {http_status})"

        stripped = response_body.strip()
        if stripped.startswith("<!") or stripped.lower().startswith("<html"):
            preview = response_body[:100].replace("\n", " ")
            return None, f"Registry returned HTML instead of JSON: '{preview}...'"

        try:
            return json.loads(response_body), None
        except json.JSONDecodeError as e:
            preview = response_body[:100].replace("\n", " ")
            return None, (
                f"Invalid JSON in response (HTTP {http_status}) at position {e.pos}: '{preview}...'"
            )

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        auth_required: bool = False,
        not_found_ok: bool = False,
    ) -> Any | None:
        """
        Make a registry request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the registry URL
            body: JSON-serializable request body
            headers: Extra request headers
            auth_required: Fail when no token is available
            not_found_ok: Answer None instead of raising on 404

        Raises:
            RegistryConnectionError: If the registry cannot be reached
            RegistryAPIError: For error responses and undecodable bodies
            AuthenticationError: If ``auth_required`` and no token is available
        """
        if not self.base_url:
            raise RegistryAPIError("Registry URL not configured")

        url = f"{self.base_url}{path}"
        body_bytes = json.dumps(body).encode() if body is not None else None

        _get_logger().debug(
            "API request: %s %s (body: %d bytes)",
            method,
            url,
            len(body_bytes) if body_bytes else 0,
        )

        req = urllib.request.Request(url, data=body_bytes, method=method)
        req.add_header("Accept", "application/json")
        if body_bytes:
            req.add_header("Content-Type", "application/json")
        if auth_required or self.auth.has_credentials():
            req.add_header("Authorization", f"Bearer {self.auth.get_token()}")
        for key, value in (headers or {}).items():
            req.add_header(key, value)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                http_status = resp.status
                response_body = resp.read().decode()
        except urllib.error.HTTPError as e:
            if e.code == 404 and not_found_ok:
                _get_logger().debug("API response: %s %s -> HTTP 404", method, path)
                return None
            raise self._api_error(e, method, path, url) from e
        except (urllib.error.URLError, ConnectionError, socket.timeout) as e:
            _get_logger().debug("Registry connection error to %s: %s", url, e)
            raise RegistryConnectionError(self.base_url, cause=e) from e

        _get_logger().debug(
            "API response: %s %s -> HTTP %d (%d bytes)",
            method,
            path,
            http_status,
            len(response_body),
        )

        if not response_body.strip():
            return None

        result, error = self._parse_json_response(response_body, http_status)
        if error:
            raise RegistryAPIError(error, status_code=http_status, url=url)
        return result

    def _api_error(
        self, e: urllib.error.HTTPError, method: str, path: str, url: str
    ) -> RegistryAPIError:
        error_body = e.read().decode() if e.fp else ""
        error_data, _ = self._parse_json_response(error_body, e.code)
        if isinstance(error_data, dict) and error_data.get("message"):
            detail = str(error_data["message"])
        elif error_body and not error_data:
            preview = error_body[:100].replace("\n", " ")
            detail = f"HTTP {e.code}: {preview}"
        else:
            detail = f"HTTP {e.code}: {e.reason}"
        _get_logger().debug("API error: %s %s -> HTTP %d: %s", method, path, e.code, detail[:200])
        return RegistryAPIError(detail, status_code=e.code, url=url)

    # -------------------------------------------------------------------------
    # Reservation protocol
    # -------------------------------------------------------------------------

    def reserve(
        self,
        definitions: list[dict[str, Any]],
        *,
        branch: str | None = None,
        commit: str | None = None,
        checksum: str | None = None,
        ttl: int | None = None,
    ) -> Reservation:
        """
        Reserve versions for every definition in one push.

        Raises:
            ReservationError: If the registry returned no reservation
        """
        body = {
            "assets": definitions,
            "branch": branch,
            "commit": commit,
            "checksum": checksum,
            "ttl": ttl,
        }
        result = self._request("POST", "/reserve", body, auth_required=True)
        if not result:
            raise ReservationError(
                "Failed to reserve version - no reservation returned from registry."
            )
        return Reservation.model_validate(result)

    def commit(
        self, reservation: Reservation, versions: list[AssetVersion]
    ) -> list[AssetVersion]:
        """Commit assembled versions under ``reservation``."""
        body = [v.model_dump(mode="json", exclude_none=True) for v in versions]
        result = self._request(
            "POST",
            "/publish",
            body,
            headers={"If-Match": reservation.id},
            auth_required=True,
        )
        if isinstance(result, list):
            return [AssetVersion.model_validate(item) for item in result]
        return versions

    def abort(self, reservation: Reservation) -> None:
        """Release ``reservation`` without publishing anything."""
        self._request(
            "DELETE",
            f"/reservations/{urllib.parse.quote(reservation.id, safe='')}",
            auth_required=True,
        )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_version(self, name: str, version: str) -> AssetVersion | None:
        """Registered version, or None if it does not exist."""
        result = self._request("GET", _asset_path(name, version), not_found_ok=True)
        return AssetVersion.model_validate(result) if result else None

    def get_latest_version_before(self, name: str, version: str) -> AssetVersion | None:
        """Newest registered version older than ``version``, or None."""
        result = self._request(
            "GET", _asset_path(name, version) + "/previous", not_found_ok=True
        )
        return AssetVersion.model_validate(result) if result else None

    def get_latest_version(self, name: str) -> AssetVersion | None:
        return self.get_version(name, "latest")
