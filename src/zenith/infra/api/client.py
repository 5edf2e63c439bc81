"""Bearer-token JSON client for the remote backend."""

from __future__ import annotations

from typing import Any, Optional

import requests

from ...errors import ApiError
from ...logging_config import get_logger

logger = get_logger("infra.api")

CONNECTION_ERROR = "Could not connect to the server"


class ApiClient:
    """Thin wrapper over a ``requests.Session``.

    Every call is a single round trip: no retries. Failures become
    ``ApiError`` carrying the backend's ``message`` when it sent one.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.http = http or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        error_message: str = "Request failed",
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body."""

        url = f"{self.base_url}{path}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            response = self.http.request(
                method,
                url,
                json=json,
                params=params or None,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(
                "Backend unreachable", extra={"method": method, "url": url, "error": str(exc)}
            )
            raise ApiError(CONNECTION_ERROR) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"data": data}

        if not response.ok:
            message = data.get("message") or error_message
            logger.warning(
                "Backend rejected request",
                extra={"method": method, "url": url, "status": response.status_code},
            )
            raise ApiError(message, status_code=response.status_code)
        return data

    def get(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("DELETE", path, **kwargs)
