"""HTTP client for a running Billing Bridge server."""

from typing import Any

import httpx


class BillingBridgeClientError(Exception):
    """Raised when the server cannot be reached or returns a non-JSON error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BillingBridgeClient:
    """Thin synchronous wrapper around the HTTP surface."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "BillingBridgeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, json: Any = None) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise BillingBridgeClientError(f"Request to {path} failed: {e}")

        try:
            data = response.json()
        except ValueError:
            raise BillingBridgeClientError(
                f"{method} {path} returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        # Business failures come back as 200 with success=false; only
        # transport-level statuses are raised.
        if response.status_code >= 400:
            message = data.get("error") if isinstance(data, dict) else None
            raise BillingBridgeClientError(
                f"{method} {path} returned HTTP {response.status_code}: {message or response.text[:200]}",
                status_code=response.status_code,
            )
        return data

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health")

    def list_tools(self) -> list[dict[str, Any]]:
        return self._request("GET", "/api/tools").get("tools", [])

    def execute_tool(self, name: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return self._request("POST", f"/api/tools/{name}", json=params or {})

    def invoke(self, tool: str, parameters: dict[str, Any] | None = None) -> dict[str, Any]:
        return self._request("POST", "/api/invoke", json={"tool": tool, "parameters": parameters or {}})
