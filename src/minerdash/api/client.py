"""HTTP client for the minerdash proxy API.

Used by the ``status`` CLI command and by scripts that poll the proxy.
Reads never raise on HTTP failure: they log the error and return an
empty value (None, [] or {}), so a polling loop keeps running while the
proxy or the miner is down. Mutations return True on success.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class DashboardClientError(Exception):
    """Raised when the client is used without a connection."""


class DashboardClient:
    """Talks to the proxy's /api endpoints.

    Usage::

        async with DashboardClient("http://localhost:3001") as api:
            summary = await api.get_summary()
            await api.set_device_frequency(0, 550)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.debug("Dashboard client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> DashboardClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_summary(self) -> dict[str, Any] | None:
        return await self._get("/api/stats", None)

    async def get_devices(self) -> list[dict[str, Any]]:
        return await self._get("/api/devices", [])

    async def get_pools(self) -> list[dict[str, Any]]:
        return await self._get("/api/pools", [])

    async def get_version(self) -> dict[str, Any] | None:
        data = await self._get("/api/version", None)
        versions = (data or {}).get("version") or []
        return versions[0] if versions else None

    async def get_notify(self) -> list[dict[str, Any]]:
        data = await self._get("/api/notify", None)
        return (data or {}).get("notify") or []

    async def get_lcd(self) -> dict[str, Any] | None:
        data = await self._get("/api/lcd", None)
        entries = (data or {}).get("lcd") or []
        return entries[0] if entries else None

    async def get_stats_raw(self) -> list[dict[str, Any]]:
        return await self._get("/api/stats/raw", [])

    async def get_coin(self) -> dict[str, Any] | None:
        return await self._get("/api/coin", None)

    async def get_config(self) -> dict[str, Any]:
        return await self._get("/api/config", {})

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    async def send_command(self, command: str, parameter: str | None = None) -> Any:
        """Run a raw daemon command through the proxy; None on failure."""
        payload: dict[str, Any] = {"command": command}
        if parameter:
            payload["parameter"] = parameter
        data = await self._request("POST", "/api/command", payload)
        return data.get("response") if isinstance(data, dict) else None

    async def restart(self) -> bool:
        return await self._post("/api/control/restart")

    async def quit(self) -> bool:
        return await self._post("/api/control/quit")

    async def save_config(self, filename: str | None = None) -> bool:
        return await self._post("/api/control/save", {"filename": filename} if filename else {})

    async def add_pool(self, url: str, user: str, password: str) -> bool:
        return await self._post("/api/pools/add", {"url": url, "user": user, "pass": password})

    async def remove_pool(self, pool_id: int) -> bool:
        return await self._post("/api/pools/remove", {"poolId": pool_id})

    async def enable_pool(self, pool_id: int) -> bool:
        return await self._post("/api/pools/enable", {"poolId": pool_id})

    async def disable_pool(self, pool_id: int) -> bool:
        return await self._post("/api/pools/disable", {"poolId": pool_id})

    async def switch_pool(self, pool_id: int) -> bool:
        return await self._post("/api/pools/switch", {"poolId": pool_id})

    async def set_pool_priority(self, priorities: list[int]) -> bool:
        return await self._post("/api/pools/priority", {"priorities": priorities})

    async def enable_device(self, device_id: int) -> bool:
        return await self._post("/api/devices/enable", {"deviceId": device_id})

    async def disable_device(self, device_id: int) -> bool:
        return await self._post("/api/devices/disable", {"deviceId": device_id})

    async def set_device_frequency(self, device_id: int, frequency: int) -> bool:
        return await self._post(
            "/api/devices/frequency", {"deviceId": device_id, "frequency": frequency}
        )

    async def set_device_option(
        self, device_id: int, option: str, value: str | None = None
    ) -> bool:
        payload: dict[str, Any] = {"deviceId": device_id, "option": option}
        if value is not None:
            payload["value"] = value
        return await self._post("/api/devices/set", payload)

    async def set_config(self, name: str, value: int) -> bool:
        return await self._post("/api/config/set", {"name": name, "value": value})

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, default: Any) -> Any:
        data = await self._request("GET", path)
        return default if data is None else data

    async def _post(self, path: str, payload: dict[str, Any] | None = None) -> bool:
        return await self._request("POST", path, payload) is not None

    async def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> Any:
        """Send a request and return the decoded body, or None on failure."""
        if self._client is None:
            raise DashboardClientError("Not connected to the dashboard proxy")
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Dashboard API %s %s failed: %s", method, path, e)
            return None
