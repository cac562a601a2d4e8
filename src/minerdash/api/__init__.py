"""HTTP/JSON proxy for the cgminer API and a client for it.

Public API:
    create_app -- FastAPI application factory (requires fastapi/uvicorn)
    DashboardClient -- httpx client for the proxy endpoints
"""

__all__ = ["DashboardClient", "create_app"]


def __getattr__(name: str) -> object:
    """Lazy import so the mapping helpers load without the web stack."""
    if name == "create_app":
        from minerdash.api.server import create_app
        return create_app
    if name == "DashboardClient":
        from minerdash.api.client import DashboardClient
        return DashboardClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
