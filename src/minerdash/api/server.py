"""FastAPI HTTP proxy in front of the cgminer API.

Every request issues one daemon command through CGMinerClient and
returns the reply, reshaped into camelCase fields where the dashboard
expects it.

Read endpoints:

    GET  /api/health       -> {"status": "ok", ...}
    GET  /api/stats        -> summary
    GET  /api/stats/raw    -> stats
    GET  /api/devices      -> devs
    GET  /api/devdetails   -> devdetails
    GET  /api/pools        -> pools
    GET  /api/config       -> config
    GET  /api/coin         -> coin
    GET  /api/usbstats     -> usbstats
    GET  /api/version      -> version
    GET  /api/notify       -> notify
    GET  /api/lcd          -> lcd

Control endpoints (all answer {"success": true, "response": ...}):

    POST /api/command             <- {"command": "pools", "parameter": null}
    POST /api/control/restart
    POST /api/control/quit
    POST /api/control/save        <- {"filename": "cgminer.conf"}
    POST /api/pools/add           <- {"url": ..., "user": ..., "pass": ...}
    POST /api/pools/remove        <- {"poolId": 1}
    POST /api/pools/enable        <- {"poolId": 1}
    POST /api/pools/disable       <- {"poolId": 1}
    POST /api/pools/switch        <- {"poolId": 1}
    POST /api/pools/priority      <- {"priorities": [2, 0, 1]}
    POST /api/devices/enable      <- {"deviceId": 0}
    POST /api/devices/disable     <- {"deviceId": 0}
    POST /api/devices/set         <- {"deviceId": 0, "option": "freq", "value": 550}
    POST /api/devices/frequency   <- {"deviceId": 0, "frequency": 550}
    POST /api/config/set          <- {"name": "queue", "value": 2}

Daemon failures (connect errors, timeouts, unparseable replies) are
answered with HTTP 500 and {"error": "<message>"}.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from minerdash.api import mapping
from minerdash.cgminer import commands
from minerdash.cgminer.client import CGMinerClient
from minerdash.cgminer.errors import MinerError
from minerdash.config.settings import Settings, load_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CommandRequest(BaseModel):
    command: str = Field(min_length=1, description="Command name (e.g., 'summary')")
    parameter: str | int | float | None = Field(
        default=None, description="Raw parameter string appended after '|'"
    )


class SaveRequest(BaseModel):
    filename: str | None = Field(default=None, description="Target config file")


class AddPoolRequest(_AliasedModel):
    url: str = Field(min_length=1, description="Pool URL (e.g., 'stratum+tcp://pool:3333')")
    user: str = Field(min_length=1, description="Worker name")
    password: str = Field(alias="pass", min_length=1, description="Worker password")


class PoolIdRequest(_AliasedModel):
    pool_id: int = Field(alias="poolId", ge=0)


class PoolPriorityRequest(BaseModel):
    priorities: list[int] = Field(description="Pool ids, highest priority first")


class DeviceIdRequest(_AliasedModel):
    device_id: int = Field(alias="deviceId", ge=0)


class DeviceOptionRequest(_AliasedModel):
    device_id: int = Field(alias="deviceId", ge=0)
    option: str = Field(min_length=1, description="ascset option (e.g., 'freq')")
    value: str | int | float | None = Field(default=None)


class DeviceFrequencyRequest(_AliasedModel):
    device_id: int = Field(alias="deviceId", ge=0)
    frequency: int = Field(gt=0, description="Frequency in MHz")


class SetConfigRequest(BaseModel):
    name: str = Field(min_length=1, description="setconfig name (e.g., 'queue')")
    value: int | float | str


class HealthResponse(BaseModel):
    status: str = "ok"
    miner_host: str = ""
    miner_port: int = 0


class CommandResponse(BaseModel):
    success: bool = True
    response: Any = None


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    client: CGMinerClient | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the dashboard proxy application.

    Args:
        client: Optional pre-configured CGMinerClient (for testing).
        settings: Settings used to build the client and CORS policy.
            Loaded with load_settings() when omitted.
    """
    if settings is None:
        settings = load_settings()
    if client is None:
        client = CGMinerClient.from_config(settings.miner)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        c: CGMinerClient = app.state.client
        logger.info("Dashboard proxy started, cgminer at %s:%d", c.host, c.port)
        yield
        logger.info("Dashboard proxy stopped")

    app = FastAPI(
        title="minerdash",
        description="HTTP/JSON proxy for the cgminer API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.client = client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MinerError)
    @app.exception_handler(OSError)
    async def miner_failure(request: Request, exc: Exception) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})

    async def send(command: str) -> Any:
        c: CGMinerClient = app.state.client
        return await c.send_command(command)

    async def control(command: str) -> CommandResponse:
        return CommandResponse(success=True, response=await send(command))

    # -------------------------------------------------------------------
    # Read endpoints
    # -------------------------------------------------------------------

    @app.get("/api/health")
    async def health_check() -> HealthResponse:
        c: CGMinerClient = app.state.client
        return HealthResponse(status="ok", miner_host=c.host, miner_port=c.port)

    @app.get("/api/stats", response_model=None)
    async def get_stats() -> dict[str, Any] | JSONResponse:
        summary = mapping.map_summary(await send(commands.SUMMARY))
        if summary is None:
            logger.error("summary reply has no SUMMARY entry")
            return JSONResponse(status_code=500, content={"error": "Invalid response from CGMiner"})
        return summary

    @app.get("/api/stats/raw")
    async def get_stats_raw() -> list[Any]:
        return mapping.section(await send(commands.STATS), "STATS")

    @app.get("/api/devices")
    async def get_devices() -> list[Any]:
        return mapping.section(await send(commands.DEVS), "DEVS")

    @app.get("/api/devdetails")
    async def get_devdetails() -> list[dict[str, Any]]:
        return mapping.map_devdetails(await send(commands.DEVDETAILS))

    @app.get("/api/pools")
    async def get_pools() -> list[dict[str, Any]]:
        return mapping.map_pools(await send(commands.POOLS))

    @app.get("/api/config")
    async def get_config() -> dict[str, Any]:
        return mapping.map_config(await send(commands.CONFIG))

    @app.get("/api/coin")
    async def get_coin() -> dict[str, Any]:
        return mapping.map_coin(await send(commands.COIN))

    @app.get("/api/usbstats")
    async def get_usbstats() -> list[dict[str, Any]]:
        return mapping.map_usbstats(await send(commands.USBSTATS))

    @app.get("/api/version")
    async def get_version() -> dict[str, list[dict[str, Any]]]:
        return {"version": mapping.map_version(await send(commands.VERSION))}

    @app.get("/api/notify")
    async def get_notify() -> dict[str, list[dict[str, Any]]]:
        return {"notify": mapping.map_notify(await send(commands.NOTIFY))}

    @app.get("/api/lcd")
    async def get_lcd() -> dict[str, list[dict[str, Any]]]:
        return {"lcd": mapping.map_lcd(await send(commands.LCD))}

    # -------------------------------------------------------------------
    # Generic and process control endpoints
    # -------------------------------------------------------------------

    @app.post("/api/command")
    async def run_command(request: CommandRequest) -> CommandResponse:
        return await control(commands.with_parameter(request.command, request.parameter))

    @app.post("/api/control/restart")
    async def restart() -> CommandResponse:
        return await control(commands.RESTART)

    @app.post("/api/control/quit")
    async def quit_miner() -> CommandResponse:
        return await control(commands.QUIT)

    @app.post("/api/control/save")
    async def save_config(request: SaveRequest | None = None) -> CommandResponse:
        filename = request.filename if request else None
        return await control(commands.save(filename))

    # -------------------------------------------------------------------
    # Pool endpoints
    # -------------------------------------------------------------------

    @app.post("/api/pools/add")
    async def add_pool(request: AddPoolRequest) -> CommandResponse:
        return await control(commands.addpool(request.url, request.user, request.password))

    @app.post("/api/pools/remove")
    async def remove_pool(request: PoolIdRequest) -> CommandResponse:
        return await control(commands.removepool(request.pool_id))

    @app.post("/api/pools/enable")
    async def enable_pool(request: PoolIdRequest) -> CommandResponse:
        return await control(commands.enablepool(request.pool_id))

    @app.post("/api/pools/disable")
    async def disable_pool(request: PoolIdRequest) -> CommandResponse:
        return await control(commands.disablepool(request.pool_id))

    @app.post("/api/pools/switch")
    async def switch_pool(request: PoolIdRequest) -> CommandResponse:
        return await control(commands.switchpool(request.pool_id))

    @app.post("/api/pools/priority")
    async def set_pool_priority(request: PoolPriorityRequest) -> CommandResponse:
        return await control(commands.poolpriority(request.priorities))

    # -------------------------------------------------------------------
    # Device and config endpoints
    # -------------------------------------------------------------------

    @app.post("/api/devices/enable")
    async def enable_device(request: DeviceIdRequest) -> CommandResponse:
        return await control(commands.ascenable(request.device_id))

    @app.post("/api/devices/disable")
    async def disable_device(request: DeviceIdRequest) -> CommandResponse:
        return await control(commands.ascdisable(request.device_id))

    @app.post("/api/devices/set")
    async def set_device_option(request: DeviceOptionRequest) -> CommandResponse:
        return await control(commands.ascset(request.device_id, request.option, request.value))

    @app.post("/api/devices/frequency")
    async def set_device_frequency(request: DeviceFrequencyRequest) -> CommandResponse:
        return await control(commands.ascset_frequency(request.device_id, request.frequency))

    @app.post("/api/config/set")
    async def set_config(request: SetConfigRequest) -> CommandResponse:
        return await control(commands.setconfig(request.name, request.value))

    return app


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(settings: Settings | None = None) -> None:
    """Run the proxy with uvicorn."""
    settings = settings or load_settings()
    logger.info(
        "Starting proxy on %s:%d, cgminer at %s:%d",
        settings.server.host, settings.server.port,
        settings.miner.host, settings.miner.port,
    )
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
