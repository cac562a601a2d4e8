"""Shared test fixtures for the minerdash test suite.

Provides a fake cgminer daemon served on a local port, canned daemon
replies and a mock CGMinerClient for the HTTP layer.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable
from unittest.mock import AsyncMock

import pytest

from minerdash.cgminer.client import CGMinerClient

Responder = Callable[[bytes, asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


# ---------------------------------------------------------------------------
# Fake daemon
# ---------------------------------------------------------------------------


class FakeMiner:
    """A local TCP server that behaves like the cgminer API port.

    Each accepted connection reads one request line, hands it to the
    responder, then closes. Accepted connections and received request
    lines are recorded for assertions.

    Usage::

        async with FakeMiner(reply(b'{"STATUS":[]}\\x00')) as miner:
            await send_command("127.0.0.1", miner.port, "summary")
    """

    def __init__(self, responder: Responder) -> None:
        self._responder = responder
        self._server: asyncio.base_events.Server | None = None
        self.port = 0
        self.accepts = 0
        self.received: list[bytes] = []
        self.peer_closed = asyncio.Event()

    async def __aenter__(self) -> FakeMiner:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(self, *exc: object) -> None:
        assert self._server is not None
        self._server.close()
        await self._server.wait_closed()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.accepts += 1
        try:
            line = await reader.readline()
            self.received.append(line)
            await self._responder(line, reader, writer)
        except (ConnectionError, asyncio.CancelledError):
            pass
        finally:
            writer.close()


def reply(*chunks: bytes, delay: float = 0.0) -> Responder:
    """Responder that writes each chunk in turn, pausing ``delay`` between them."""

    async def respond(line: bytes, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        for i, chunk in enumerate(chunks):
            if i and delay:
                await asyncio.sleep(delay)
            writer.write(chunk)
            await writer.drain()

    return respond


def echo(delay: float = 0.0) -> Responder:
    """Responder that answers ``{"echo": <command>}`` after ``delay`` seconds."""

    async def respond(line: bytes, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        command = json.loads(line)["command"]
        await asyncio.sleep(delay)
        writer.write(json.dumps({"echo": command}).encode() + b"\x00")
        await writer.drain()

    return respond


def silent(miner_ref: list[FakeMiner]) -> Responder:
    """Responder that never answers and flags when the client hangs up."""

    async def respond(line: bytes, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.read()
        finally:
            miner_ref[0].peer_closed.set()

    return respond


class FakeMinerFactory:
    FakeMiner = FakeMiner
    reply = staticmethod(reply)
    echo = staticmethod(echo)

    @staticmethod
    def silent() -> FakeMiner:
        """A FakeMiner that accepts, reads the request and never answers."""
        ref: list[FakeMiner] = []
        miner = FakeMiner(silent(ref))
        ref.append(miner)
        return miner


@pytest.fixture
def fake_miner() -> type[FakeMinerFactory]:
    """Access to FakeMiner and its canned responders."""
    return FakeMinerFactory


# ---------------------------------------------------------------------------
# Canned daemon replies
# ---------------------------------------------------------------------------


def _status(code: str = "S", msg: str = "OK") -> list[dict[str, Any]]:
    return [{"STATUS": code, "When": 1700000000, "Code": 11, "Msg": msg, "Description": "cgminer 4.11.1"}]


@pytest.fixture
def summary_reply() -> dict[str, Any]:
    return {
        "STATUS": _status(msg="Summary"),
        "SUMMARY": [
            {
                "Elapsed": 3600,
                "MHS av": 13500000.5,
                "MHS 5s": 13612000.1,
                "MHS 1m": 13550000.0,
                "MHS 5m": 13520000.0,
                "MHS 15m": 13510000.0,
                "Found Blocks": 0,
                "Getworks": 120,
                "Accepted": 842,
                "Rejected": 3,
                "Hardware Errors": 12,
                "Utility": 14.03,
                "Stale": 1,
                "Best Share": 1048576,
            }
        ],
        "id": 1,
    }


@pytest.fixture
def pools_reply() -> dict[str, Any]:
    return {
        "STATUS": _status(msg="2 Pool(s)"),
        "POOLS": [
            {
                "POOL": 0,
                "URL": "stratum+tcp://pool.example.com:3333",
                "Status": "Alive",
                "Priority": 0,
                "User": "worker.1",
                "Accepted": 800,
                "Rejected": 2,
                "Stale": 1,
                "Last Share Time": 1700000100,
            },
            {"POOL": 1, "URL": "stratum+tcp://backup.example.com:3333", "Priority": 1},
        ],
        "id": 1,
    }


@pytest.fixture
def devs_reply() -> dict[str, Any]:
    return {
        "STATUS": _status(msg="1 ASC(s)"),
        "DEVS": [
            {
                "ASC": 0,
                "Name": "BTM",
                "ID": 0,
                "Enabled": "Y",
                "Status": "Alive",
                "Temperature": 61.5,
                "MHS av": 13500000.5,
            }
        ],
        "id": 1,
    }


@pytest.fixture
def ok_reply() -> dict[str, Any]:
    return {"STATUS": _status(msg="Pool 1 enabled"), "id": 1}


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_miner_client() -> AsyncMock:
    """A mock CGMinerClient with send_command stubbed."""
    client = AsyncMock(spec=CGMinerClient)
    client.host = "192.168.0.200"
    client.port = 4028
    return client
