"""Request/response client for the cgminer JSON API.

Each command opens its own connection, writes one frame, reads until
the NUL terminator shows up, closes the connection and decodes the
reply. Concurrent commands therefore never share a socket or a buffer.

The connect phase and the reply phase are bounded separately. The reply
timer is only armed once the connection is up and is disarmed as soon
as the terminator arrives or the exchange fails.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from typing import Any, Generator

from minerdash.cgminer.connection import DEFAULT_CONNECT_TIMEOUT, MinerConnection, connect
from minerdash.cgminer.errors import CommandCancelled, CommandTimeout, IncompleteResponseError
from minerdash.cgminer.protocol import DEFAULT_PORT, encode_command, is_complete, parse_response
from minerdash.config.settings import MinerConfig

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 10.0


class CGMinerClient:
    """Sends commands to one miner daemon.

    The client holds only its target and timeouts, so a single instance
    can be shared freely between concurrent callers.

    Usage::

        client = CGMinerClient(host="192.168.0.200")
        summary = await client.send_command("summary")
        await client.send_command("ascset|0,freq,550")
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout

    @classmethod
    def from_config(cls, config: MinerConfig) -> CGMinerClient:
        return cls(
            host=config.host,
            port=config.port,
            connect_timeout=config.connect_timeout,
            command_timeout=config.command_timeout,
        )

    async def connect(self) -> MinerConnection:
        """Open a raw connection to the daemon for a caller-managed exchange."""
        return await connect(self.host, self.port, timeout=self.connect_timeout)

    async def send_command(self, command: str) -> Any:
        """Run one command and return the decoded JSON reply.

        Raises:
            MinerConnectionError: The connection could not be opened.
            ConnectionTimeout: The connection was not up in time.
            CommandTimeout: No complete reply arrived in time.
            ResponseParseError: The reply was not valid JSON.
            IncompleteResponseError: The daemon hung up before the terminator.
            OSError: Any other transport failure during the exchange.
        """
        frame = encode_command(command)
        conn = await self.connect()
        async with conn:
            try:
                text = await asyncio.wait_for(
                    _exchange(conn, command, frame), timeout=self.command_timeout
                )
            except asyncio.TimeoutError as e:
                if getattr(e, "errno", None) is not None:
                    # ETIMEDOUT from the socket, not the reply timer
                    raise
                raise CommandTimeout(
                    f"Command timeout after {self.command_timeout}s: {command}",
                    host=self.host,
                    port=self.port,
                    command=command,
                ) from e

        logger.debug(
            "Received %d chars from %s:%d for %r", len(text), self.host, self.port, command
        )
        return parse_response(text, host=self.host, port=self.port, command=command)

    def submit(self, command: str) -> PendingCommand:
        """Start ``command`` in the background and return a cancellable handle.

        Must be called from within a running event loop.
        """
        task = asyncio.create_task(self.send_command(command))
        return PendingCommand(command, task, host=self.host, port=self.port)


class PendingCommand:
    """Handle on a command running in the background.

    ``cancel()`` closes the command's socket; awaiting the handle then
    raises :class:`CommandCancelled`.
    """

    def __init__(self, command: str, task: asyncio.Task[Any], host: str = "", port: int = 0) -> None:
        self.command = command
        self._task = task
        self._host = host
        self._port = port
        self._cancelled = False

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """Abort the command. Returns False if it already finished."""
        if self._task.done():
            return False
        self._cancelled = True
        logger.debug("Cancelling command %r", self.command)
        return self._task.cancel()

    async def result(self) -> Any:
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._cancelled:
                raise CommandCancelled(
                    f"Command cancelled: {self.command}",
                    host=self._host,
                    port=self._port,
                    command=self.command,
                ) from None
            raise

    def __await__(self) -> Generator[Any, None, Any]:
        return self.result().__await__()


async def send_command(
    host: str,
    port: int,
    command: str,
    *,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> Any:
    """Run a single command against ``host:port``.

    Shorthand for ``CGMinerClient(host, port, ...).send_command(command)``.
    """
    client = CGMinerClient(
        host, port, connect_timeout=connect_timeout, command_timeout=command_timeout
    )
    return await client.send_command(command)


async def _exchange(conn: MinerConnection, command: str, frame: bytes) -> str:
    """Write the frame and accumulate reply text until a terminator appears."""
    await conn.write(frame)
    logger.debug("Sent command %r to %s:%d", command, conn.host, conn.port)

    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    response = ""
    while True:
        chunk = await conn.read()
        if not chunk:
            response += decoder.decode(b"", final=True)
            raise IncompleteResponseError(
                f"Connection closed before response was complete: {command}",
                partial=response,
                host=conn.host,
                port=conn.port,
                command=command,
            )
        response += decoder.decode(chunk)
        if is_complete(response):
            return response
