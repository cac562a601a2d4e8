"""TCP connector for the cgminer API port.

Opens one connection per call with a bounded connect time. The handle
is owned by whoever asked for it and is never pooled or reused.
"""

from __future__ import annotations

import asyncio
import logging

from minerdash.cgminer.errors import ConnectionTimeout, MinerConnectionError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_SIZE = 4096


class MinerConnection:
    """A connected byte stream to the miner daemon.

    Usage::

        async with await connect("192.168.0.200", 4028) as conn:
            await conn.write(b'{"command":"version"}\\n')
            chunk = await conn.read()
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        host: str,
        port: int,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self.host = host
        self.port = port
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    async def write(self, data: bytes) -> None:
        """Write ``data`` in one operation and wait until it is flushed."""
        self._writer.write(data)
        await self._writer.drain()

    async def read(self, n: int = DEFAULT_READ_SIZE) -> bytes:
        """Read up to ``n`` bytes. Returns ``b""`` at end of stream."""
        return await self._reader.read(n)

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        await self._wait_closed()

    async def abort(self) -> None:
        """Drop the socket at once, discarding unsent data."""
        if self._closed:
            return
        self._closed = True
        self._writer.transport.abort()
        await self._wait_closed()

    async def _wait_closed(self) -> None:
        try:
            await self._writer.wait_closed()
        except OSError:
            pass
        logger.debug("Closed connection to %s:%d", self.host, self.port)

    async def __aenter__(self) -> MinerConnection:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        # a timed out or cancelled exchange must not wait on a stalled peer
        if isinstance(exc_val, (TimeoutError, asyncio.TimeoutError, asyncio.CancelledError)):
            await self.abort()
        else:
            await self.close()


async def connect(
    host: str,
    port: int,
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> MinerConnection:
    """Open a TCP connection to the daemon at ``host:port``.

    A single attempt is made. If it does not complete within ``timeout``
    seconds the attempt is cancelled, which closes the half-open socket.

    Raises:
        ValueError: If host or port is out of range.
        ConnectionTimeout: If the connection is not up within ``timeout``.
        MinerConnectionError: If the transport reports an error.
    """
    if not host:
        raise ValueError("host must be a non-empty string")
    if not 1 <= port <= 65535:
        raise ValueError(f"port must be in 1..65535, got {port}")

    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        if getattr(e, "errno", None) is not None:
            raise _connect_failed(host, port, e) from e
        raise ConnectionTimeout(
            f"Connection timeout after {timeout}s to {host}:{port}",
            host=host,
            port=port,
        ) from e
    except OSError as e:
        raise _connect_failed(host, port, e) from e

    logger.debug("Connected to %s:%d", host, port)
    return MinerConnection(reader, writer, host, port)


def _connect_failed(host: str, port: int, error: OSError) -> MinerConnectionError:
    return MinerConnectionError(
        f"Cannot connect to {host}:{port}: {error}",
        host=host,
        port=port,
        cause=error,
    )
