"""Exceptions raised by the cgminer protocol client.

Every failure of a single command exchange is terminal and is surfaced
to the caller as one of these. Nothing in this package retries.
"""

from __future__ import annotations


class MinerError(Exception):
    """Base class for failures talking to the miner daemon."""

    def __init__(
        self,
        message: str,
        host: str = "",
        port: int = 0,
        command: str | None = None,
    ) -> None:
        super().__init__(message)
        self.host = host
        self.port = port
        self.command = command


class MinerConnectionError(MinerError, ConnectionError):
    """Raised when the TCP connection to the daemon cannot be established."""

    def __init__(
        self,
        message: str,
        host: str = "",
        port: int = 0,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, host=host, port=port)
        self.cause = cause


class ConnectionTimeout(MinerError, TimeoutError):
    """Raised when no connection is established within the connect timeout."""


class CommandTimeout(MinerError, TimeoutError):
    """Raised when a connected daemon does not finish its reply in time."""


class ResponseParseError(MinerError, ValueError):
    """Raised when a complete reply is not valid JSON.

    ``raw`` holds the reply after NUL bytes and surrounding whitespace
    were removed.
    """

    def __init__(
        self,
        message: str,
        raw: str,
        host: str = "",
        port: int = 0,
        command: str | None = None,
    ) -> None:
        super().__init__(message, host=host, port=port, command=command)
        self.raw = raw


class IncompleteResponseError(MinerError):
    """Raised when the daemon closes the stream before the NUL terminator."""

    def __init__(
        self,
        message: str,
        partial: str,
        host: str = "",
        port: int = 0,
        command: str | None = None,
    ) -> None:
        super().__init__(message, host=host, port=port, command=command)
        self.partial = partial


class CommandCancelled(MinerError):
    """Raised when a pending command is cancelled by its caller."""
