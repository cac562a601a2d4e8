"""cgminer API client for minerdash.

Speaks the line-delimited JSON protocol of the miner daemon over a
fresh TCP connection per command.

Public API:
    CGMinerClient -- Client bound to one daemon
    PendingCommand -- Cancellable handle returned by CGMinerClient.submit
    send_command -- Run one command against host:port
    connect -- Open a raw connection to the daemon
"""

from minerdash.cgminer.client import CGMinerClient, PendingCommand, send_command
from minerdash.cgminer.connection import MinerConnection, connect
from minerdash.cgminer.errors import (
    CommandCancelled,
    CommandTimeout,
    ConnectionTimeout,
    IncompleteResponseError,
    MinerConnectionError,
    MinerError,
    ResponseParseError,
)

__all__ = [
    "CGMinerClient",
    "CommandCancelled",
    "CommandTimeout",
    "ConnectionTimeout",
    "IncompleteResponseError",
    "MinerConnection",
    "MinerConnectionError",
    "MinerError",
    "PendingCommand",
    "ResponseParseError",
    "connect",
    "send_command",
]
