"""Framing for the cgminer JSON API.

A request is a single JSON object followed by a newline::

    {"command":"summary"}\\n

The daemon answers with JSON text terminated by one or more NUL bytes.
The reply may arrive in any number of chunks; it is complete as soon as
a NUL appears anywhere in the accumulated text.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from minerdash.cgminer.errors import ResponseParseError

DEFAULT_PORT = 4028

TERMINATOR = "\0"
FRAME_END = b"\n"

_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


class CommandFrame(BaseModel):
    """A request frame naming one daemon command.

    The command string is sent verbatim, including any pipe-delimited
    parameter suffix (``"ascset|0,freq,550"``).
    """

    model_config = ConfigDict(frozen=True)

    command: str = Field(description="Command name with optional |parameters")

    def encode(self) -> bytes:
        """Serialize to the exact bytes written to the socket."""
        payload = json.dumps(
            {"command": self.command}, separators=(",", ":"), ensure_ascii=False
        )
        # unpaired surrogates cannot be UTF-8 encoded; send them as \u escapes
        payload = _LONE_SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", payload)
        return payload.encode("utf-8") + FRAME_END


def encode_command(command: str) -> bytes:
    """Build the wire frame for ``command``."""
    return CommandFrame(command=command).encode()


def is_complete(text: str) -> bool:
    """Return True once the accumulated reply contains a terminator.

    Any NUL counts, not only a trailing one, so a reply with an embedded
    NUL ends early. Daemons in the field rely on this, so it is kept.
    """
    return TERMINATOR in text


def clean_response(text: str) -> str:
    """Remove every NUL character and trim surrounding whitespace."""
    return text.replace(TERMINATOR, "").strip()


def parse_response(
    text: str,
    host: str = "",
    port: int = 0,
    command: str | None = None,
) -> Any:
    """Clean a complete reply and decode it as JSON.

    Raises:
        ResponseParseError: If the cleaned text is not valid JSON.
    """
    cleaned = clean_response(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            f"Failed to parse CGMiner response: {cleaned}",
            raw=cleaned,
            host=host,
            port=port,
            command=command,
        ) from e
