"""Builders for cgminer command strings.

Parameters follow the command name after a ``|`` and are separated by
commas: ``addpool|stratum+tcp://pool:3333,worker,x``. Values are not
escaped; the daemon has no escaping rules for commas inside values.
"""

from __future__ import annotations

from typing import Iterable

# Commands that take no parameters
SUMMARY = "summary"
DEVS = "devs"
POOLS = "pools"
CONFIG = "config"
COIN = "coin"
USBSTATS = "usbstats"
DEVDETAILS = "devdetails"
STATS = "stats"
VERSION = "version"
NOTIFY = "notify"
LCD = "lcd"
RESTART = "restart"
QUIT = "quit"


def build_command(name: str, *params: object) -> str:
    """Join a command name and its parameters into one command string."""
    if not params:
        return name
    return f"{name}|{','.join(str(p) for p in params)}"


def with_parameter(command: str, parameter: object | None = None) -> str:
    """Append a raw, already-formatted parameter string if one is given."""
    return f"{command}|{parameter}" if parameter else command


def save(filename: str | None = None) -> str:
    return with_parameter("save", filename)


def addpool(url: str, user: str, password: str) -> str:
    return build_command("addpool", url, user, password)


def removepool(pool_id: int) -> str:
    return build_command("removepool", pool_id)


def enablepool(pool_id: int) -> str:
    return build_command("enablepool", pool_id)


def disablepool(pool_id: int) -> str:
    return build_command("disablepool", pool_id)


def switchpool(pool_id: int) -> str:
    return build_command("switchpool", pool_id)


def poolpriority(pool_ids: Iterable[int]) -> str:
    """Reorder pools; the first id becomes the highest priority."""
    return f"poolpriority|{','.join(str(p) for p in pool_ids)}"


def ascenable(device_id: int) -> str:
    return build_command("ascenable", device_id)


def ascdisable(device_id: int) -> str:
    return build_command("ascdisable", device_id)


def ascset(device_id: int, option: str, value: object | None = None) -> str:
    if value is None:
        return build_command("ascset", device_id, option)
    return build_command("ascset", device_id, option, value)


def ascset_frequency(device_id: int, frequency: object) -> str:
    return ascset(device_id, "freq", frequency)


def setconfig(name: str, value: object) -> str:
    return build_command("setconfig", name, value)
