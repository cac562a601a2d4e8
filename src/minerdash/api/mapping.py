"""Reshaping of cgminer replies into the dashboard's JSON shapes.

cgminer reports fields with spaced, capitalized names ("MHS av",
"Last Share Time"). The dashboard API renames a fixed set of them to
camelCase and fills in a default when a field is missing or falsy.
"""

from __future__ import annotations

import re
from typing import Any

# dashboard key -> (cgminer key, default)
SUMMARY_FIELDS: dict[str, tuple[str, Any]] = {
    "elapsed": ("Elapsed", 0),
    "mhsAv": ("MHS av", 0),
    "mhs5s": ("MHS 5s", 0),
    "mhs1m": ("MHS 1m", 0),
    "mhs5m": ("MHS 5m", 0),
    "mhs15m": ("MHS 15m", 0),
    "foundBlocks": ("Found Blocks", 0),
    "getworks": ("Getworks", 0),
    "accepted": ("Accepted", 0),
    "rejected": ("Rejected", 0),
    "hardwareErrors": ("Hardware Errors", 0),
    "utility": ("Utility", 0),
    "discarded": ("Discarded", 0),
    "stale": ("Stale", 0),
    "getFailures": ("Get Failures", 0),
    "localWork": ("Local Work", 0),
    "remoteFailures": ("Remote Failures", 0),
    "networkBlocks": ("Network Blocks", 0),
    "totalMh": ("Total MH", 0),
    "workUtility": ("Work Utility", 0),
    "difficultyAccepted": ("Difficulty Accepted", 0),
    "difficultyRejected": ("Difficulty Rejected", 0),
    "difficultyStale": ("Difficulty Stale", 0),
    "bestShare": ("Best Share", 0),
}

POOL_FIELDS: dict[str, tuple[str, Any]] = {
    "url": ("URL", ""),
    "status": ("Status", "Unknown"),
    "priority": ("Priority", 0),
    "user": ("User", ""),
    "accepted": ("Accepted", 0),
    "rejected": ("Rejected", 0),
    "frequency": ("Frequency", 0),
    "stale": ("Stale", 0),
    "lastShareTime": ("Last Share Time", 0),
}

CONFIG_FIELDS: dict[str, tuple[str, Any]] = {
    "ascCount": ("ASC Count", 0),
    "pgaCount": ("PGA Count", 0),
    "poolCount": ("Pool Count", 0),
    "strategy": ("Strategy", ""),
    "logInterval": ("Log Interval", 0),
    "deviceCode": ("Device Code", ""),
    "os": ("OS", ""),
    "hotplug": ("Hotplug", 0),
}

COIN_FIELDS: dict[str, tuple[str, Any]] = {
    "hashMethod": ("Hash Method", ""),
    "currentBlockTime": ("Current Block Time", 0),
    "currentBlockHash": ("Current Block Hash", ""),
    "lp": ("LP", False),
    "networkDifficulty": ("Network Difficulty", 0),
}

USBSTAT_FIELDS: dict[str, tuple[str, Any]] = {
    "name": ("Name", ""),
    "id": ("ID", 0),
    "stat": ("Stat", ""),
    "seq": ("Seq", 0),
    "modes": ("Modes", ""),
    "count": ("Count", 0),
    "totalDelay": ("Total Delay", 0),
    "minDelay": ("Min Delay", 0),
    "maxDelay": ("Max Delay", 0),
    "timeoutCount": ("Timeout Count", 0),
    "timeoutTotalDelay": ("Timeout Total Delay", 0),
    "timeoutMinDelay": ("Timeout Min Delay", 0),
    "timeoutMaxDelay": ("Timeout Max Delay", 0),
    "errorCount": ("Error Count", 0),
    "errorTotalDelay": ("Error Total Delay", 0),
    "errorMinDelay": ("Error Min Delay", 0),
    "errorMaxDelay": ("Error Max Delay", 0),
    "firstCommand": ("First Command", 0),
    "lastCommand": ("Last Command", 0),
    "firstTimeout": ("First Timeout", 0),
    "lastTimeout": ("Last Timeout", 0),
    "firstError": ("First Error", 0),
    "lastError": ("Last Error", 0),
}

DEVDETAIL_FIELDS: dict[str, tuple[str, Any]] = {
    "devDetails": ("DEVDETAILS", 0),
    "name": ("Name", ""),
    "id": ("ID", 0),
    "driver": ("Driver", ""),
    "kernel": ("Kernel", ""),
    "model": ("Model", ""),
    "devicePath": ("Device Path", ""),
}

_SPACE_BEFORE_WORD = re.compile(r"\s+([a-zA-Z0-9])")


def pick_fields(source: dict[str, Any] | None, fields: dict[str, tuple[str, Any]]) -> dict[str, Any]:
    """Build a dict of renamed fields, using the default for falsy values."""
    source = source or {}
    return {key: source.get(cg_key) or default for key, (cg_key, default) in fields.items()}


def section(data: Any, name: str) -> list[Any]:
    """Return the list stored under ``name`` in a reply, or an empty list."""
    if not isinstance(data, dict):
        return []
    value = data.get(name)
    return value if isinstance(value, list) else []


def first_entry(data: Any, name: str) -> dict[str, Any] | None:
    """Return the first entry of a reply section, if any."""
    entries = section(data, name)
    if entries and isinstance(entries[0], dict):
        return entries[0]
    return None


def camel_case_key(key: str, strip_marker: bool = False) -> str:
    """Convert a cgminer key such as ``"Last Well"`` to ``"lastWell"``.

    With ``strip_marker`` a leading ``*`` (cgminer's flag for counters
    in the notify reply) is removed first.
    """
    if strip_marker and key.startswith("*"):
        key = key[1:]
    key = _SPACE_BEFORE_WORD.sub(lambda m: m.group(1).upper(), key)
    return key[:1].lower() + key[1:]


def camel_case_keys(entry: dict[str, Any], strip_marker: bool = False) -> dict[str, Any]:
    return {camel_case_key(k, strip_marker): v for k, v in entry.items()}


def map_summary(data: Any) -> dict[str, Any] | None:
    """Map ``SUMMARY[0]``; None when the reply has no summary entry."""
    entry = first_entry(data, "SUMMARY")
    if entry is None:
        return None
    return pick_fields(entry, SUMMARY_FIELDS)


def map_pools(data: Any) -> list[dict[str, Any]]:
    return [pick_fields(pool, POOL_FIELDS) for pool in section(data, "POOLS")]


def map_config(data: Any) -> dict[str, Any]:
    return pick_fields(first_entry(data, "CONFIG"), CONFIG_FIELDS)


def map_coin(data: Any) -> dict[str, Any]:
    return pick_fields(first_entry(data, "COIN"), COIN_FIELDS)


def map_usbstats(data: Any) -> list[dict[str, Any]]:
    return [pick_fields(usb, USBSTAT_FIELDS) for usb in section(data, "USBSTATS")]


def map_devdetails(data: Any) -> list[dict[str, Any]]:
    return [pick_fields(dev, DEVDETAIL_FIELDS) for dev in section(data, "DEVDETAILS")]


def map_version(data: Any) -> list[dict[str, Any]]:
    return [{"cgminer": v.get("CGMiner"), "api": v.get("API")} for v in section(data, "VERSION")]


def map_notify(data: Any) -> list[dict[str, Any]]:
    return [camel_case_keys(n, strip_marker=True) for n in section(data, "NOTIFY")]


def map_lcd(data: Any) -> list[dict[str, Any]]:
    return [camel_case_keys(lcd) for lcd in section(data, "LCD")]
