# session/codec.py
"""Line protocol spoken with the low-level installer.

Worker -> wizard, one message per line::

    message: <text>
    error: <text>
    prompt: <text>
    finished: <ok|anything else>, <text>
    progress: <fraction 0..1> <text>

Wizard -> worker: the configuration as a single JSON line, then one line per
prompt answer (``ok`` for yes, an empty line for no).
"""
from __future__ import annotations
import json
import math
import re
from dataclasses import dataclass
from typing import Union
from state import InstallerOptions
from validators import split_fqdn

ACK_REPLY = "ok"
DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Info:
    text: str


@dataclass(frozen=True)
class Error:
    text: str


@dataclass(frozen=True)
class Prompt:
    text: str


@dataclass(frozen=True)
class Finished:
    success: bool
    text: str


@dataclass(frozen=True)
class Progress:
    percent: int
    text: str


@dataclass(frozen=True)
class ParseError:
    reason: str
    line: str

    def __str__(self) -> str:
        return f"{self.reason}: {self.line!r}"


Event = Union[Info, Error, Prompt, Finished, Progress]


def _parse_percent(fraction: str) -> int:
    # float() alone would also take "1_0", "inf" and "nan"
    if not DECIMAL_RE.match(fraction):
        raise ValueError(f"{fraction!r} is not a decimal number")
    value = float(fraction)
    if not math.isfinite(value):
        raise ValueError(f"progress value {fraction!r} is not finite")
    value = min(max(value, 0.0), 1.0)
    # floor: 0.999 must not show as 100% before the worker says it is done
    return math.floor(value * 100)


def parse_line(line: str) -> Union[Event, ParseError]:
    """Turn one worker line into an event; malformed lines yield ParseError."""
    line = line.rstrip("\r\n")
    kind, sep, rest = line.partition(": ")
    if not sep:
        return ParseError("invalid message: no type", line)

    if kind == "message":
        return Info(rest)
    if kind == "error":
        return Error(rest)
    if kind == "prompt":
        return Prompt(rest)
    if kind == "finished":
        state, sep, text = rest.partition(", ")
        if not sep:
            return ParseError("invalid message: no state", line)
        return Finished(state == "ok", text)
    if kind == "progress":
        fraction, sep, text = rest.partition(" ")
        if not sep:
            return ParseError("invalid progress message", line)
        try:
            percent = _parse_percent(fraction)
        except ValueError as e:
            return ParseError(f"invalid progress value: {e}", line)
        return Progress(percent, text)

    return ParseError(f"invalid message type {kind}", line)


def parse_raw_line(raw: bytes) -> Union[Event, ParseError]:
    """Like parse_line, for undecoded worker output; bad UTF-8 is a ParseError."""
    try:
        line = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        text = raw.decode("utf-8", "replace").rstrip("\r\n")
        return ParseError(f"invalid message encoding: {e.reason}", text)
    return parse_line(line)


def install_config(options: InstallerOptions) -> dict:
    """The flat key set the low-level installer reads."""
    hostname, domain = split_fqdn(options.network.fqdn)
    return {
        "autoreboot": 1 if options.autoreboot else 0,
        "filesys": options.bootdisk.filesystem,
        "hdsize": options.bootdisk.hdsize,
        "target_hd": options.bootdisk.target_disk,
        "country": options.timezone.country,
        "timezone": options.timezone.timezone,
        "keymap": options.timezone.kb_layout,
        "password": options.password.root_password,
        "mailto": options.password.email,
        "mngmt_nic": options.network.ifname,
        "hostname": hostname,
        "domain": domain,
        "cidr": str(options.network.address),
        "gateway": str(options.network.gateway),
        "dns": str(options.network.dns_server),
    }


def format_configuration(options: InstallerOptions) -> str:
    """Serialize the options as one JSON line, without the trailing newline."""
    return json.dumps(install_config(options), separators=(",", ":"))
