"""Parsing of the ``clicks`` and ``time`` expiration parameters.

Bad input never fails a creation request: it is logged and the limit is
left unset, so the resource simply never expires on that axis.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

# expire_clicks is stored in a 32-bit INTEGER column
MAX_EXPIRE_CLICKS = 2**31 - 1


@dataclass(frozen=True)
class ExpirationPolicy:
    expire_time: datetime | None = None
    expire_clicks: int | None = None


def parse_duration(value: str) -> timedelta:
    """Parse durations such as ``90s``, ``1h30m`` or ``1.5h``.

    Raises ValueError when the string is not entirely made of
    number+unit components.
    """
    text = value.strip()
    sign = 1
    if text and text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    seconds = 0.0
    pos = 0
    for match in _COMPONENT.finditer(text):
        if match.start() != pos:
            raise ValueError(f"invalid duration {value!r}")
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return timedelta(seconds=sign * seconds)


def parse_expire_clicks(raw: str | None) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        clicks = int(raw)
    except ValueError:
        logger.warning("Ignoring malformed clicks limit %r", raw)
        return None
    if clicks < 0:
        logger.warning("Ignoring negative clicks limit %r", raw)
        return None
    if clicks > MAX_EXPIRE_CLICKS:
        logger.warning("Ignoring out-of-range clicks limit %r", raw)
        return None
    return clicks or None


def parse_expire_time(raw: str | None, now: datetime | None = None) -> datetime | None:
    if raw is None or raw == "":
        return None
    try:
        duration = parse_duration(raw)
    except (ValueError, OverflowError):
        logger.warning("Ignoring malformed time limit %r", raw)
        return None
    if duration <= timedelta(0):
        logger.warning("Ignoring non-positive time limit %r", raw)
        return None
    if now is None:
        now = datetime.now(timezone.utc)
    try:
        return now + duration
    except OverflowError:
        logger.warning("Ignoring out-of-range time limit %r", raw)
        return None


def build_policy(clicks: str | None, time: str | None) -> ExpirationPolicy:
    return ExpirationPolicy(
        expire_time=parse_expire_time(time),
        expire_clicks=parse_expire_clicks(clicks),
    )
