from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..errors import ValidationError

# Basic bounds (kept generous; the engine only needs them validated).
MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


@dataclass(frozen=True)
class Event:
    """An emitted event, tagged with the emitting contract and host tx index."""

    address: bytes
    name: bytes
    args: Dict[str, ArgValue]
    tx_index: int


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Canonical event representation for receipts / JSON output:

        address: "0x" + hex address
        name: event name decoded as ASCII
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="z" => boolean
    """

    address: str
    name: str
    args: Sequence[Mapping[str, Any]]


# --- Validation helpers -------------------------------------------------------


def check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise ValidationError("event name must be bytes", context={"where": "name_type"})
    b = bytes(name)
    if len(b) == 0:
        raise ValidationError("event name must be non-empty", context={"where": "name_empty"})
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise ValidationError(
            "event name too long",
            context={"where": "name_length", "len": len(b)},
        )
    return b


def check_key(key: Any) -> str:
    if isinstance(key, (bytes, bytearray)):
        key = bytes(key).decode("ascii", errors="replace")
    if not isinstance(key, str) or not key:
        raise ValidationError("event key must be a non-empty str", context={"where": "key_type"})
    if len(key) > MAX_KEY_LEN:
        raise ValidationError(
            "event key too long",
            context={"where": "key_length", "len": len(key)},
        )
    if not _KEY_RE.match(key):
        raise ValidationError(
            "event key has invalid characters",
            context={"where": "key_grammar", "key": key},
        )
    return key


def check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise ValidationError(
                "event bytes arg too long",
                context={"where": "value_bytes_length", "len": len(b)},
            )
        return b

    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value

    if isinstance(value, int):
        if value < 0 or value.bit_length() > MAX_INT_BITS:
            raise ValidationError(
                "event int arg out of range",
                context={"where": "value_int_bits", "bits": value.bit_length()},
            )
        return int(value)

    raise ValidationError(
        "unsupported event arg type",
        context={"where": "value_type", "py_type": type(value).__name__},
    )


def make_event(address: bytes, name: Any, args: Mapping[Any, Any], tx_index: int) -> Event:
    bname = check_name(name)
    if not isinstance(args, Mapping):
        raise ValidationError("event args must be a mapping", context={"where": "args_type"})
    checked: Dict[str, ArgValue] = {}
    for raw_k, raw_v in args.items():
        checked[check_key(raw_k)] = check_value(raw_v)
    return Event(address=bytes(address), name=bname, args=checked, tx_index=tx_index)


# --- Receipt encoding -------------------------------------------------------------


def canonicalize(events: Iterable[Event]) -> List[CanonicalEvent]:
    out: List[CanonicalEvent] = []
    for ev in events:
        enc_args: List[Dict[str, Any]] = []
        for k, v in ev.args.items():
            if isinstance(v, (bytes, bytearray)):
                enc_args.append({"k": k, "t": "b", "v": "0x" + bytes(v).hex()})
            elif isinstance(v, bool):
                enc_args.append({"k": k, "t": "z", "v": v})
            else:
                enc_args.append({"k": k, "t": "i", "v": int(v)})
        out.append(
            CanonicalEvent(
                address="0x" + ev.address.hex(),
                name=ev.name.decode("ascii", errors="replace"),
                args=tuple(enc_args),
            )
        )
    return out


__all__ = [
    "Event",
    "CanonicalEvent",
    "make_event",
    "canonicalize",
    "check_name",
    "check_key",
    "check_value",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
