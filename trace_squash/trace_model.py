# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Trace event data structures."""

import enum
import types
from typing import Any, Dict, Optional


class TraceSquashError(Exception):
    """Base class for errors raised while squashing a trace."""


class TraceDecodeError(TraceSquashError, TypeError):
    """The trace text is not valid JSON or does not match the event schema."""


class TraceEncodeError(TraceSquashError, ValueError):
    """The events cannot be written as standard JSON."""


# Chrome trace timestamps are signed 64-bit, process and thread ids unsigned.
_TS_MIN: int = -(2**63)
_TS_MAX: int = 2**63 - 1
_ID_MAX: int = 2**64 - 1


class Phase(enum.StrEnum):
    """The kind of a trace event, valued by its single-character wire code.

    The codes are the ones defined by the Chrome Trace Event Format and must
    not change, since trace viewers consume them directly.
    """

    DURATION_BEGIN = "B"
    DURATION_END = "E"
    COMPLETE = "X"
    INSTANT = "i"
    COUNTER = "C"
    ASYNC_START = "b"
    ASYNC_INSTANT = "n"
    ASYNC_END = "e"
    FLOW_START = "s"
    FLOW_STEP = "t"
    FLOW_END = "f"
    SAMPLE = "p"
    OBJECT_CREATED = "N"
    OBJECT_SNAPSHOT = "O"
    OBJECT_DESTROYED = "D"
    METADATA = "M"
    MEMORY_DUMP_GLOBAL = "V"
    MEMORY_DUMP_PROCESS = "v"
    MARK = "R"
    CLOCK_SYNC = "c"
    CONTEXT_BEGIN = "("
    CONTEXT_END = ")"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> "Phase":
        try:
            return cls(code)
        except ValueError as e:
            raise TraceDecodeError(
                f"Encountered unknown phase {code!r}, expected one of "
                f"{[phase.value for phase in cls]}"
            ) from e


def _validate_field_type(
    d: Dict[str, Any], field: str, ty: type | types.UnionType
) -> None:
    """
    Check that a given field exists in the dictionary and has the expected type
    """
    # bool is a subclass of int, but true/false are never valid numbers here.
    if not (
        field in d
        and isinstance(d[field], ty)
        and not isinstance(d[field], bool)
    ):
        raise TraceDecodeError(
            f"Expected {d} to have field '{field}' of type '{ty}'"
        )


def _validate_optional_field_type(
    d: Dict[str, Any], field: str, ty: type | types.UnionType
) -> None:
    if field in d:
        _validate_field_type(d, field, ty)


class Event:
    """A single trace event.

    Only `timestamp` is ever rewritten. All other fields are carried through
    to the output exactly as they were read.
    """

    def __init__(
        self,
        phase: Phase,
        timestamp: int,
        pid: int,
        tid: int,
        name: str = "",
        category: str = "",
        duration: Optional[int | float] = None,
        thread_timestamp: Optional[int | float] = None,
        id: str = "",
        args: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name: str = name
        self.category: str = category
        self.phase: Phase = phase
        # Microseconds.
        self.timestamp: int = timestamp
        self.duration: Optional[int | float] = duration
        self.thread_timestamp: Optional[int | float] = thread_timestamp
        # Correlation id for async and flow events.
        self.id: str = id
        self.pid: int = pid
        self.tid: int = tid
        self.args: Dict[str, Any] = {} if args is None else args

    def __repr__(self) -> str:
        return (
            f"Event(phase={self.phase.name}, name={self.name!r}, "
            f"ts={self.timestamp}, pid={self.pid}, tid={self.tid})"
        )

    @staticmethod
    # from_dict should not be called on an instance
    def from_dict(event_dict: Dict[str, Any]) -> "Event":
        """Builds an Event from one decoded JSON trace event object.

        Raises:
          TraceDecodeError: A required field is missing, a field has the
              wrong type, or the phase code is unknown.
        """
        if not isinstance(event_dict, dict):
            raise TraceDecodeError(
                f"Expected trace event to be an object: {event_dict!r}"
            )

        _validate_field_type(event_dict, "ph", str)
        _validate_field_type(event_dict, "ts", int)
        _validate_field_type(event_dict, "pid", int)
        _validate_field_type(event_dict, "tid", int)
        if not _TS_MIN <= event_dict["ts"] <= _TS_MAX:
            raise TraceDecodeError(
                f"Expected 'ts' of {event_dict} to fit in 64 bits"
            )
        for id_field in ("pid", "tid"):
            if not 0 <= event_dict[id_field] <= _ID_MAX:
                raise TraceDecodeError(
                    f"Expected '{id_field}' of {event_dict} to be an "
                    f"unsigned 64-bit integer"
                )
        _validate_optional_field_type(event_dict, "name", str)
        _validate_optional_field_type(event_dict, "cat", str)
        _validate_optional_field_type(event_dict, "id", str)
        _validate_optional_field_type(event_dict, "dur", float | int)
        _validate_optional_field_type(event_dict, "tts", float | int)
        _validate_optional_field_type(event_dict, "args", dict)

        return Event(
            phase=Phase.from_code(event_dict["ph"]),
            timestamp=event_dict["ts"],
            pid=event_dict["pid"],
            tid=event_dict["tid"],
            name=event_dict.get("name", ""),
            category=event_dict.get("cat", ""),
            duration=event_dict.get("dur"),
            thread_timestamp=event_dict.get("tts"),
            id=event_dict.get("id", ""),
            args=event_dict.get("args", {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Returns the JSON object form of this event.

        Empty `cat`, `id` and `args`, and absent `dur` and `tts`, are left out.
        """
        result: Dict[str, Any] = {"name": self.name}
        if self.category:
            result["cat"] = self.category
        result["ph"] = self.phase.code
        result["ts"] = self.timestamp
        if self.duration is not None:
            result["dur"] = self.duration
        if self.thread_timestamp is not None:
            result["tts"] = self.thread_timestamp
        if self.id:
            result["id"] = self.id
        result["pid"] = self.pid
        result["tid"] = self.tid
        if self.args:
            result["args"] = self.args
        return result
