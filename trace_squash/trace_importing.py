# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Logic to deserialize trace events from JSON."""

import json
import logging
import os
from typing import Any, List, TextIO

from trace_squash import trace_model, trace_repair

_LOGGER: logging.Logger = logging.getLogger("TraceSquash")


def _reject_constant(name: str) -> Any:
    # Python accepts NaN and Infinity, which are not part of JSON.
    raise trace_model.TraceDecodeError(
        f"Trace is not valid JSON: unexpected constant {name}"
    )


def create_events_from_file_path(
    path: str | os.PathLike[Any],
) -> List[trace_model.Event]:
    """Create a list of Events from a file path.

    Args:
        path: The path to the file.

    Returns:
        The events, in file order.
    """

    try:
        with open(path, "r", encoding="utf-8") as file:
            return create_events_from_file(file)
    except UnicodeDecodeError as e:
        raise trace_model.TraceDecodeError(
            f"Trace {path} is not valid UTF-8: {e}"
        ) from e


def create_events_from_file(file: TextIO) -> List[trace_model.Event]:
    """Create a list of Events from a file.

    Args:
        file: The file to read.

    Returns:
        The events, in file order.
    """

    return create_events_from_string(file.read())


def create_events_from_string(json_string: str) -> List[trace_model.Event]:
    """Create a list of Events from raw, possibly unterminated, trace text.

    The text is closed with `trace_repair.repair_document` before decoding.

    Args:
        json_string: The trace text to parse.

    Raises:
        trace_repair.MalformedDocumentError: No complete event was found.
        trace_model.TraceDecodeError: The repaired text is not a valid array
            of trace events.

    Returns:
        The events, in file order.
    """

    repaired: str = trace_repair.repair_document(json_string)
    try:
        root_object: Any = json.loads(
            repaired, parse_constant=_reject_constant
        )
    except json.JSONDecodeError as e:
        raise trace_model.TraceDecodeError(
            f"Trace is not valid JSON: {e}"
        ) from e
    return create_events_from_json(root_object)


def create_events_from_json(root_object: Any) -> List[trace_model.Event]:
    """Creates Events from a decoded JSON array.

    Args:
        root_object: A JSON list of trace event objects.

    Returns:
        The events, in the order they appear in the list.
    """

    if not isinstance(root_object, list):
        raise trace_model.TraceDecodeError(
            f"Expected trace to be a list of events, got "
            f"{type(root_object).__name__}"
        )

    events: List[trace_model.Event] = [
        trace_model.Event.from_dict(trace_event) for trace_event in root_object
    ]
    _LOGGER.info(f"Loaded {len(events)} trace events")
    return events
