# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Logic to serialize trace events to JSON."""

import json
import logging
import os
from typing import Any, Iterable

from trace_squash import trace_model

_LOGGER: logging.Logger = logging.getLogger("TraceSquash")


def serialize_events(events: Iterable[trace_model.Event]) -> str:
    """Returns `events` as a compact JSON array.

    Raises:
      trace_model.TraceEncodeError: A value is NaN or infinite.
    """
    try:
        return json.dumps(
            [event.to_dict() for event in events],
            separators=(",", ":"),
            allow_nan=False,
        )
    except ValueError as e:
        raise trace_model.TraceEncodeError(
            f"Events cannot be written as JSON: {e}"
        ) from e


def write_events_to_file_path(
    events: Iterable[trace_model.Event], path: str | os.PathLike[Any]
) -> None:
    """Writes `events` to `path` as a compact JSON array.

    The JSON text is fully built before the file is opened, so an encoding
    failure never leaves a partial file behind.
    """
    serialized: str = serialize_events(events)
    with open(path, "w", encoding="utf-8") as json_file:
        json_file.write(serialized)
    _LOGGER.info(f"Wrote squashed trace to {path}")
