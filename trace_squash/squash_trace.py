#!/usr/bin/env python3
# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Removes idle gaps from a JSON trace so every thread is densely packed."""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from trace_squash import (
    trace_compaction,
    trace_exporting,
    trace_importing,
    trace_model,
)

_LOGGER: logging.Logger = logging.getLogger("TraceSquash")


def squash_trace_file(
    input_path: str | os.PathLike[Any],
    output_path: str | os.PathLike[Any],
) -> Optional[Dict[int, trace_compaction.ThreadStat]]:
    """Reads a trace, removes its idle gaps, and writes the result.

    Nothing is written if the trace has no events, or if any step fails.

    Returns:
      The per-thread bookkeeping of the compaction, or None if the trace was
      empty.
    """
    events: List[trace_model.Event] = (
        trace_importing.create_events_from_file_path(input_path)
    )
    # Repair needs at least one complete object, so a file on disk always
    # yields events; an empty list only comes from a substituted loader.
    if not events:
        _LOGGER.info(f"{input_path} has no events, nothing to write")
        return None

    threads = trace_compaction.compact_events(events)
    _LOGGER.info(
        f"Removed a total of {sum(t.gap_total for t in threads.values())}us "
        f"of idle time from {len(threads)} threads"
    )
    trace_exporting.write_events_to_file_path(events, output_path)
    return threads


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Removes the idle time between each thread's duration "
        "events in a JSON trace, so that all threads start at zero and have "
        "no gaps.",
    )
    parser.add_argument(
        "input", type=str, help="JSON trace to read, may be unterminated"
    )
    parser.add_argument(
        "output", type=str, help="Path to write the squashed JSON trace to"
    )
    args: argparse.Namespace = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    try:
        squash_trace_file(args.input, args.output)
    except OSError as e:
        _LOGGER.error(f"I/O error: {e}")
        return 1
    except trace_model.TraceSquashError as e:
        _LOGGER.error(f"{type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
