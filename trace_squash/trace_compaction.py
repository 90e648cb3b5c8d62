# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Removes the idle time between each thread's duration spans.

A thread is considered running while it has at least one open duration
(begin/end) span, and sleeping otherwise. Every sleeping period is collapsed to
zero width by shifting that thread's later events back by the total time it
has slept so far. Spacing inside running periods is left intact.
"""

import dataclasses
import logging
from typing import Dict, List

from trace_squash import trace_model

_LOGGER: logging.Logger = logging.getLogger("TraceSquash")

Phase = trace_model.Phase


@dataclasses.dataclass(frozen=True)
class Sleeping:
    """The thread has no open duration spans since `at`."""

    at: int


@dataclasses.dataclass(frozen=True)
class Running:
    """The thread is inside `depth` nested duration spans."""

    depth: int


ThreadState = Sleeping | Running


@dataclasses.dataclass
class ThreadStat:
    """Per-thread bookkeeping for a single compaction pass."""

    state: ThreadState = Sleeping(0)
    # Total idle time removed so far, in the same unit as timestamps.
    gap_total: int = 0


class SleepingThreadError(trace_model.TraceSquashError):
    """An event other than a duration begin arrived for an idle thread.

    This happens for an end event without a matching begin, or for any event
    that precedes a thread's first span. There is no meaningful timestamp to
    give such an event, so compaction stops.
    """

    def __init__(self, index: int, event: trace_model.Event) -> None:
        super().__init__(
            f"Got a {event.phase.name} event for sleeping thread {event.tid} "
            f"(event #{index}, ts={event.timestamp})"
        )
        self.index: int = index
        self.event: trace_model.Event = event


def normalize_origin(events: List[trace_model.Event]) -> int:
    """Shifts all timestamps so that the first event is at time zero.

    Returns:
      The timestamp that was subtracted, or 0 for an empty list.
    """
    if not events:
        return 0
    origin: int = events[0].timestamp
    for event in events:
        event.timestamp -= origin
    return origin


def _next_state(
    state: ThreadState, index: int, event: trace_model.Event
) -> ThreadState:
    if isinstance(state, Sleeping):
        if event.phase != Phase.DURATION_BEGIN:
            raise SleepingThreadError(index, event)
        return Running(1)
    if event.phase == Phase.DURATION_BEGIN:
        return Running(state.depth + 1)
    if event.phase == Phase.DURATION_END:
        if state.depth == 1:
            return Sleeping(event.timestamp)
        return Running(state.depth - 1)
    return state


def compact_events(
    events: List[trace_model.Event],
) -> Dict[int, ThreadStat]:
    """Rewrites the timestamps of `events` in place to remove idle gaps.

    Events must be in their original order, which is assumed to be sorted by
    timestamp within each thread. The list is normalized to start at zero
    first.

    Args:
      events: The events to rewrite.

    Raises:
      SleepingThreadError: A thread's first event, or the first event after a
          thread closed its last span, is not a duration begin.

    Returns:
      The final bookkeeping for each thread, keyed by tid.
    """
    normalize_origin(events)

    threads: Dict[int, ThreadStat] = {}
    for index, event in enumerate(events):
        thread: ThreadStat = threads.setdefault(event.tid, ThreadStat())
        if isinstance(thread.state, Sleeping):
            # Computed before the transition so the begin event that ends the
            # gap is itself pulled back by it.
            idle: int = event.timestamp - thread.state.at
        else:
            idle = 0
        thread.state = _next_state(thread.state, index, event)
        thread.gap_total += idle
        event.timestamp -= thread.gap_total

    for tid, thread in sorted(threads.items()):
        _LOGGER.debug(f"Removed {thread.gap_total} of idle time from tid {tid}")
        if isinstance(thread.state, Running):
            _LOGGER.warning(
                f"Warning, tid {tid} finished the trace with "
                f"{thread.state.depth} in progress duration events"
            )
    return threads
