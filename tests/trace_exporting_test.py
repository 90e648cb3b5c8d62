#!/usr/bin/env python3
# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Unit tests for trace_exporting.py."""

import json
import pathlib
import tempfile
import unittest

from trace_squash import trace_exporting, trace_model

Phase = trace_model.Phase


class TraceExportingTest(unittest.TestCase):
    """Trace exporting tests"""

    def test_serialize_events_is_compact(self) -> None:
        events = [
            trace_model.Event(
                phase=Phase.DURATION_BEGIN,
                timestamp=0,
                pid=1,
                tid=2,
                name="a",
                args={"k": [1, 2]},
            ),
            trace_model.Event(
                phase=Phase.DURATION_END, timestamp=4, pid=1, tid=2
            ),
        ]

        self.assertEqual(
            trace_exporting.serialize_events(events),
            '[{"name":"a","ph":"B","ts":0,"pid":1,"tid":2,"args":{"k":[1,2]}},'
            '{"name":"","ph":"E","ts":4,"pid":1,"tid":2}]',
        )

    def test_serialize_no_events(self) -> None:
        self.assertEqual(trace_exporting.serialize_events([]), "[]")

    def test_write_events_to_file_path(self) -> None:
        events = [
            trace_model.Event(
                phase=Phase.CONTEXT_BEGIN,
                timestamp=7,
                pid=3,
                tid=4,
                category="ctx",
                id="0x2",
            )
        ]

        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = pathlib.Path(tmpdir) / "out.json"

            trace_exporting.write_events_to_file_path(events, output_path)

            self.assertEqual(
                json.loads(output_path.read_text()),
                [
                    {
                        "name": "",
                        "cat": "ctx",
                        "ph": "(",
                        "ts": 7,
                        "id": "0x2",
                        "pid": 3,
                        "tid": 4,
                    }
                ],
            )

    def test_serialize_non_finite_value(self) -> None:
        events = [
            trace_model.Event(
                phase=Phase.COMPLETE,
                timestamp=0,
                pid=1,
                tid=2,
                duration=float("nan"),
            )
        ]

        with self.assertRaises(trace_model.TraceEncodeError):
            trace_exporting.serialize_events(events)

    def test_non_finite_value_writes_nothing(self) -> None:
        events = [
            trace_model.Event(
                phase=Phase.INSTANT,
                timestamp=0,
                pid=1,
                tid=2,
                args={"load": float("inf")},
            )
        ]

        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = pathlib.Path(tmpdir) / "out.json"

            with self.assertRaises(trace_model.TraceEncodeError):
                trace_exporting.write_events_to_file_path(events, output_path)

            self.assertFalse(output_path.exists())

    def test_unwritable_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = pathlib.Path(tmpdir) / "missing_dir" / "out.json"

            with self.assertRaises(OSError):
                trace_exporting.write_events_to_file_path([], output_path)


if __name__ == "__main__":
    unittest.main()
