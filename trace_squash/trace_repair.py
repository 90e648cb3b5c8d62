# Copyright 2024 The Fuchsia Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Closes trace files that were written by appending one event at a time."""

import logging

from trace_squash import trace_model

_LOGGER: logging.Logger = logging.getLogger("TraceSquash")


class MalformedDocumentError(trace_model.TraceSquashError):
    """The document does not contain a single complete event object."""


def repair_document(text: str) -> str:
    """Turns an unterminated array of trace events into a valid JSON array.

    Tracers that append events to a file usually never write the closing
    bracket, so their files end in "}", "}," or "},\\n" instead of "}]".
    Everything after the last "}" is dropped and the array is closed.

    Only trailing content is repaired. A document cut off in the middle of an
    object is passed through as is and will fail to decode.

    Args:
      text: The raw trace text.

    Raises:
      MalformedDocumentError: The text contains no "}" at all.

    Returns:
      The text up to and including the last "}", followed by "]".
    """
    end: int = text.rfind("}")
    if end == -1:
        raise MalformedDocumentError(
            "Could not find the end of any trace event object in the document"
        )
    dropped: int = len(text) - end - 1
    if dropped:
        _LOGGER.debug(
            f"Dropped {dropped} trailing characters after the last event"
        )
    return text[: end + 1] + "]"
