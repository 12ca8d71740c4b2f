"""libwipeout.errors

Decode failures raised by the readers. File-system errors are not wrapped;
they surface as the usual ``OSError`` family from ``open()``.
"""

from __future__ import annotations

from typing import Optional


class WipeoutReadError(RuntimeError):
    pass


class TruncatedDataError(WipeoutReadError):
    """A read or skip would move past the end of the buffer."""


class UnknownPrimitiveError(WipeoutReadError):
    """A primitive tag we have no record length for.

    The stream cannot be resynchronized after this, so callers stop
    consuming the current object.
    """

    def __init__(self, tag: int, offset: Optional[int] = None):
        self.tag = tag
        self.offset = offset
        where = f" at {offset}" if offset is not None else ""
        super().__init__(f"Unknown primitive type {tag}{where}")


class ObjectNotFoundError(WipeoutReadError):
    """No vertex-bearing object matched the request."""
