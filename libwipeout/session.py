"""libwipeout.session

Per-call diagnostic context. Decoders never keep state between calls;
anything they want to remember across records goes here, and callers that
want independent results simply pass a fresh session (or none).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Set

_log = logging.getLogger(__name__)


class DecodeSession:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.log = logger or _log
        self.tags_seen: Set[int] = set()
        self.tag_counts: Counter = Counter()

    def note_tag(self, tag: int) -> None:
        self.tag_counts[tag] += 1
        if tag not in self.tags_seen:
            self.tags_seen.add(tag)
            self.log.debug("Encountered primitive type %d for the first time", tag)
