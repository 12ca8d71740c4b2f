"""libwipeout.sections

Track section reader (TRACK.TRS).

152-byte big-endian records, no count prefix:

    0-23     i32 next_junction, previous, next, x, y, z
    24-139   unused
    140-143  u32 first_face
    144-145  u16 face_count
    146-149  pad
    150-151  u16 flags

Records are loaded first and linked second, because a link may point at a
record that has not been read yet, or at nothing (-1 / out of range).
"""

from __future__ import annotations

import logging
from typing import List

from .binary import Bin
from .model import TrackSection, TrackSectionRecord

_log = logging.getLogger(__name__)

TRACK_SECTION_SIZE = 152
TRACK_SCALE = 0.001  # PSX units -> world units


def read_section_records(data: bytes) -> List[TrackSectionRecord]:
    b = Bin(data)
    out: List[TrackSectionRecord] = []
    for _ in range(len(data) // TRACK_SECTION_SIZE):
        next_junction = b.s32()
        previous = b.s32()
        nxt = b.s32()
        x = b.s32(); y = b.s32(); z = b.s32()
        b.skip(116)
        first_face = b.u32()
        face_count = b.u16()
        b.skip(4)
        flags = b.u16()
        out.append(TrackSectionRecord(
            next_junction=next_junction,
            previous=previous,
            next=nxt,
            x=x, y=y, z=z,
            first_face=first_face,
            face_count=face_count,
            flags=flags,
        ))
    return out


def link_sections(records: List[TrackSectionRecord]) -> List[TrackSection]:
    sections = [
        TrackSection(
            section_number=i,
            center=(r.x * TRACK_SCALE, r.y * TRACK_SCALE, r.z * TRACK_SCALE),
            face_start=r.first_face,
            face_count=r.face_count,
            flags=r.flags,
        )
        for i, r in enumerate(records)
    ]

    count = len(sections)

    def resolve(i: int):
        return sections[i] if 0 <= i < count else None

    for s, r in zip(sections, records):
        s.next = resolve(r.next)
        s.prev = resolve(r.previous)
        s.junction = resolve(r.next_junction)
    return sections


def load_sections(path: str) -> List[TrackSection]:
    with open(path, "rb") as f:
        data = f.read()
    records = read_section_records(data)
    _log.info("Loaded %d track sections from %s (%d bytes)", len(records), path, len(data))
    if records:
        _log.debug(
            "First section: x=%d y=%d z=%d next=%d",
            records[0].x, records[0].y, records[0].z, records[0].next,
        )
    return link_sections(records)
