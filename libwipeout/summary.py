from __future__ import annotations

from typing import Dict, Optional

from .model import PrmSummary, TrackFaceFlags, TrackSummary
from .prm import decode_objects, describe_objects, read_prm_bytes
from .sections import load_sections
from .session import DecodeSession
from .track import load_track


def summarize_prm(path: str) -> PrmSummary:
    data = read_prm_bytes(path)

    # Header walk for every object, full decode for the tag histogram and
    # the stop reason (if any).
    objects = describe_objects(data)
    session = DecodeSession()
    result = decode_objects(data, None, session)

    return PrmSummary(
        path=path,
        file_size=len(data),
        objects=objects,
        tag_counts=dict(sorted(session.tag_counts.items())),
        status=result.status,
        reason=result.reason,
    )


def _flag_counts(faces) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for flag in TrackFaceFlags:
        n = sum(1 for f in faces if f.flags & flag)
        if n:
            counts[flag.name] = n
    return counts


def summarize_track(trv_path: str, trf_path: str, trs_path: Optional[str] = None) -> TrackSummary:
    geo = load_track(trv_path, trf_path)
    triangles = len(geo.mesh.primitives)

    s = TrackSummary(
        vertex_count=len(geo.vertices),
        face_count=len(geo.faces),
        triangle_count=triangles,
        skipped_faces=len(geo.faces) - len(geo.face_primitives),
        radius=geo.mesh.radius,
        flag_counts=_flag_counts(geo.faces),
    )

    if trs_path:
        sections = load_sections(trs_path)
        s.section_count = len(sections)
        s.linked_sections = sum(1 for sec in sections if sec.next is not None)
    return s
