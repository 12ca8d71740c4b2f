"""libwipeout.track

Track geometry reader (TRACK.TRV + TRACK.TRF).

Both files are bare arrays of fixed-size big-endian records, no header:

    TRV vertex  16 bytes   i32 x, y, z + 4 pad
    TRF face    20 bytes   i16 v0..v3, i16 nx, ny, nz (/4096), u8 texture,
                           u8 flags, u32 color

A trailing partial record is ignored. Each face is a quad that becomes two
textured triangles (v2, v1, v0) and (v2, v0, v3); that order is the
winding the renderer expects, not a plain fan.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Tuple

from .binary import Bin, rgba_from_u32
from .model import FT3, Mesh, TrackFace, TrackFaceFlags, TrackGeometry, TrackVertex, Uv, Vec3, max_abs_radius
from .session import DecodeSession

_log = logging.getLogger(__name__)

TRACK_VERTEX_SIZE = 16
TRACK_FACE_SIZE = 20
NORMAL_SCALE = 4096.0
DEFAULT_NORMAL: Vec3 = (0.0, 1.0, 0.0)

UV_STANDARD: Tuple[Uv, Uv, Uv, Uv] = ((128, 0), (0, 0), (0, 128), (128, 128))
UV_FLIPPED: Tuple[Uv, Uv, Uv, Uv] = ((0, 0), (128, 0), (128, 128), (0, 128))


def read_track_vertices(data: bytes) -> List[TrackVertex]:
    b = Bin(data)
    out: List[TrackVertex] = []
    for _ in range(len(data) // TRACK_VERTEX_SIZE):
        x = b.s32(); y = b.s32(); z = b.s32()
        b.skip(4)
        out.append(TrackVertex(x, y, z))
    return out


def read_track_faces(data: bytes) -> List[TrackFace]:
    b = Bin(data)
    out: List[TrackFace] = []
    for _ in range(len(data) // TRACK_FACE_SIZE):
        indices = (b.s16(), b.s16(), b.s16(), b.s16())
        normal = (b.s16() / NORMAL_SCALE, b.s16() / NORMAL_SCALE, b.s16() / NORMAL_SCALE)
        texture_id = b.u8()
        flags = b.u8()
        color = rgba_from_u32(b.u32())
        out.append(TrackFace(indices, normal, texture_id, flags, color))
    return out


def _average_normals(sums: List[List[float]], counts: List[int]) -> List[Vec3]:
    normals: List[Vec3] = []
    for (nx, ny, nz), n in zip(sums, counts):
        length = math.sqrt(nx * nx + ny * ny + nz * nz)
        if n == 0 or length <= 0.0001:
            normals.append(DEFAULT_NORMAL)
        else:
            normals.append((nx / length, ny / length, nz / length))
    return normals


def build_track_geometry(
    vertices: List[TrackVertex], faces: List[TrackFace], session: Optional[DecodeSession] = None
) -> TrackGeometry:
    """Triangulate the faces and remember where each accepted face landed."""
    log = session.log if session is not None else _log
    count = len(vertices)
    positions: List[Vec3] = [(float(v.x), float(v.y), float(v.z)) for v in vertices]

    sums = [[0.0, 0.0, 0.0] for _ in range(count)]
    counts = [0] * count
    polys: List[FT3] = []
    face_primitives: Dict[int, int] = {}

    for fi, face in enumerate(faces):
        if any(i < 0 or i >= count for i in face.indices):
            log.warning("Track face %d has invalid vertex index %s, skipping", fi, face.indices)
            continue

        for vi in face.indices:
            s = sums[vi]
            s[0] += face.normal[0]
            s[1] += face.normal[1]
            s[2] += face.normal[2]
            counts[vi] += 1

        uv = UV_FLIPPED if face.flags & TrackFaceFlags.FLIP_TEXTURE else UV_STANDARD
        v0, v1, v2, v3 = face.indices
        face_primitives[fi] = len(polys)
        polys.append(FT3((v2, v1, v0), face.texture_id, [uv[2], uv[1], uv[0]], face.color))
        polys.append(FT3((v2, v0, v3), face.texture_id, [uv[2], uv[0], uv[3]], face.color))

    if positions:
        xs = [p[0] for p in positions]; ys = [p[1] for p in positions]; zs = [p[2] for p in positions]
        log.info(
            "Track bounds: X[%g, %g] Y[%g, %g] Z[%g, %g]",
            min(xs), max(xs), min(ys), max(ys), min(zs), max(zs),
        )

    mesh = Mesh(
        name="Track",
        radius=max_abs_radius(positions),
        vertices=positions,
        normals=_average_normals(sums, counts),
        primitives=list(polys),
    )
    log.info("Created track mesh with %d vertices and %d primitives", len(positions), len(polys))
    return TrackGeometry(vertices=vertices, faces=faces, mesh=mesh, face_primitives=face_primitives)


def build_track_mesh(
    vertices: List[TrackVertex], faces: List[TrackFace], session: Optional[DecodeSession] = None
) -> Mesh:
    return build_track_geometry(vertices, faces, session).mesh


def load_track(trv_path: str, trf_path: str, session: Optional[DecodeSession] = None) -> TrackGeometry:
    with open(trv_path, "rb") as f:
        trv = f.read()
    with open(trf_path, "rb") as f:
        trf = f.read()

    vertices = read_track_vertices(trv)
    _log.info("Loaded %d vertices from %s (%d bytes)", len(vertices), trv_path, len(trv))
    faces = read_track_faces(trf)
    _log.info("Loaded %d faces from %s (%d bytes)", len(faces), trf_path, len(trf))

    return build_track_geometry(vertices, faces, session)
