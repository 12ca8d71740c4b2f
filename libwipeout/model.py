from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, IntFlag
from typing import Dict, Iterator, List, Optional, Tuple, Union

Vec3 = Tuple[float, float, float]
Rgba = Tuple[int, int, int, int]
Uv = Tuple[int, int]


# -----------------------------
# High-level DTOs used by summarize_prm / summarize_track
# -----------------------------

@dataclass
class PrmSummary:
    path: str
    file_size: int
    objects: List["ObjectInfo"]
    tag_counts: Dict[int, int]
    status: "DecodeStatus"
    reason: Optional[str] = None


@dataclass
class TrackSummary:
    vertex_count: int
    face_count: int
    triangle_count: int
    skipped_faces: int
    radius: float
    flag_counts: Dict[str, int]
    section_count: Optional[int] = None
    linked_sections: Optional[int] = None


# -----------------------------
# Primitive kinds (PRM record tags)
# -----------------------------

class PrimitiveType(IntEnum):
    F3 = 1
    FT3 = 2
    F4 = 3
    FT4 = 4
    G3 = 5
    GT3 = 6
    G4 = 7
    GT4 = 8
    LF2 = 9
    TSPR = 10
    BSPR = 11
    LSF3 = 12
    LSFT3 = 13
    LSF4 = 14
    LSFT4 = 15
    LSG3 = 16
    LSGT3 = 17
    LSG4 = 18
    LSGT4 = 19
    SPLINE = 20
    INFINITE_LIGHT = 21
    POINT_LIGHT = 22
    SPOT_LIGHT = 23


class PrimitiveFlags(IntFlag):
    SINGLE_SIDED = 0x0001
    SHIP_ENGINE = 0x0002
    TRANSLUCENT = 0x0004


# -----------------------------
# Polygons
#
# One dataclass per output shape. `type` records which record kind produced
# it, so a light-sourced triangle comes out as an F3/FT3 tagged LSF3/LSFT3,
# and both halves of a split GT4 are GT3s tagged GT4.
# -----------------------------

def _uvs_to_float(uvs: List[Uv]) -> List[Tuple[float, float]]:
    return [(u / 255.0, v / 255.0) for (u, v) in uvs]


@dataclass
class F3:
    indices: Tuple[int, int, int]
    color: Rgba
    flags: int = 0
    type: PrimitiveType = PrimitiveType.F3


@dataclass
class F4:
    indices: Tuple[int, int, int, int]
    color: Rgba
    flags: int = 0
    type: PrimitiveType = PrimitiveType.F4


@dataclass
class FT3:
    indices: Tuple[int, int, int]
    texture_id: int
    uvs: List[Uv]
    color: Rgba
    flags: int = 0
    type: PrimitiveType = PrimitiveType.FT3

    @property
    def uvs_f(self) -> List[Tuple[float, float]]:
        return _uvs_to_float(self.uvs)


@dataclass
class FT4:
    indices: Tuple[int, int, int, int]
    texture_id: int
    uvs: List[Uv]
    color: Rgba
    flags: int = 0
    type: PrimitiveType = PrimitiveType.FT4

    @property
    def uvs_f(self) -> List[Tuple[float, float]]:
        return _uvs_to_float(self.uvs)


@dataclass
class G3:
    indices: Tuple[int, int, int]
    colors: List[Rgba]
    flags: int = 0
    type: PrimitiveType = PrimitiveType.G3


@dataclass
class G4:
    indices: Tuple[int, int, int, int]
    colors: List[Rgba]
    flags: int = 0
    type: PrimitiveType = PrimitiveType.G4


@dataclass
class GT3:
    indices: Tuple[int, int, int]
    texture_id: int
    uvs: List[Uv]
    colors: List[Rgba]
    flags: int = 0
    type: PrimitiveType = PrimitiveType.GT3

    @property
    def uvs_f(self) -> List[Tuple[float, float]]:
        return _uvs_to_float(self.uvs)


Polygon = Union[F3, F4, FT3, FT4, G3, G4, GT3]


# -----------------------------
# Mesh
# -----------------------------

@dataclass
class Mesh:
    name: str
    radius: float = 0.0
    origin: Vec3 = (0.0, 0.0, 0.0)
    flags: int = 0
    vertices: List[Vec3] = field(default_factory=list)
    normals: List[Vec3] = field(default_factory=list)
    primitives: List[Polygon] = field(default_factory=list)


def max_abs_radius(vertices: List[Vec3]) -> float:
    """Largest absolute coordinate on any axis (not a Euclidean radius)."""
    r = 0.0
    for (x, y, z) in vertices:
        r = max(r, abs(x), abs(y), abs(z))
    return float(r)


# -----------------------------
# Object container
# -----------------------------

@dataclass
class ObjectHeader:
    name: str
    vertex_count: int
    normal_count: int
    primitive_count: int
    flags: int
    origin: Tuple[int, int, int]
    offset: int  # file offset of the header


@dataclass
class ObjectInfo:
    index: int
    name: str
    vertex_count: int
    normal_count: int
    primitive_count: int
    flags: int
    origin: Tuple[int, int, int]


class DecodeStatus(Enum):
    OK = "ok"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DecodeResult:
    """Whatever was decoded, plus why decoding stopped early (if it did)."""

    items: List[Mesh] = field(default_factory=list)
    status: DecodeStatus = DecodeStatus.OK
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.OK

    def stop(self, reason: str) -> None:
        self.status = DecodeStatus.PARTIAL if self.items else DecodeStatus.FAILED
        self.reason = reason


# -----------------------------
# Track geometry (TRV / TRF)
# -----------------------------

class TrackFaceFlags(IntFlag):
    TRACK = 0x01
    PICKUP_LEFT = 0x02
    FLIP_TEXTURE = 0x04
    PICKUP_RIGHT = 0x08
    START_GRID = 0x10
    BOOST = 0x20
    PICKUP_COLLECTED = 0x40
    PICKUP_ACTIVE = 0x80


@dataclass
class TrackVertex:
    x: int
    y: int
    z: int


@dataclass
class TrackFace:
    indices: Tuple[int, int, int, int]
    normal: Vec3
    texture_id: int
    flags: int
    color: Rgba


@dataclass
class TrackGeometry:
    vertices: List[TrackVertex]
    faces: List[TrackFace]
    mesh: Mesh
    # face index -> index of its first triangle in mesh.primitives.
    # Faces skipped while building the mesh have no entry.
    face_primitives: Dict[int, int] = field(default_factory=dict)

    def faces_with_flags(self, mask: int) -> Iterator[Tuple[int, int, TrackFace]]:
        """(face index, first primitive index, face) for meshed faces matching any bit of mask."""
        for i, face in enumerate(self.faces):
            if face.flags & mask and i in self.face_primitives:
                yield i, self.face_primitives[i], face


# -----------------------------
# Track sections (TRS)
# -----------------------------

@dataclass
class TrackSectionRecord:
    next_junction: int
    previous: int
    next: int
    x: int
    y: int
    z: int
    first_face: int
    face_count: int
    flags: int


@dataclass(eq=False)
class TrackSection:
    section_number: int
    center: Vec3
    face_start: int
    face_count: int
    flags: int = 0
    # Links form a graph with cycles; keep them out of repr.
    next: Optional["TrackSection"] = field(default=None, repr=False)
    prev: Optional["TrackSection"] = field(default=None, repr=False)
    junction: Optional["TrackSection"] = field(default=None, repr=False)

    @property
    def face_range(self) -> range:
        return range(self.face_start, self.face_start + self.face_count)
