"""libwipeout.mock

Procedural stand-in mesh used when a PRM object cannot be loaded.

The hull is a fixed wedge racer (nose, cockpit, two wings, two engine
pods) so the output is identical for identical arguments.
"""

from __future__ import annotations

from typing import List, Tuple

from .model import F3, G3, Mesh, Polygon, Vec3, max_abs_radius

# PSX units, nose pointing down -z.
_HULL: List[Tuple[int, int, int]] = [
    (0, 0, -384),      # 0 nose
    (-96, 0, 128),     # 1 rear left
    (96, 0, 128),      # 2 rear right
    (0, -64, 64),      # 3 cockpit top
    (0, 32, 96),       # 4 keel
    (-256, 16, 192),   # 5 left wing tip
    (256, 16, 192),    # 6 right wing tip
    (-128, -24, 224),  # 7 left engine
    (128, -24, 224),   # 8 right engine
]

_BODY_COLOR = (64, 96, 200, 255)
_WING_COLOR = (200, 200, 210, 255)
_GLASS_COLOR = (32, 200, 255, 255)
_ENGINE_COLOR = (255, 96, 32, 255)

_FLAT = [
    ((0, 3, 1), _BODY_COLOR),
    ((0, 2, 3), _BODY_COLOR),
    ((0, 1, 4), _BODY_COLOR),
    ((0, 4, 2), _BODY_COLOR),
    ((1, 5, 4), _WING_COLOR),
    ((2, 4, 6), _WING_COLOR),
    ((1, 3, 5), _WING_COLOR),
    ((2, 6, 3), _WING_COLOR),
]

_SHADED = [
    ((3, 2, 1), [_GLASS_COLOR, _BODY_COLOR, _BODY_COLOR]),
    ((1, 7, 5), [_BODY_COLOR, _ENGINE_COLOR, _WING_COLOR]),
    ((2, 6, 8), [_BODY_COLOR, _WING_COLOR, _ENGINE_COLOR]),
]


def create_mock_mesh(name: str = "mock", scale: float = 1.0) -> Mesh:
    vertices: List[Vec3] = [(x * scale, y * scale, z * scale) for (x, y, z) in _HULL]
    polys: List[Polygon] = [F3(idx, color) for idx, color in _FLAT]
    polys += [G3(idx, list(colors)) for idx, colors in _SHADED]
    return Mesh(
        name=name,
        radius=max_abs_radius(vertices),
        vertices=vertices,
        primitives=polys,
    )
