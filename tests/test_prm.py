import pytest

import fixtures as fx
from libwipeout.errors import ObjectNotFoundError
from libwipeout.model import DecodeStatus, F3, FT3, G3
from libwipeout.prm import (
    decode_object,
    decode_objects,
    describe_objects,
    load_all_objects,
    load_object,
    load_object_or_mock,
    scan_objects,
    scan_prm,
)


def _ship(name="ship", color=0x11223344):
    verts = [(-10, 5, 300), (20, -400, 1), (7, 8, 9)]
    prims = [
        fx.prim(1, fx.f3((0, 1, 2), color), flags=1),
        fx.prim(2, fx.ft3((2, 1, 0), 4, [(0, 0), (255, 0), (0, 255)], 0xFFFFFF00)),
        fx.prim(10, bytes(14)),  # sprite, no geometry
        fx.prim(5, fx.g3((0, 1, 2), [0x10000000, 0x20000000, 0x30000000])),
    ]
    return fx.prm_object(name, verts, prims, normals=[(0, 4096, 0)], flags=0x20, origin=(1, -2, 3))


def _marker(name="marker"):
    # No vertices, but a body that still has to be walked.
    return fx.prm_object(name, [], [fx.prim(21, bytes(12)), fx.prim(22, bytes(24))], normals=[(1, 2, 3)])


def test_decode_single_object():
    mesh = decode_object(_ship())
    assert mesh.name == "ship"
    assert mesh.flags == 0x20
    assert mesh.origin == (1.0, -2.0, 3.0)
    assert mesh.vertices[1] == (20.0, -400.0, 1.0)
    assert mesh.normals == [(0.0, 4096.0, 0.0)]
    assert [type(p) for p in mesh.primitives] == [F3, FT3, G3]
    assert mesh.primitives[0].color == (0x11, 0x22, 0x33, 255)
    assert mesh.primitives[0].flags == 1


def test_radius_is_max_absolute_coordinate():
    mesh = decode_object(_ship())
    # Euclidean length of (20, -400, 1) would be larger than 400.
    assert mesh.radius == 400.0


def test_zero_vertex_objects_are_walked_and_skipped():
    data = _marker() + _ship("first") + _marker() + _ship("second")
    result = decode_objects(data)
    assert result.status is DecodeStatus.OK
    assert [m.name for m in result.items] == ["first", "second"]


def test_scan_agrees_with_targeted_decode():
    data = _marker() + _ship("a") + _marker() + _ship("b")
    found = scan_objects(data)
    assert found == [(1, "a"), (3, "b")]
    for index, name in found:
        mesh = decode_object(data, index)
        assert mesh.name == name
        info = describe_objects(data)[index]
        assert len(mesh.vertices) == info.vertex_count
        assert len(mesh.normals) == info.normal_count


def test_requesting_zero_vertex_object_is_not_found():
    data = _marker() + _ship()
    with pytest.raises(ObjectNotFoundError):
        decode_object(data, 0)
    with pytest.raises(ObjectNotFoundError):
        decode_object(data, 5)


def test_invalid_counts_keep_earlier_objects():
    bad = fx.header("bad", -1, 0, 0) + bytes(64)
    data = _ship("good") + bad + _ship("never")
    result = decode_objects(data)
    assert [m.name for m in result.items] == ["good"]
    assert result.status is DecodeStatus.PARTIAL
    assert "Invalid counts" in result.reason


def test_oversized_counts_stop_parsing():
    data = _ship("good") + fx.header("huge", 10001, 0, 0)
    assert [m.name for m in decode_objects(data).items] == ["good"]
    assert scan_objects(data) == [(0, "good")]


def test_invalid_counts_first_object_fails():
    result = decode_objects(fx.header("bad", 0, 0, -5))
    assert result.items == []
    assert result.status is DecodeStatus.FAILED


def test_unknown_tag_stops_current_object_only():
    broken = fx.prm_object("broken", fx.QUAD, [
        fx.prim(1, fx.f3((0, 1, 2), 0)),
        fx.prim(77, bytes(12)),
        fx.prim(1, fx.f3((1, 2, 3), 0)),
    ])
    data = _ship("before") + broken + _ship("after")
    result = decode_objects(data)
    assert [m.name for m in result.items] == ["before", "broken"]
    assert len(result.items[1].primitives) == 1
    assert result.status is DecodeStatus.PARTIAL
    assert "Unknown primitive type 77" in result.reason


def test_out_of_range_index_skips_only_that_record(caplog):
    obj = fx.prm_object("tri", [(0, 0, 0), (1, 0, 0), (0, 1, 0)], [
        fx.prim(1, fx.f3((0, 1, 2), 0)),
        fx.prim(1, fx.f3((0, 1, 3), 0)),
        fx.prim(1, fx.f3((-1, 1, 2), 0)),
        fx.prim(1, fx.f3((2, 1, 0), 0)),
    ])
    mesh = decode_object(obj)
    assert [p.indices for p in mesh.primitives] == [(0, 1, 2), (2, 1, 0)]
    assert any("skipping" in r.getMessage() for r in caplog.records)


def test_truncated_primitive_array_keeps_decoded_polygons():
    data = _ship()
    cut = data[:-10]
    result = decode_objects(cut)
    assert len(result.items) == 1
    assert len(result.items[0].primitives) == 2
    assert result.status is DecodeStatus.PARTIAL


def test_trailing_bytes_shorter_than_header_are_ignored():
    result = decode_objects(_ship() + bytes(100))
    assert result.status is DecodeStatus.OK
    assert len(result.items) == 1


def test_empty_buffer_has_no_objects():
    assert decode_objects(b"").items == []
    assert scan_objects(b"") == []
    with pytest.raises(ObjectNotFoundError):
        decode_object(b"")


def test_file_front_ends(tmp_path):
    path = tmp_path / "ships.prm"
    path.write_bytes(_ship("one") + _marker() + _ship("two"))
    assert scan_prm(str(path)) == [(0, "one"), (2, "two")]
    assert load_object(str(path), 2).name == "two"
    assert [m.name for m in load_all_objects(str(path))] == ["one", "two"]


def test_missing_file_is_an_io_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_object(str(tmp_path / "nope.prm"))


def test_load_all_objects_not_found(tmp_path):
    path = tmp_path / "markers.prm"
    path.write_bytes(_marker())
    with pytest.raises(ObjectNotFoundError):
        load_all_objects(str(path))


def test_mock_fallback(tmp_path):
    mesh = load_object_or_mock(str(tmp_path / "missing.prm"), 3, name="stand-in")
    assert mesh.name == "stand-in"
    assert mesh.primitives

    path = tmp_path / "ok.prm"
    path.write_bytes(_ship("real"))
    assert load_object_or_mock(str(path)).name == "real"
