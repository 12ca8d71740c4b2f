from libwipeout.mock import create_mock_mesh


def test_mock_mesh_is_deterministic():
    assert create_mock_mesh("a") == create_mock_mesh("a")


def test_mock_mesh_indices_are_valid():
    mesh = create_mock_mesh()
    n = len(mesh.vertices)
    assert mesh.primitives
    for p in mesh.primitives:
        assert all(0 <= i < n for i in p.indices)


def test_mock_mesh_scale_and_radius():
    base = create_mock_mesh(scale=1.0)
    big = create_mock_mesh(scale=2.0)
    assert base.radius == 384.0
    assert big.radius == 2 * base.radius
    assert big.vertices[0] == (0.0, 0.0, -768.0)
