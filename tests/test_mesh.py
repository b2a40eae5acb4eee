import math

import pytest

from amrgrid.mesh import Cell, Grid, MeshError, find_intersection


def make_refined_grid():
    grid = Grid(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 5, 5, 1)
    grid.find_cell(0.0, 0.0, 0.0).divide(3, 3, 1)
    grid.find_cell(0.0, 0.0, 0.0).divide(5, 5, 1)
    return grid


def contains(box, point):
    return all(lo - 1e-12 <= p <= hi + 1e-12 for (lo, hi), p in zip(box, point))


def volume(box):
    return math.prod(hi - lo for lo, hi in box)


def test_find_cell_outside_returns_none():
    grid = make_refined_grid()
    assert grid.find_cell(1.5, 0.0, 0.0) is None
    assert grid.find_cell(0.0, -1.5, 0.0) is None
    assert grid.find_cell(0.0, 0.0, 2.0) is None


@pytest.mark.parametrize(
    "point",
    [(0.0, 0.0, 0.0), (0.01, -0.02, 0.3), (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0), (0.13, 0.07, 0.0)],
)
def test_found_cell_contains_point(point):
    grid = make_refined_grid()
    cell = grid.find_cell(*point)
    assert not cell.is_divided
    assert contains(cell.bounds(grid), point)


def test_leaf_centers_locate_their_own_cells():
    grid = make_refined_grid()
    for leaf in grid.leaves():
        assert grid.find_cell(*leaf.center(grid)) is leaf


def test_leaf_volumes_fill_domain():
    grid = make_refined_grid()
    leaves = grid.leaves()
    assert all(not leaf.is_divided for leaf in leaves)
    assert sum(volume(leaf.bounds(grid)) for leaf in leaves) == pytest.approx(2.0 * 2.0 * 2.0)


def test_divide_copies_value_and_links_parent():
    cell = Cell(1, 2, 0, f=3.5)
    cell.divide(2, 3, 4)
    assert cell.shape == (2, 3, 4)
    children = cell.leaves()
    assert len(children) == 2 * 3 * 4
    assert all(ch.f == 3.5 and ch.parent is cell and ch.level == 1 for ch in children)


def test_divide_rejects_empty_dimension():
    with pytest.raises(MeshError):
        Cell(0, 0, 0).divide(0, 2, 2)


def test_grid_rejects_empty_dimension():
    with pytest.raises(MeshError):
        Grid(0.0, 1.0, 0.0, 1.0, 0.0, 1.0, 2, 0, 1)


def test_index_path_follows_parents():
    grid = make_refined_grid()
    cell = grid.find_cell(0.0, 0.0, 0.0)
    path = cell.index_path()
    assert len(path) == cell.level + 1
    assert path[-1] == (cell.nx, cell.ny, cell.nz)
    assert path[:-1] == cell.parent.index_path()


def test_center_of_refined_origin_cell():
    grid = make_refined_grid()
    cell = grid.find_cell(0.0, 0.0, 0.0)
    assert cell.center(grid) == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)


def test_centers_of_undivided_cell_is_its_center():
    grid = Grid(0.0, 4.0, 0.0, 2.0, 0.0, 1.0, 2, 1, 1)
    cell = grid.cells[1][0][0]
    assert cell.centers(grid) == [cell.center(grid)]
    assert cell.leaves() == []


def test_neighbour_directions():
    grid = make_refined_grid()
    cell = grid.find_cell(0.0, 0.0, 0.0)
    cx, cy, cz = cell.center(grid)
    right = cell.neighbour(grid, 0)
    left = cell.neighbour(grid, 1)
    up = cell.neighbour(grid, 2)
    down = cell.neighbour(grid, 3)
    assert right.center(grid)[0] > cx
    assert left.center(grid)[0] < cx
    assert up.center(grid)[1] > cy
    assert down.center(grid)[1] < cy
    # only one layer in z: both z neighbours fall outside the grid
    assert cell.neighbour(grid, 4) is None
    assert cell.neighbour(grid, 5) is None


def test_neighbour_invalid_direction():
    grid = make_refined_grid()
    with pytest.raises(MeshError):
        grid.cells[0][0][0].neighbour(grid, 6)


def test_find_intersection_cases():
    assert find_intersection((0.0, 0.0, -1.0), (0.0, 0.0, 1.0), 0.0, 0.0, 1.0, 0.0) == pytest.approx(
        (0.0, 0.0, 0.0)
    )
    assert find_intersection((0.0, 0.0, 1.0), (1.0, 0.0, 1.0), 0.0, 0.0, 1.0, 0.0) is None
    assert find_intersection((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 0.0, 0.0, 1.0, 0.0) == (0.0, 0.0, 0.0)
    assert find_intersection((0.0, 0.0, 1.0), (0.0, 0.0, 2.0), 0.0, 0.0, 1.0, 0.0) is None


def test_slice_plane_square_ordered():
    grid = Grid(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 1, 1, 1)
    cell = grid.cells[0][0][0]
    points = cell.slice_plane(grid, 0.0, 0.0, 1.0, 0.0)
    assert len(points) == 4
    assert all(p[2] == pytest.approx(0.0) for p in points)
    assert sorted((round(p[0]), round(p[1])) for p in points) == [(-1, -1), (-1, 1), (1, -1), (1, 1)]
    for p, q in zip(points, points[1:] + points[:1]):
        differing = sum(abs(u - v) > 1e-9 for u, v in zip(p, q))
        assert differing == 1


def test_slice_plane_hexagon_points_on_plane():
    grid = Grid(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 1, 1, 1)
    points = grid.cells[0][0][0].slice_plane(grid, 1.0, 1.0, 1.0, 0.0)
    assert len(points) == 6
    assert all(p[0] + p[1] + p[2] == pytest.approx(0.0, abs=1e-12) for p in points)


def test_slice_plane_missing_cell_raises():
    grid = Grid(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 1, 1, 1)
    with pytest.raises(MeshError):
        grid.cells[0][0][0].slice_plane(grid, 0.0, 0.0, 1.0, -5.0)


def test_find_cell_on_leaf_raises():
    with pytest.raises(MeshError):
        Cell(0, 0, 0).find_cell(0.0, 0.0, 0.0, -1.0, 1.0, -1.0, 1.0, -1.0, 1.0)


def test_describe_lists_every_cell():
    grid = Grid(0.0, 1.0, 0.0, 1.0, 0.0, 1.0, 2, 1, 1)
    grid.cells[0][0][0].divide(2, 1, 1)
    text = grid.describe()
    assert text.count("level: 0") == 2
    assert text.count("level: 1") == 2
    assert "is divided?: 1" in text


def test_write_neighbours_tecplot(tmp_path):
    grid = make_refined_grid()
    out = tmp_path / "neighbours.txt"
    grid.write_neighbours_tecplot(out)
    lines = out.read_text().splitlines()
    count = len(grid.leaves())
    assert lines[0] == "TITLE = HP  VARIABLES = X, Y, Z"
    assert lines[1] == f"ZONE T=HP, N = {count * 12}, E = {count * 6}, F=FEPOINT, ET=LINESEG"
    assert len(lines) == 2 + count * 12 + count * 6
    assert lines[-1] == f"{count * 12 - 1} {count * 12}"