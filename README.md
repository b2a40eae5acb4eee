# amrgrid

A small adaptive mesh refinement (AMR) grid over an axis-aligned box.
The box is split into a regular array of root cells; any cell can be
divided again into its own regular array of children, to any depth.

## Installation

```
pip install .
```

## Usage

```python
from amrgrid.mesh import Grid

grid = Grid(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 5, 5, 1)

cell = grid.find_cell(0.0, 0.0, 0.0)   # the leaf cell holding the point
cell.divide(3, 3, 1)                   # refine it into 3 x 3 x 1 children

leaf = grid.find_cell(0.0, 0.0, 0.0)
print(leaf.index_path())               # (nx, ny, nz) from the root level down
print(leaf.center(grid))               # centre of the leaf
print(leaf.bounds(grid))               # ((xlo, xhi), (ylo, yhi), (zlo, zhi))

for direction in range(6):             # +x, -x, +y, -y, +z, -z
    print(leaf.neighbour(grid, direction))

print(len(grid.leaves()))              # every undivided cell
print(grid.describe())                 # text listing of all cells
```

Children created by `Cell.divide` take over the parent's value `f`.
`Grid.find_cell` returns `None` for a point outside the box, and
`Cell.neighbour` returns `None` when the neighbouring point lies outside
the grid. Invalid requests raise `MeshError`: a dimension below 1, a
neighbour direction outside 0..5, or descending into an undivided cell
with `Cell.find_cell`.

`Cell.centers(grid)` gives the centres of all leaves at or below a cell,
and `Cell.leaves()` the leaf cells strictly below it.

### Plane slices

`Cell.slice_plane(grid, a, b, c, d)` returns the polygon where the plane
`a*x + b*y + c*z + d = 0` cuts the cell, with its corners ordered by angle
around their centroid. It raises `MeshError` unless the plane meets the
cell's edges in 3 to 6 points. `find_intersection(p1, p2, a, b, c, d)`
gives the point where a segment meets such a plane, `p1` if the segment
lies in the plane, or `None`.

### Tecplot output

```python
grid.write_centers_tecplot("Tecplot_print_cell_center_3D.txt")
grid.write_neighbours_tecplot("Tecplot_print_sosed_3D.txt")
```

The first file lists the centre of every leaf cell; the second is a
line-segment zone drawing a segment from each leaf's centre halfway
towards each of its six neighbours (a zero-length segment where there is
no neighbour).

## Command line

```
amrgrid [-o OUTPUT_DIR]
```

builds a 5 x 5 x 1 grid on `[-1, 1]^3`, divides the cell at the origin
into 3 x 3 x 1 and then the new cell at the origin into 5 x 5 x 1, prints
the centre and index path of that cell, and writes
`Tecplot_print_cell_center_3D.txt` and `Tecplot_print_sosed_3D.txt` into
`OUTPUT_DIR` (the current directory by default, created if missing).
The grid it builds is fixed; the command takes no grid parameters.

## Limits

The package keeps the mesh in memory only: there is no way to save a
grid and load it back, and the cell value `f` is carried along but not
solved for. There is no Tecplot writer for plane slices; use
`Cell.slice_plane` directly.

## Tests

```
pip install .[test]
pytest
```