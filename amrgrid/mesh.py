"""Adaptive mesh refinement grid of box-shaped cells."""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence

Point = tuple[float, float, float]
Bounds = tuple[tuple[float, float], tuple[float, float], tuple[float, float]]

_PARALLEL_EPS = 1e-10
_EDGE_EPS = 1e-8
_SEPARATOR = "_________________________________"


class MeshError(Exception):
    """Raised when a mesh operation is given invalid input."""


def _check_shape(*sizes: int) -> None:
    if any(int(n) < 1 for n in sizes):
        raise MeshError(f"every dimension must be at least 1, got {sizes}")


def _locate(value: float, lo: float, hi: float, n: int) -> tuple[int, float]:
    """Return the sub-interval index holding value and the sub-interval width."""
    step = (hi - lo) / n
    index = int((value - lo) / step)
    return min(max(index, 0), n - 1), step


def find_intersection(
    p1: Sequence[float], p2: Sequence[float], a: float, b: float, c: float, d: float
) -> Optional[Point]:
    """Intersect segment p1-p2 with the plane a*x + b*y + c*z + d = 0.

    Returns the intersection point, ``p1`` when the segment lies in the plane,
    or None when they do not meet.
    """
    dist = a * p1[0] + b * p1[1] + c * p1[2] + d
    denom = a * (p2[0] - p1[0]) + b * (p2[1] - p1[1]) + c * (p2[2] - p1[2])
    if abs(denom) < _PARALLEL_EPS:
        if abs(dist) < _PARALLEL_EPS:
            return (p1[0], p1[1], p1[2])
        return None
    t = -dist / denom
    if 0.0 <= t <= 1.0:
        return (
            p1[0] + t * (p2[0] - p1[0]),
            p1[1] + t * (p2[1] - p1[1]),
            p1[2] + t * (p2[2] - p1[2]),
        )
    return None


@dataclass(eq=False)
class Cell:
    """A box in the mesh, either a leaf or split into a block of child cells."""

    nx: int
    ny: int
    nz: int
    level: int = 0
    parent: Optional["Cell"] = field(default=None, repr=False)
    f: float = 0.0
    children: list[list[list["Cell"]]] = field(default_factory=list, repr=False)

    @property
    def is_divided(self) -> bool:
        return bool(self.children)

    @property
    def shape(self) -> tuple[int, int, int]:
        if not self.children:
            return (0, 0, 0)
        return (len(self.children), len(self.children[0]), len(self.children[0][0]))

    def _iter_children(self) -> Iterator["Cell"]:
        for plane in self.children:
            for row in plane:
                yield from row

    def divide(self, n1: int, n2: int, n3: int) -> None:
        """Split this cell into n1 x n2 x n3 children carrying its value."""
        _check_shape(n1, n2, n3)
        self.children = [
            [
                [
                    Cell(i, j, k, level=self.level + 1, parent=self, f=self.f)
                    for k in range(n3)
                ]
                for j in range(n2)
            ]
            for i in range(n1)
        ]

    def find_cell(
        self,
        x: float,
        y: float,
        z: float,
        xl: float,
        xr: float,
        yl: float,
        yr: float,
        zl: float,
        zr: float,
    ) -> "Cell":
        """Find the leaf below this cell, spanning the given box, that holds the point."""
        if not self.is_divided:
            raise MeshError("cannot descend into a cell that is not divided")
        xn, yn, zn = self.shape
        i, dx = _locate(x, xl, xr, xn)
        j, dy = _locate(y, yl, yr, yn)
        k, dz = _locate(z, zl, zr, zn)
        child = self.children[i][j][k]
        if not child.is_divided:
            return child
        return child.find_cell(
            x, y, z,
            xl + i * dx, xl + (i + 1) * dx,
            yl + j * dy, yl + (j + 1) * dy,
            zl + k * dz, zl + (k + 1) * dz,
        )

    def bounds(self, grid: "Grid") -> Bounds:
        """Return the (low, high) extent of this cell along x, y and z."""
        if self.parent is None:
            outer = ((grid.xl, grid.xr), (grid.yl, grid.yr), (grid.zl, grid.zr))
            counts = (grid.xn, grid.yn, grid.zn)
        else:
            outer = self.parent.bounds(grid)
            counts = self.parent.shape
        result = []
        for (lo, hi), n, idx in zip(outer, counts, (self.nx, self.ny, self.nz)):
            step = (hi - lo) / n
            result.append((lo + idx * step, lo + (idx + 1) * step))
        return (result[0], result[1], result[2])

    def _center_and_size(self, grid: "Grid") -> tuple[Point, Point]:
        box = self.bounds(grid)
        center = tuple((lo + hi) / 2.0 for lo, hi in box)
        size = tuple(hi - lo for lo, hi in box)
        return center, size  # type: ignore[return-value]

    def center(self, grid: "Grid") -> Point:
        """Return the centre point of this cell."""
        return self._center_and_size(grid)[0]

    def index_path(self) -> list[tuple[int, int, int]]:
        """Return the cell indices from the top level down to this cell."""
        path = []
        cell: Optional[Cell] = self
        while cell is not None:
            path.append((cell.nx, cell.ny, cell.nz))
            cell = cell.parent
        path.reverse()
        return path

    def neighbour(self, grid: "Grid", direction: int) -> Optional["Cell"]:
        """Return the leaf next to this cell in direction 0..5 (+x, -x, +y, -y, +z, -z).

        Returns None when the neighbour lies outside the grid.
        """
        if direction not in range(6):
            raise MeshError(f"direction must be 0..5, got {direction}")
        center, size = self._center_and_size(grid)
        axis, sign = divmod(direction, 2)
        step = size[axis] / 2.0 + size[axis] / 1000.0
        point = list(center)
        point[axis] += -step if sign else step
        return grid.find_cell(*point)

    def describe(self) -> str:
        """Return a text description of this cell and, if divided, its children."""
        lines = [
            _SEPARATOR,
            f"level: {self.level}",
            f"is divided?: {int(self.is_divided)}",
            f"nx: {self.nx}",
            f"ny: {self.ny}",
            f"nz: {self.nz}",
        ]
        if not self.is_divided:
            lines.append(_SEPARATOR)
            return "\n".join(lines)
        lines.append("_______children_______")
        text = "\n".join(lines)
        return "\n".join([text, *(child.describe() for child in self._iter_children())])

    def centers(self, grid: "Grid") -> list[Point]:
        """Return the centres of all leaves at or below this cell."""
        if not self.is_divided:
            return [self.center(grid)]
        return [c for child in self._iter_children() for c in child.centers(grid)]

    def leaves(self) -> list["Cell"]:
        """Return the leaf cells strictly below this cell."""
        found: list[Cell] = []
        for child in self._iter_children():
            if child.is_divided:
                found.extend(child.leaves())
            else:
                found.append(child)
        return found

    def slice_plane(
        self, grid: "Grid", a: float, b: float, c: float, d: float
    ) -> list[Point]:
        """Return the polygon where the plane a*x + b*y + c*z + d = 0 cuts this cell.

        The points are ordered by angle around their centroid.
        """
        (cx, cy, cz), (sx, sy, sz) = self._center_and_size(grid)
        hx, hy, hz = sx / 2.0, sy / 2.0, sz / 2.0
        corners = [
            (cx + ox * hx, cy + oy * hy, cz + oz * hz)
            for oz in (-1, 1)
            for ox, oy in ((-1, -1), (1, -1), (1, 1), (-1, 1))
        ]
        points: list[Point] = []
        for p1, p2 in itertools.combinations(corners, 2):
            shared = sum(abs(u - v) < _EDGE_EPS for u, v in zip(p1, p2))
            if shared != 2:
                continue
            hit = find_intersection(p1, p2, a, b, c, d)
            if hit is not None:
                points.append(hit)

        if not 3 <= len(points) <= 6:
            raise MeshError(
                f"plane cuts the cell in {len(points)} points, expected 3 to 6"
            )

        length = math.sqrt(a * a + b * b + c * c)
        normal = (a / length, b / length, c / length) if length > 0 else (a, b, c)
        count = len(points)
        centroid = tuple(sum(p[i] for p in points) / count for i in range(3))
        ref = (0.0, 1.0, 0.0) if abs(normal[0]) > 0.9 else (1.0, 0.0, 0.0)
        t = (
            ref[1] * normal[2] - ref[2] * normal[1],
            ref[2] * normal[0] - ref[0] * normal[2],
            ref[0] * normal[1] - ref[1] * normal[0],
        )

        def angle(p: Point) -> float:
            v = [p[i] - centroid[i] for i in range(3)]
            dot = v[0] * t[0] + v[1] * t[1] + v[2] * t[2]
            cross = (
                t[1] * v[2] - t[2] * v[1]
                - t[0] * v[2] + t[2] * v[0]
                + t[0] * v[1] - t[1] * v[0]
            )
            return math.atan2(cross, dot)

        return sorted(points, key=angle)


class Grid:
    """A regular top-level block of cells over a box, refinable cell by cell."""

    def __init__(
        self,
        xl: float,
        xr: float,
        yl: float,
        yr: float,
        zl: float,
        zr: float,
        xn: int,
        yn: int,
        zn: int,
    ) -> None:
        _check_shape(xn, yn, zn)
        self.xl, self.xr = xl, xr
        self.yl, self.yr = yl, yr
        self.zl, self.zr = zl, zr
        self.xn, self.yn, self.zn = xn, yn, zn
        self.cells = [
            [[Cell(i, j, k) for k in range(zn)] for j in range(yn)] for i in range(xn)
        ]

    def _iter_cells(self) -> Iterator[Cell]:
        for plane in self.cells:
            for row in plane:
                yield from row

    def find_cell(self, x: float, y: float, z: float) -> Optional[Cell]:
        """Return the leaf holding the point, or None if it lies outside the grid."""
        if not (self.xl <= x <= self.xr):
            return None
        if not (self.yl <= y <= self.yr):
            return None
        if not (self.zl <= z <= self.zr):
            return None
        i, dx = _locate(x, self.xl, self.xr, self.xn)
        j, dy = _locate(y, self.yl, self.yr, self.yn)
        k, dz = _locate(z, self.zl, self.zr, self.zn)
        cell = self.cells[i][j][k]
        if not cell.is_divided:
            return cell
        return cell.find_cell(
            x, y, z,
            self.xl + i * dx, self.xl + (i + 1) * dx,
            self.yl + j * dy, self.yl + (j + 1) * dy,
            self.zl + k * dz, self.zl + (k + 1) * dz,
        )

    def leaves(self) -> list[Cell]:
        """Return every leaf cell of the grid."""
        found: list[Cell] = []
        for cell in self._iter_cells():
            if cell.is_divided:
                found.extend(cell.leaves())
            else:
                found.append(cell)
        return found

    def describe(self) -> str:
        """Return a text description of every cell in the grid."""
        return "\n".join(cell.describe() for cell in self._iter_cells())

    def write_centers_tecplot(self, path: str | Path) -> None:
        """Write the centres of all leaves as Tecplot points."""
        lines = ["TITLE = HP  VARIABLES = X, Y, Z"]
        for cell in self._iter_cells():
            lines.extend(f"{x:g} {y:g} {z:g}" for x, y, z in cell.centers(self))
        Path(path).write_text("\n".join(lines) + "\n")

    def write_neighbours_tecplot(self, path: str | Path) -> None:
        """Write line segments from each leaf centre towards its six neighbours."""
        leaves = self.leaves()
        segments = len(leaves) * 6
        lines = [
            "TITLE = HP  VARIABLES = X, Y, Z",
            f"ZONE T=HP, N = {segments * 2}, E = {segments}, F=FEPOINT, ET=LINESEG",
        ]
        for cell in leaves:
            center = cell.center(self)
            for direction in range(6):
                other = cell.neighbour(self, direction) or cell
                center2 = other.center(self)
                mid = [(u + v) / 2.0 for u, v in zip(center, center2)]
                lines.append(f"{center[0]:g} {center[1]:g} {center[2]:g}")
                lines.append(f"{mid[0]:g} {mid[1]:g} {mid[2]:g}")
        lines.extend(f"{2 * m + 1} {2 * m + 2}" for m in range(segments))
        Path(path).write_text("\n".join(lines) + "\n")