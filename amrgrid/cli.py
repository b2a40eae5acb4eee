"""Command that builds a small refined grid and writes its Tecplot files."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Optional, Sequence

from amrgrid.mesh import Grid, MeshError

_RULE = "--------------"
CENTERS_FILE = "Tecplot_print_cell_center_3D.txt"
NEIGHBOURS_FILE = "Tecplot_print_sosed_3D.txt"


def format_index_path(numbers: Iterable[Sequence[int]]) -> str:
    """Return the index triples one per line, framed by rule lines."""
    lines = [_RULE]
    lines.extend(f"{i} {j} {k}" for i, j, k in numbers)
    lines.append(_RULE)
    return "\n".join(lines)


def _build_demo_grid() -> Grid:
    grid = Grid(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 5, 5, 1)
    cell = grid.find_cell(0.0, 0.0, 0.0)
    if cell is None:
        raise MeshError("origin lies outside the grid")
    cell.divide(3, 3, 1)
    return grid


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Refine the grid around the origin, report the refined cell and write Tecplot files."""
    parser = argparse.ArgumentParser(
        prog="amrgrid",
        description="Build a refined demo grid and write Tecplot files of it.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path("."),
        help="directory for the Tecplot files (default: current directory)",
    )
    args = parser.parse_args(argv)

    grid = _build_demo_grid()
    cell = grid.find_cell(0.0, 0.0, 0.0)
    if cell is None:
        raise MeshError("origin lies outside the grid")
    cell.divide(5, 5, 1)

    x, y, z = cell.center(grid)
    print(f"center = {x:g} {y:g} {z:g}")
    print(format_index_path(cell.index_path()))

    out = args.output_dir
    out.mkdir(parents=True, exist_ok=True)
    grid.write_centers_tecplot(out / CENTERS_FILE)
    grid.write_neighbours_tecplot(out / NEIGHBOURS_FILE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())