"""
Grid model: the authoritative set of settled bubbles.

Bubbles are keyed by hex cell, but neighbour queries are geometric (see
Bubble.is_touching) and recomputed on every call. The grid is small enough
(a few dozen bubbles) that caching an adjacency graph buys nothing.
"""

import random
from typing import Dict, Iterator, List, Optional, Set, Tuple

from bubble_entity import Bubble, BubbleRole
from bubble_geometry import (
    BUBBLE_COLORS, INITIAL_GRID_ROWS, GRID_ROWS, HexCell,
    cols_in_row, distance, get_adjacent_positions, grid_to_screen,
    is_cell_in_bounds, snap_to_hex_grid,
)


class BubbleGrid:
    def __init__(self):
        self.cells: Dict[Tuple[int, int], Bubble] = {}

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Bubble]:
        return iter(list(self.cells.values()))

    def __contains__(self, bubble: Bubble) -> bool:
        pos = bubble.grid_pos
        return pos is not None and self.cells.get(pos) is bubble

    def is_empty(self) -> bool:
        return not self.cells

    def bubble_at(self, row: int, col: int) -> Optional[Bubble]:
        return self.cells.get((row, col))

    def is_free(self, row: int, col: int) -> bool:
        return is_cell_in_bounds(row, col) and (row, col) not in self.cells

    def add(self, bubble: Bubble, row: int, col: int) -> Bubble:
        """
        Place a bubble on a cell and snap it onto the cell centre.

        Raises:
            ValueError: if the cell is out of bounds or already occupied
        """
        if not is_cell_in_bounds(row, col):
            raise ValueError(f"Cell ({row}, {col}) is outside the grid")
        if (row, col) in self.cells:
            raise ValueError(f"Cell ({row}, {col}) is already occupied")
        bubble.x, bubble.y = grid_to_screen(row, col)
        bubble.row, bubble.col = row, col
        bubble.role = BubbleRole.GRID
        bubble.velocity_x = 0.0
        bubble.velocity_y = 0.0
        self.cells[(row, col)] = bubble
        return bubble

    def remove(self, bubble: Bubble):
        pos = bubble.grid_pos
        if pos is not None and self.cells.get(pos) is bubble:
            del self.cells[pos]

    def neighbors_of(self, bubble: Bubble) -> List[Bubble]:
        return bubble.neighbors_in(self.cells.values())

    def colors_present(self) -> Set[Tuple[int, int, int]]:
        return {b.color for b in self.cells.values()}

    def nearest_free_cell(self, x: float, y: float) -> Optional[HexCell]:
        """
        Find the free cell whose centre is closest to (x, y).

        The snapped cell wins when it is free and inside the grid. Otherwise
        the rings around it are searched outward and the closest free cell
        of the first ring that has one is returned.

        Returns:
            HexCell, or None if the grid has no free cell at all
        """
        snapped = snap_to_hex_grid(x, y)
        if self.is_free(snapped.row, snapped.col):
            return snapped

        seen = {(snapped.row, snapped.col)}
        ring = [(snapped.row, snapped.col)]
        for _ in range(GRID_ROWS * 2):
            next_ring = []
            for row, col in ring:
                for pos in get_adjacent_positions(row, col):
                    if pos not in seen:
                        seen.add(pos)
                        next_ring.append(pos)
            candidates = [pos for pos in next_ring if self.is_free(*pos)]
            if candidates:
                best = min(candidates, key=lambda pos: (distance((x, y), grid_to_screen(*pos)), pos))
                cx, cy = grid_to_screen(*best)
                return HexCell(cx, cy, best[0], best[1])
            ring = next_ring
        return None


def populate_initial_rows(grid: BubbleGrid, rng: random.Random = None,
                          rows: int = INITIAL_GRID_ROWS) -> BubbleGrid:
    """Fill the fixed starting layout with uniformly random colours."""
    rng = rng or random.Random()
    for row in range(rows):
        for col in range(cols_in_row(row)):
            x, y = grid_to_screen(row, col)
            grid.add(Bubble(x, y, rng.choice(BUBBLE_COLORS)), row, col)
    return grid
