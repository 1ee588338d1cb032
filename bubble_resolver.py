"""
Match & gravity resolution after a bubble settles.

Both passes are breadth-first flood-fills over the geometric neighbour
relation. Visiting order does not change the resulting component, so
neighbours are walked in grid order.
"""

from collections import deque
from typing import List

from bubble_entity import Bubble
from bubble_geometry import CEILING_ANCHOR_Y, MATCH_THRESHOLD
from bubble_grid import BubbleGrid


def find_connected_same_color(seed: Bubble, grid: BubbleGrid) -> List[Bubble]:
    """
    Find the same-colour component containing the seed.

    Args:
        seed: Newly settled grid bubble
        grid: Current grid

    Returns:
        Every bubble in the component, seed first
    """
    matches = [seed]
    visited = {id(seed)}
    to_check = deque([seed])

    while to_check:
        current = to_check.popleft()
        for neighbor in grid.neighbors_of(current):
            if id(neighbor) not in visited and neighbor.color == seed.color:
                visited.add(id(neighbor))
                matches.append(neighbor)
                to_check.append(neighbor)

    return matches


def resolve_matches(seed: Bubble, grid: BubbleGrid) -> List[Bubble]:
    """
    Pop the seed's component if it is large enough.

    Popped bubbles leave the grid and start their pop animation.

    Returns:
        The popped bubbles (empty when the component is too small)
    """
    matches = find_connected_same_color(seed, grid)
    if len(matches) < MATCH_THRESHOLD:
        return []
    for bubble in matches:
        grid.remove(bubble)
        bubble.start_pop()
    return matches


def find_floating_bubbles(grid: BubbleGrid) -> List[Bubble]:
    """
    Find grid bubbles no longer connected to the ceiling.

    Every bubble within CEILING_ANCHOR_Y of the top seeds the search, and
    the fill crosses colours.
    """
    connected_to_top = set()
    to_check = deque()

    for bubble in grid:
        if bubble.y <= CEILING_ANCHOR_Y:
            connected_to_top.add(id(bubble))
            to_check.append(bubble)

    while to_check:
        current = to_check.popleft()
        for neighbor in grid.neighbors_of(current):
            if id(neighbor) not in connected_to_top:
                connected_to_top.add(id(neighbor))
                to_check.append(neighbor)

    return [bubble for bubble in grid if id(bubble) not in connected_to_top]


def resolve_floating(grid: BubbleGrid) -> List[Bubble]:
    """Detach floating bubbles from the grid and start them falling."""
    floating = find_floating_bubbles(grid)
    for bubble in floating:
        grid.remove(bubble)
        bubble.start_falling()
    return floating
