"""Graph builders for the packet network.

This module provides node placement (random scatter with minimum spacing,
jittered lattice) and edge generation (planar nearest neighbour, k-nearest
neighbour) strategies. Positions are lists of (x, y) tuples and edges are
lists of (source, target) index pairs into those lists.
"""

import math
from typing import List, Optional, Set, Tuple

import numpy as np

from packet_mesh.utils.rng import MeshRNG

Point = Tuple[float, float]
Cell = Tuple[int, int]


def scatter_positions(
    width: float,
    height: float,
    count: int,
    rng: MeshRNG,
    min_distance: float,
    max_tries: int = 100,
) -> List[Point]:
    """Place points uniformly at random with a minimum spacing.

    A candidate closer than ``min_distance`` to a placed point is rejected and
    resampled. Once ``max_tries`` candidates have been rejected the last one
    is kept anyway, so crowded canvases still get every point.

    Args:
        width: Canvas width.
        height: Canvas height.
        count: Number of points to place.
        rng: Random number generator.
        min_distance: Minimum distance between points.
        max_tries: Candidates sampled per point.

    Returns:
        The placed points.
    """
    points: List[Point] = []
    min_distance_sq = min_distance * min_distance
    for _ in range(count):
        for _ in range(max(1, max_tries)):
            x = rng.random() * width
            y = rng.random() * height
            if all(
                (x - px) ** 2 + (y - py) ** 2 >= min_distance_sq for px, py in points
            ):
                break
        points.append((x, y))
    return points


def normalize_positions(
    points: List[Point], width: float, height: float, margin: float
) -> List[Point]:
    """Stretch points so that they fill the canvas inside a margin.

    The aspect ratio is not preserved. An axis along which every point has
    the same coordinate is treated as having a span of one.

    Args:
        points: Points to rescale.
        width: Canvas width.
        height: Canvas height.
        margin: Free border around the canvas.

    Returns:
        The rescaled points.
    """
    if not points:
        return []
    coords = np.asarray(points, dtype=float)
    low = coords.min(axis=0)
    span = coords.max(axis=0) - low
    span[span <= 0] = 1.0
    usable = np.array([max(width - 2 * margin, 0.0), max(height - 2 * margin, 0.0)])
    offset = np.array([min(margin, width / 2), min(margin, height / 2)])
    scaled = offset + (coords - low) / span * usable
    return [(float(x), float(y)) for x, y in scaled]


def lattice_shape(width: float, height: float, count: int) -> Tuple[int, int]:
    """Get a (rows, columns) grid roughly holding ``count`` cells.

    Args:
        width: Canvas width.
        height: Canvas height.
        count: Desired number of cells.

    Returns:
        Number of rows and columns.
    """
    if count <= 0:
        return 0, 0
    aspect = width / height if height > 0 else 1.0
    cols = max(1, round(math.sqrt(count * aspect)))
    rows = max(1, round(count / cols))
    return rows, cols


def lattice_cells(rows: int, cols: int) -> List[Cell]:
    return [(row, col) for row in range(rows) for col in range(cols)]


def lattice_positions(
    width: float,
    height: float,
    cells: List[Cell],
    shape: Tuple[int, int],
    rng: MeshRNG,
    jitter: float,
    margin: float,
) -> List[Point]:
    """Place one point per grid cell with random jitter.

    Args:
        width: Canvas width.
        height: Canvas height.
        cells: (row, column) of each point.
        shape: Number of rows and columns of the grid.
        rng: Random number generator.
        jitter: Maximum deviation from the cell centre, as a fraction of half
            the cell size.
        margin: Free border around the canvas.

    Returns:
        The placed points, in the order of ``cells``.
    """
    rows, cols = shape
    if not cells or rows <= 0 or cols <= 0:
        return []
    x_low, x_high = _margin_bounds(width, margin)
    y_low, y_high = _margin_bounds(height, margin)
    cell_w = (x_high - x_low) / cols
    cell_h = (y_high - y_low) / rows

    points: List[Point] = []
    for row, col in cells:
        cx = x_low + (col + 0.5) * cell_w
        cy = y_low + (row + 0.5) * cell_h
        cx += rng.signed(2.0) * jitter * cell_w / 2
        cy += rng.signed(2.0) * jitter * cell_h / 2
        points.append(
            (float(np.clip(cx, x_low, x_high)), float(np.clip(cy, y_low, y_high)))
        )
    return points


def _margin_bounds(extent: float, margin: float) -> Tuple[float, float]:
    low = min(margin, extent / 2)
    return low, max(extent - margin, low)


def segments_cross(a: Point, b: Point, c: Point, d: Point) -> bool:
    """Check whether segment ab strictly crosses segment cd.

    Segments sharing an endpoint never cross.

    Args:
        a: First endpoint of the first segment.
        b: Second endpoint of the first segment.
        c: First endpoint of the second segment.
        d: Second endpoint of the second segment.

    Returns:
        True if the segments cross.
    """
    if a == c or a == d or b == c or b == d:
        return False

    def ccw(p: Point, q: Point, r: Point) -> bool:
        return (r[1] - p[1]) * (q[0] - p[0]) > (q[1] - p[1]) * (r[0] - p[0])

    return ccw(a, c, d) != ccw(b, c, d) and ccw(a, b, c) != ccw(a, b, d)


def neighbours_by_distance(points: List[Point]) -> np.ndarray:
    """Get, for every point, the other points sorted by ascending distance.

    Args:
        points: The points.

    Returns:
        An (n, n - 1) array of point indices.
    """
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    diff = coords[:, None, :] - coords[None, :, :]
    dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
    np.fill_diagonal(dist_sq, np.inf)
    order = np.argsort(dist_sq, axis=1, kind="stable")
    return order[:, :-1]


def planar_nearest_edges(
    points: List[Point], rng: MeshRNG, max_connections: int
) -> List[Tuple[int, int]]:
    """Connect points to their nearest neighbours without crossing edges.

    Each point draws a cap in [1, max_connections] and walks its neighbours
    from nearest to furthest, skipping pairs that are already connected or
    whose segment would cross an existing edge.

    Args:
        points: Point positions.
        rng: Random number generator.
        max_connections: Maximum edges a point creates.

    Returns:
        Edges as (source, target) index pairs.
    """
    edges: List[Tuple[int, int]] = []
    if len(points) < 2:
        return edges
    connected: Set[Tuple[int, int]] = set()
    order = neighbours_by_distance(points)

    for i in range(len(points)):
        cap = rng.randint(1, max(1, max_connections))
        made = 0
        for j in order[i]:
            if made >= cap:
                break
            j = int(j)
            key = (min(i, j), max(i, j))
            if key in connected:
                continue
            if any(
                segments_cross(points[i], points[j], points[s], points[t])
                for s, t in edges
            ):
                continue
            edges.append((i, j))
            connected.add(key)
            made += 1
    return edges


def nearest_neighbour_edges(
    points: List[Point],
    rng: MeshRNG,
    min_connections: int,
    max_connections: int,
) -> List[Tuple[int, int]]:
    """Connect points to their k nearest neighbours.

    Each point draws k in [min_connections, max_connections] and connects to
    its nearest neighbours that are not yet connected to it in either
    direction.

    Args:
        points: Point positions.
        rng: Random number generator.
        min_connections: Minimum edges a point tries to create.
        max_connections: Maximum edges a point tries to create.

    Returns:
        Edges as (source, target) index pairs.
    """
    edges: List[Tuple[int, int]] = []
    if len(points) < 2:
        return edges
    connected: Set[Tuple[int, int]] = set()
    order = neighbours_by_distance(points)

    for i in range(len(points)):
        cap = rng.randint(min_connections, max(min_connections, max_connections))
        made = 0
        for j in order[i]:
            if made >= cap:
                break
            j = int(j)
            key = (min(i, j), max(i, j))
            if key in connected:
                continue
            edges.append((i, j))
            connected.add(key)
            made += 1
    return edges


def relayout_lattice(
    cells: List[Optional[Cell]],
    shape: Tuple[int, int],
    width: float,
    height: float,
    rng: MeshRNG,
    jitter: float,
    margin: float,
) -> List[Point]:
    """Lay lattice nodes out again on the same grid for a new canvas.

    Args:
        cells: Grid cell of each node.
        shape: Number of rows and columns of the grid.
        width: New canvas width.
        height: New canvas height.
        rng: Random number generator for fresh jitter.
        jitter: Jitter factor.
        margin: Free border around the canvas.

    Returns:
        The new points, in the order of ``cells``.
    """
    known = [cell if cell is not None else (0, 0) for cell in cells]
    return lattice_positions(width, height, known, shape, rng, jitter, margin)
