"""Tests for node placement and edge generation."""

import itertools
import math

import pytest

from packet_mesh.topology.generators import (
    lattice_cells,
    lattice_positions,
    lattice_shape,
    nearest_neighbour_edges,
    neighbours_by_distance,
    normalize_positions,
    planar_nearest_edges,
    scatter_positions,
    segments_cross,
)
from packet_mesh.utils.rng import MeshRNG


def unordered(edges):
    return [(min(s, t), max(s, t)) for s, t in edges]


def test_segments_cross():
    assert segments_cross((0, 0), (10, 10), (0, 10), (10, 0))
    assert not segments_cross((0, 0), (10, 0), (0, 5), (10, 5))
    assert not segments_cross((0, 0), (4, 4), (6, 6), (10, 0))
    # A shared endpoint is not a crossing.
    assert not segments_cross((0, 0), (10, 10), (10, 10), (20, 0))


def test_scatter_keeps_minimum_distance():
    points = scatter_positions(1000, 1000, 10, MeshRNG(5), min_distance=60)
    assert len(points) == 10
    for a, b in itertools.combinations(points, 2):
        assert math.dist(a, b) >= 60


def test_scatter_accepts_crowded_points():
    points = scatter_positions(10, 10, 20, MeshRNG(5), min_distance=100, max_tries=3)
    assert len(points) == 20
    assert all(0 <= x <= 10 and 0 <= y <= 10 for x, y in points)


def test_normalize_fills_canvas_inside_margin():
    points = normalize_positions([(5, 5), (10, 20), (15, 10)], 800, 600, 30)
    xs = [x for x, _ in points]
    ys = [y for _, y in points]
    assert min(xs) == pytest.approx(30)
    assert max(xs) == pytest.approx(770)
    assert min(ys) == pytest.approx(30)
    assert max(ys) == pytest.approx(570)


def test_normalize_zero_span_has_no_nan():
    points = normalize_positions([(3, 3), (3, 3)], 800, 600, 30)
    assert points == [(30.0, 30.0), (30.0, 30.0)]
    assert normalize_positions([], 800, 600, 30) == []


def test_lattice_shape_follows_aspect_ratio():
    assert lattice_shape(1000, 500, 100) == (7, 14)
    assert lattice_shape(500, 500, 0) == (0, 0)
    rows, cols = lattice_shape(100, 1000, 1)
    assert rows >= 1 and cols >= 1


def test_lattice_positions_within_margin():
    shape = lattice_shape(800, 600, 48)
    cells = lattice_cells(*shape)
    points = lattice_positions(800, 600, cells, shape, MeshRNG(2), jitter=1.0, margin=30)
    assert len(points) == shape[0] * shape[1]
    assert all(30 <= x <= 770 and 30 <= y <= 570 for x, y in points)


def test_lattice_without_jitter_is_a_grid():
    cells = lattice_cells(2, 2)
    points = lattice_positions(240, 240, cells, (2, 2), MeshRNG(2), jitter=0.0, margin=20)
    assert points == [(70.0, 70.0), (170.0, 70.0), (70.0, 170.0), (170.0, 170.0)]


def test_neighbours_sorted_by_distance():
    order = neighbours_by_distance([(0, 0), (10, 0), (3, 0)])
    assert order.tolist() == [[2, 1], [2, 0], [0, 1]]


@pytest.mark.parametrize("seed", range(5))
def test_planar_edges_never_cross_or_repeat(seed):
    rng = MeshRNG(seed)
    points = scatter_positions(800, 600, 25, rng, min_distance=40)
    edges = planar_nearest_edges(points, rng, max_connections=4)

    assert edges
    keys = unordered(edges)
    assert len(keys) == len(set(keys))
    for (a, b), (c, d) in itertools.combinations(edges, 2):
        assert not segments_cross(points[a], points[b], points[c], points[d])


@pytest.mark.parametrize("seed", range(5))
def test_nearest_neighbour_edges_dedup(seed):
    rng = MeshRNG(seed)
    shape = lattice_shape(800, 600, 30)
    points = lattice_positions(800, 600, lattice_cells(*shape), shape, rng, 0.6, 30)
    edges = nearest_neighbour_edges(points, rng, min_connections=1, max_connections=3)

    keys = unordered(edges)
    assert len(keys) == len(set(keys))
    created = {}
    for source, _ in edges:
        created[source] = created.get(source, 0) + 1
    assert max(created.values()) <= 3


def test_single_point_has_no_edges():
    assert planar_nearest_edges([(1, 1)], MeshRNG(1), 4) == []
    assert nearest_neighbour_edges([(1, 1)], MeshRNG(1), 1, 2) == []
