"""
Tests for the toroidal occupancy grid.

Covers wrap-around neighbourhoods, the one-agent-per-cell rule and the
cached neighbour-count map used by distancing.
"""

import numpy as np
import pytest

from epidemic_ca.model.agent import Agent
from epidemic_ca.model.grid import (
    CellOccupiedError,
    GridError,
    GridFullError,
    GridWorld,
)
from epidemic_ca.model.status import Status


def _agent(agent_id):
    return Agent(agent_id, Status.SUSCEPTIBLE)


@pytest.fixture
def grid():
    return GridWorld(10, 10)


# ============================================================================
# TOPOLOGY
# ============================================================================

def test_dimensions(grid):
    assert grid.dimensions() == (10, 10)


def test_too_small_grid_is_rejected():
    with pytest.raises(ValueError):
        GridWorld(2, 10)


def test_neighbors_wrap_around_corner(grid):
    neighbors = grid.neighbors(0, 0)

    assert len(neighbors) == 8
    assert len(set(neighbors)) == 8
    assert (9, 9) in neighbors
    assert (9, 0) in neighbors
    assert (0, 9) in neighbors
    assert (1, 1) in neighbors
    assert (0, 0) not in neighbors


def test_wrap_maps_outside_coordinates(grid):
    assert grid.wrap(-1, 10) == (9, 0)
    assert grid.wrap(23, -12) == (3, 8)


# ============================================================================
# OCCUPANCY
# ============================================================================

def test_place_and_lookup(grid):
    a = _agent(1)
    grid.place_agent(a, 3, 4)

    assert grid.occupant_at(3, 4) is a
    assert grid.location_of(a) == (3, 4)
    assert a.position == (3, 4)
    assert grid.occupancy[4, 3] == 1
    assert not grid.is_free(3, 4)


def test_place_on_occupied_cell_raises(grid):
    grid.place_agent(_agent(1), 3, 4)
    with pytest.raises(CellOccupiedError):
        grid.place_agent(_agent(2), 3, 4)


def test_place_same_agent_twice_raises(grid):
    a = _agent(1)
    grid.place_agent(a, 3, 4)
    with pytest.raises(GridError):
        grid.place_agent(a, 5, 5)


def test_move_to_updates_both_cells(grid):
    a = _agent(1)
    grid.place_agent(a, 3, 4)
    grid.move_to(a, 4, 4)

    assert grid.is_free(3, 4)
    assert grid.occupant_at(4, 4) is a
    assert grid.location_of(a) == (4, 4)


def test_move_to_occupied_cell_raises(grid):
    a, b = _agent(1), _agent(2)
    grid.place_agent(a, 3, 4)
    grid.place_agent(b, 4, 4)

    with pytest.raises(CellOccupiedError):
        grid.move_to(a, 4, 4)
    assert grid.location_of(a) == (3, 4)


def test_move_to_own_cell_is_noop(grid):
    a = _agent(1)
    grid.place_agent(a, 3, 4)
    grid.move_to(a, 3, 4)
    assert grid.location_of(a) == (3, 4)


def test_remove_agent(grid):
    a = _agent(1)
    grid.place_agent(a, 3, 4)
    grid.remove_agent(a)

    assert grid.is_free(3, 4)
    assert a.position is None
    assert not grid.contains(a)
    with pytest.raises(GridError):
        grid.location_of(a)


def test_neighbor_agents_in_enumeration_order(grid):
    left, right = _agent(1), _agent(2)
    grid.place_agent(left, 4, 5)
    grid.place_agent(right, 6, 5)

    # x+1 column is enumerated before x-1
    assert grid.neighbor_agents(5, 5) == [right, left]


def test_free_neighbors_excludes_occupied(grid):
    grid.place_agent(_agent(1), 6, 5)
    free = grid.free_neighbors(5, 5)
    assert len(free) == 7
    assert (6, 5) not in free


# ============================================================================
# NEIGHBOUR COUNTS
# ============================================================================

def test_neighbor_count_wraps(grid):
    grid.place_agent(_agent(1), 9, 9)
    grid.place_agent(_agent(2), 0, 1)
    grid.place_agent(_agent(3), 5, 5)

    assert grid.neighbor_count(0, 0) == 2
    assert grid.neighbor_count(5, 5) == 0
    assert grid.neighbor_count(4, 4) == 1


def test_neighbor_count_map_refreshes_after_mutation(grid):
    a = _agent(1)
    grid.place_agent(a, 5, 5)
    assert grid.neighbor_count(6, 6) == 1

    grid.move_to(a, 1, 1)
    assert grid.neighbor_count(6, 6) == 0
    assert grid.neighbor_count(0, 0) == 1


def test_neighbor_count_map_matches_direct_count(grid):
    rng = np.random.default_rng(3)
    for agent_id in range(1, 31):
        grid.place_agent(_agent(agent_id), *grid.random_empty_cell(rng))

    counts = grid.neighbor_count_map()
    for y in range(grid.height):
        for x in range(grid.width):
            direct = sum(not grid.is_free(*p) for p in grid.neighbors(x, y))
            assert counts[y, x] == direct


# ============================================================================
# RANDOM PLACEMENT
# ============================================================================

def test_random_empty_cell_finds_last_free_cell():
    grid = GridWorld(3, 3)
    agent_id = 1
    for y in range(3):
        for x in range(3):
            if (x, y) != (2, 1):
                grid.place_agent(_agent(agent_id), x, y)
                agent_id += 1

    rng = np.random.default_rng(0)
    assert grid.random_empty_cell(rng, attempts=0) == (2, 1)
    assert grid.random_empty_cell(rng) == (2, 1)


def test_random_empty_cell_on_full_grid_raises():
    grid = GridWorld(3, 3)
    for i in range(9):
        grid.place_agent(_agent(i + 1), i % 3, i // 3)

    with pytest.raises(GridFullError):
        grid.random_empty_cell(np.random.default_rng(0))


def test_get_occupied_positions(grid):
    grid.place_agent(_agent(1), 1, 2)
    grid.place_agent(_agent(2), 7, 3)
    assert grid.get_occupied_positions() == {(1, 2), (7, 3)}
    assert grid.agent_count() == 2
