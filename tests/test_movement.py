"""
Tests for goal-directed and policy-gated movement.
"""

import numpy as np
import pytest

from epidemic_ca.model.agent import Agent
from epidemic_ca.model.grid import GridWorld
from epidemic_ca.model.movement import (
    candidate_cells,
    choose_destination,
    compute_next_position,
    goal_anchor,
    in_curfew,
    movement_allowed,
)
from epidemic_ca.model.policy import PolicyConfig
from epidemic_ca.model.status import Goal, Status


@pytest.fixture
def grid():
    return GridWorld(10, 10)


def _place(grid, agent_id, x, y, goal=Goal.RANDOM):
    agent = Agent(agent_id, Status.SUSCEPTIBLE, goal=goal)
    grid.place_agent(agent, x, y)
    return agent


# ============================================================================
# CURFEW AND LOCKDOWN
# ============================================================================

@pytest.mark.parametrize("tick, expected", [
    (0, True), (7, True), (8, False), (12, False), (21, False),
    (22, True), (23, True), (24, True), (32, False), (46, True),
])
def test_in_curfew(tick, expected):
    assert in_curfew(tick) is expected


def test_movement_allowed():
    assert movement_allowed(PolicyConfig(), 3)
    assert not movement_allowed(PolicyConfig(lockdown=True), 12)
    assert not movement_allowed(PolicyConfig(curfew=True), 23)
    assert movement_allowed(PolicyConfig(curfew=True), 12)


def test_lockdown_keeps_agent_in_place(grid):
    agent = _place(grid, 1, 5, 5)
    policy = PolicyConfig(lockdown=True)
    rng = np.random.default_rng(0)

    for tick in range(1, 49):
        assert compute_next_position(agent, grid, policy, tick, rng) == (5, 5)


def test_curfew_only_blocks_night_hours(grid):
    agent = _place(grid, 1, 5, 5)
    policy = PolicyConfig(curfew=True)
    rng = np.random.default_rng(0)

    assert compute_next_position(agent, grid, policy, 23, rng) == (5, 5)
    assert compute_next_position(agent, grid, policy, 3, rng) == (5, 5)
    assert compute_next_position(agent, grid, policy, 12, rng) in grid.neighbors(5, 5)


def test_surrounded_agent_stays(grid):
    agent = _place(grid, 1, 5, 5)
    for i, (x, y) in enumerate(grid.neighbors(5, 5)):
        _place(grid, i + 2, x, y)

    rng = np.random.default_rng(0)
    assert compute_next_position(agent, grid, PolicyConfig(), 12, rng) == (5, 5)


# ============================================================================
# CANDIDATES
# ============================================================================

def test_goal_anchors():
    assert goal_anchor(Goal.SCHOOL, 10, 8) == (0, 0)
    assert goal_anchor(Goal.SHOPPING, 10, 8) == (9, 7)
    assert goal_anchor(Goal.HOSPITAL, 10, 8) == (5, 4)
    with pytest.raises(ValueError):
        goal_anchor(Goal.RANDOM, 10, 8)


def test_random_candidates_wrap(grid):
    candidates = candidate_cells((0, 0), Goal.RANDOM, grid)
    assert len(candidates) == 8
    assert (9, 9) in candidates


def test_school_candidates_move_towards_origin(grid):
    assert set(candidate_cells((5, 5), Goal.SCHOOL, grid)) == {(4, 5), (4, 4), (5, 4)}


def test_shopping_candidates_move_towards_far_corner(grid):
    assert set(candidate_cells((5, 5), Goal.SHOPPING, grid)) == {(6, 5), (6, 6), (5, 6)}


def test_hospital_candidates_on_one_axis(grid):
    # Same column as the hospital at (5, 5): only straight up
    assert candidate_cells((5, 2), Goal.HOSPITAL, grid) == [(5, 3)]


def test_no_candidates_at_anchor(grid):
    assert candidate_cells((0, 0), Goal.SCHOOL, grid) == []
    assert candidate_cells((5, 5), Goal.HOSPITAL, grid) == []
    assert candidate_cells((9, 9), Goal.SHOPPING, grid) == []


def test_occupied_cells_are_not_candidates(grid):
    _place(grid, 1, 4, 4)
    assert set(candidate_cells((5, 5), Goal.SCHOOL, grid)) == {(4, 5), (5, 4)}


def test_goal_directed_agent_reaches_anchor(grid):
    agent = _place(grid, 1, 7, 3, goal=Goal.SCHOOL)
    rng = np.random.default_rng(5)
    policy = PolicyConfig()

    for tick in range(12, 30):
        grid.move_to(agent, *compute_next_position(agent, grid, policy, tick, rng))
    assert grid.location_of(agent) == (0, 0)


# ============================================================================
# DESTINATION CHOICE
# ============================================================================

def test_choose_destination_picks_a_candidate(grid):
    candidates = [(1, 1), (2, 2), (3, 3)]
    rng = np.random.default_rng(1)
    seen = {choose_destination(candidates, grid, False, rng) for _ in range(200)}
    assert seen == set(candidates)


def test_choose_destination_does_not_reorder_input(grid):
    candidates = [(1, 1), (2, 2), (3, 3)]
    choose_destination(candidates, grid, False, np.random.default_rng(1))
    assert candidates == [(1, 1), (2, 2), (3, 3)]


def test_distancing_prefers_least_crowded_cells(grid):
    agent = _place(grid, 1, 5, 5)
    _place(grid, 2, 7, 5)
    policy = PolicyConfig(distancing=True)

    for seed in range(50):
        x, y = compute_next_position(agent, grid, policy, 12,
                                     np.random.default_rng(seed))
        # Column x=6 touches the second agent
        assert x in (4, 5)


def test_distancing_keeps_all_ties(grid):
    agent = _place(grid, 1, 5, 5)
    policy = PolicyConfig(distancing=True)
    seen = {
        compute_next_position(agent, grid, policy, 12, np.random.default_rng(seed))
        for seed in range(300)
    }
    assert seen == set(grid.neighbors(5, 5))
