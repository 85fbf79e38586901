from collections import deque

import pytest

from statemodels.properties import Expectation
from statemodels.twophase import (
    Action,
    ActionKind,
    Message,
    MessageKind,
    RmState,
    TmState,
    TwoPhaseState,
    TwoPhaseSys,
)


def _reachable(model, symmetric=False):
    key = (lambda s: s.representative()) if symmetric else (lambda s: s)
    seen = {}
    queue = deque()
    for state in model.init_states():
        k = key(state)
        if k not in seen:
            seen[k] = state
            queue.append(state)
    while queue:
        state = queue.popleft()
        for action in model.actions(state):
            nxt = model.next_state(state, action)
            k = key(nxt)
            if k not in seen:
                seen[k] = nxt
                queue.append(nxt)
    return list(seen.values())


def _assert_properties(model, states):
    for prop in model.properties():
        results = [prop.holds(model, s) for s in states]
        if prop.expectation is Expectation.ALWAYS:
            assert all(results), prop.name
        else:
            assert any(results), prop.name


def test_three_rms_state_count():
    model = TwoPhaseSys(range(3))
    states = _reachable(model)
    assert len(states) == 288
    _assert_properties(model, states)


def test_five_rms_state_count():
    model = TwoPhaseSys(range(5))
    states = _reachable(model)
    assert len(states) == 8_832
    _assert_properties(model, states)


def test_symmetry_reduces_and_keeps_properties():
    model = TwoPhaseSys(range(5))
    states = _reachable(model, symmetric=True)
    assert len(states) < 8_832
    _assert_properties(model, states)


def test_initial_state():
    (init,) = TwoPhaseSys(range(2)).init_states()
    assert init.rm_state == (RmState.WORKING, RmState.WORKING)
    assert init.tm_state is TmState.INIT
    assert init.tm_prepared == (False, False)
    assert init.msgs == frozenset()


def test_initial_actions():
    model = TwoPhaseSys(range(2))
    (init,) = model.init_states()
    assert model.actions(init) == [
        Action(ActionKind.TM_ABORT),
        Action(ActionKind.RM_PREPARE, 0),
        Action(ActionKind.RM_CHOOSE_TO_ABORT, 0),
        Action(ActionKind.RM_PREPARE, 1),
        Action(ActionKind.RM_CHOOSE_TO_ABORT, 1),
    ]


def test_commit_path():
    model = TwoPhaseSys(range(1))
    (state,) = model.init_states()
    state = model.next_state(state, Action(ActionKind.RM_PREPARE, 0))
    assert Message(MessageKind.PREPARED, 0) in state.msgs
    state = model.next_state(state, Action(ActionKind.TM_RCV_PREPARED, 0))
    assert Action(ActionKind.TM_COMMIT) in model.actions(state)
    state = model.next_state(state, Action(ActionKind.TM_COMMIT))
    state = model.next_state(state, Action(ActionKind.RM_RCV_COMMIT_MSG, 0))
    assert state.tm_state is TmState.COMMITTED
    assert state.rm_state == (RmState.COMMITTED,)


def test_next_state_does_not_mutate():
    model = TwoPhaseSys(range(2))
    (init,) = model.init_states()
    model.next_state(init, Action(ActionKind.TM_ABORT))
    assert init.tm_state is TmState.INIT
    assert init.msgs == frozenset()


def test_representative_renumbers_rms():
    state = TwoPhaseState(
        rm_state=(RmState.COMMITTED, RmState.WORKING, RmState.PREPARED),
        tm_state=TmState.INIT,
        tm_prepared=(False, False, True),
        msgs=frozenset({Message(MessageKind.PREPARED, 2), Message(MessageKind.COMMIT)}),
    )
    rep = state.representative()
    assert rep.rm_state == (RmState.WORKING, RmState.PREPARED, RmState.COMMITTED)
    assert rep.tm_prepared == (False, True, False)
    assert rep.msgs == frozenset({Message(MessageKind.PREPARED, 1), Message(MessageKind.COMMIT)})
    assert rep.representative() == rep


def test_consistent_property_detects_disagreement():
    model = TwoPhaseSys(range(2))
    consistent = next(p for p in model.properties() if p.name == "consistent")
    bad = TwoPhaseState(
        rm_state=(RmState.ABORTED, RmState.COMMITTED),
        tm_state=TmState.COMMITTED,
        tm_prepared=(True, True),
        msgs=frozenset(),
    )
    assert consistent.holds(model, bad) is False


def test_bad_rm_raises():
    model = TwoPhaseSys(range(2))
    (init,) = model.init_states()
    with pytest.raises(IndexError):
        model.next_state(init, Action(ActionKind.RM_PREPARE, 5))