from collections import deque

from statemodels.increment import Action, ActionKind, IncrementState, ProcState


def _reachable(model, symmetric=False):
    key = (lambda s: s.representative()) if symmetric else (lambda s: s)
    seen = {}
    queue = deque()
    for state in model.init_states():
        if key(state) not in seen:
            seen[key(state)] = state
            queue.append(state)
    while queue:
        state = queue.popleft()
        for action in model.actions(state):
            nxt = model.next_state(state, action)
            if key(nxt) not in seen:
                seen[key(nxt)] = nxt
                queue.append(nxt)
    return list(seen.values())


def test_new_state():
    state = IncrementState.new(2)
    assert state.i == 0
    assert state.s == (ProcState(t=0, pc=1), ProcState(t=0, pc=1))
    assert state.init_states() == [state]


def test_state_space_without_symmetry():
    assert len(_reachable(IncrementState.new(2))) == 13


def test_state_space_with_symmetry():
    assert len(_reachable(IncrementState.new(2), symmetric=True)) == 8


def test_fin_is_violated_by_lost_update():
    model = IncrementState.new(2)
    fin = model.properties()[0]
    assert fin.name == "fin"
    lost = IncrementState(i=1, s=(ProcState(0, 3), ProcState(0, 3)))
    assert lost in _reachable(model)
    assert fin.holds(model, lost) is False


def test_fin_holds_for_single_thread():
    model = IncrementState.new(1)
    fin = model.properties()[0]
    assert all(fin.holds(model, s) for s in _reachable(model))


def test_actions_follow_program_counter():
    model = IncrementState.new(2)
    state = IncrementState(i=0, s=(ProcState(0, 2), ProcState(0, 1)))
    assert model.actions(state) == [Action(ActionKind.WRITE, 0), Action(ActionKind.READ, 1)]
    done = IncrementState(i=2, s=(ProcState(0, 3), ProcState(1, 3)))
    assert model.actions(done) == []


def test_read_then_write():
    model = IncrementState.new(2)
    start = IncrementState(i=4, s=(ProcState(0, 1), ProcState(0, 1)))
    after_read = model.next_state(start, Action(ActionKind.READ, 1))
    assert after_read.s[1] == ProcState(t=4, pc=2)
    assert after_read.i == start.i
    after_write = model.next_state(after_read, Action(ActionKind.WRITE, 1))
    assert after_write.i == after_read.s[1].t + 1
    assert after_write.s[1].pc == 3
    assert after_write.s[0] == start.s[0]


def test_representative_is_permutation_invariant():
    a = IncrementState(i=1, s=(ProcState(1, 2), ProcState(0, 3)))
    b = IncrementState(i=1, s=(ProcState(0, 3), ProcState(1, 2)))
    assert a.representative() == b.representative()
    assert a.representative().s == tuple(sorted(a.s))