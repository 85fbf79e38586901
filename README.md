# statemodels

Building blocks for describing concurrent and distributed systems as
explorable state spaces, together with ready-made models of well-known
protocols. The package has no dependencies beyond the standard library.

## What is inside

- `statemodels.actor` – the actor vocabulary: `Id` (an actor's index, with
  `Id.vec_from` to build a list of ids), the commands an actor may emit
  (`Send`, `SetTimer`, `CancelTimer`), the `Out` collector that gathers
  them, the `Actor` base class with `on_start`, `on_msg` and `on_timeout`
  hooks, and `ScriptedActor`, which sends a fixed series of
  `(destination, message)` pairs, one per delivered message. Helpers:
  `majority`, `peer_ids`, `is_no_op`.
- `statemodels.properties` – `Property` and `Expectation`: named
  conditions over `(model, state)` expected to hold *always*, *sometimes*
  or *eventually*. `Property.holds(model, state)` evaluates one.
- `statemodels.twophase` – two phase commit between a transaction manager
  and the resource managers in a `range` (`TwoPhaseSys`), with properties
  "abort agreement", "commit agreement" and "consistent".
- `statemodels.increment` – threads incrementing a shared counter without a
  lock (`IncrementState`); the "fin" property can be violated.
- `statemodels.increment_lock` – the same counter guarded by a lock
  (`LockState`), with "fin" and "mutex" properties.
- `statemodels.register` – the register messages `Put`, `Get`, `PutOk`,
  `GetOk`, the `Internal` wrapper for server-to-server traffic, and
  `DEFAULT_VALUE` (`"\0"`), the value of an unwritten register.
- `statemodels.single_copy` – `SingleCopyActor`, a server holding one
  unreplicated register value.
- `statemodels.abd` – `AbdActor`, a quorum-replicated linearizable register
  (a query phase, `Phase1`, then a record phase, `Phase2`), with its
  messages `Query`, `AckQuery`, `Record`, `AckRecord` and state `AbdState`.
- `statemodels.paxos` – `PaxosActor`, single decree Paxos serving the
  register messages, with `Prepare`, `Prepared`, `Accept`, `Accepted`,
  `Decided` and `PaxosState`.

## Actors

An actor's handlers return its next state, or `None` when the state is
unchanged, and record commands in an `Out`:

```python
from statemodels.actor import Id, Out, majority, peer_ids

ids = Id.vec_from(range(3))
peers = list(peer_ids(ids[1], ids))   # [Id(0), Id(2)]

out = Out()
out.broadcast(peers, "hello")
assert len(out) == 2

assert majority(5) == 3
```

Subclass `Actor` and implement `on_start` (required) plus `on_msg` and
`on_timeout` as needed; both of those default to ignoring the event.
`is_no_op(new_state, out)` tells whether a handler changed nothing and
emitted nothing.

The register servers are driven the same way:

```python
from statemodels.actor import Id, Out
from statemodels.register import Put, PutOk
from statemodels.single_copy import SingleCopyActor

server = SingleCopyActor()
out = Out()
state = server.on_start(Id(0), out)
state = server.on_msg(Id(0), state, Id(1), Put(1, "X"), out)
assert state == "X"
assert list(out)[0].msg == PutOk(1)
```

## Models

`TwoPhaseSys`, `IncrementState` and `LockState` each offer
`init_states()`, `actions(state)`, `next_state(last_state, action)` and
`properties()`. States are immutable and hashable, so a reachable state
space can be walked with a set:

```python
from statemodels.increment import IncrementState

model = IncrementState.new(2)
seen, frontier = set(), list(model.init_states())
while frontier:
    state = frontier.pop()
    if state not in seen:
        seen.add(state)
        frontier.extend(model.next_state(state, a) for a in model.actions(state))

assert len(seen) == 13
fin = model.properties()[0]
assert not all(fin.holds(model, s) for s in seen)
assert len({s.representative() for s in seen}) == 8
```

`representative()` on `TwoPhaseState`, `IncrementState` and `LockState`
reorders interchangeable participants so that symmetric states collapse
into one.

## What the package does not do

There is no model checker here: no breadth- or depth-first search, no
tracking of property discoveries or counterexample paths, and no model
that wires actors and a network together. Actors are not run over real
sockets, and the package has no command-line program or web explorer. The
models and actors supply the transitions and properties; walking the state
space is left to the caller, as in the example above.

## Running the tests

Install the `test` extra and run `pytest` from the project root.