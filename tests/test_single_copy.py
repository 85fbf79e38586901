from statemodels.actor import Id, Out, Send, is_no_op
from statemodels.register import DEFAULT_VALUE, Get, GetOk, Internal, Put, PutOk
from statemodels.single_copy import SingleCopyActor


def deliver(actor, id, state, src, msg):
    out = Out()
    new_state = actor.on_msg(id, state, src, msg, out)
    return new_state, list(out)


def test_starts_with_default_value_and_no_commands():
    out = Out()
    state = SingleCopyActor().on_start(Id(0), out)
    assert state == "\u0000"
    assert len(out) == 0


def test_put_stores_value_and_acknowledges():
    new_state, commands = deliver(SingleCopyActor(), Id(0), DEFAULT_VALUE, Id(2), Put(2, "B"))
    assert new_state == "B"
    assert commands == [Send(Id(2), PutOk(2))]


def test_get_replies_with_current_value_without_change():
    new_state, commands = deliver(SingleCopyActor(), Id(0), "B", Id(2), Get(4))
    assert new_state is None
    assert commands == [Send(Id(2), GetOk(4, "B"))]


def test_other_messages_are_ignored():
    actor = SingleCopyActor()
    for msg in (PutOk(1), GetOk(1, "A"), Internal(Get(1))):
        out = Out()
        new_state = actor.on_msg(Id(0), "A", Id(1), msg, out)
        assert is_no_op(new_state, out)


def test_worked_trace_reads_back_written_value():
    actor = SingleCopyActor()
    server, client = Id(0), Id(2)
    state = actor.on_start(server, Out())
    state, commands = deliver(actor, server, state, client, Put(2, "B"))
    assert commands == [Send(client, PutOk(2))]
    changed, commands = deliver(actor, server, state, client, Get(4))
    assert changed is None
    assert commands == [Send(client, GetOk(4, "B"))]


def test_two_independent_servers_can_disagree():
    actor = SingleCopyActor()
    written = actor.on_msg(Id(1), DEFAULT_VALUE, Id(3), Put(3, "B"), Out())
    _, commands = deliver(actor, Id(0), DEFAULT_VALUE, Id(3), Get(6))
    assert written == "B"
    assert commands == [Send(Id(3), GetOk(6, "\u0000"))]