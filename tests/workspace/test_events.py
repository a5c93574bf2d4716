"""Unit tests for StateChannel."""

from __future__ import annotations

from tabspace.workspace.events import StateChannel


def test_subscribe_replays_current_value() -> None:
    channel: StateChannel[int] = StateChannel("counter", 0)
    channel.publish(3)
    seen: list[int] = []

    channel.subscribe(seen.append)

    assert seen == [3]


def test_subscribe_without_replay() -> None:
    channel: StateChannel[int] = StateChannel("counter", 0)
    seen: list[int] = []
    channel.subscribe(seen.append, replay=False)
    channel.publish(1)
    assert seen == [1]
    assert channel.value == 1


def test_unsubscribe() -> None:
    channel: StateChannel[int] = StateChannel("counter", 0)
    seen: list[int] = []
    unsubscribe = channel.subscribe(seen.append, replay=False)

    unsubscribe()
    unsubscribe()
    channel.publish(1)

    assert seen == []
    assert len(channel) == 0


def test_failing_listener_does_not_block_others() -> None:
    channel: StateChannel[int] = StateChannel("counter", 0)
    seen: list[int] = []

    def broken(_: int) -> None:
        raise RuntimeError("boom")

    channel.subscribe(broken, replay=False)
    channel.subscribe(seen.append, replay=False)
    channel.publish(5)

    assert seen == [5]


def test_listener_may_unsubscribe_during_publish() -> None:
    channel: StateChannel[int] = StateChannel("counter", 0)
    seen: list[int] = []
    unsubscribe = None

    def once(value: int) -> None:
        seen.append(value)
        assert unsubscribe is not None
        unsubscribe()

    unsubscribe = channel.subscribe(once, replay=False)
    channel.publish(1)
    channel.publish(2)

    assert seen == [1]
