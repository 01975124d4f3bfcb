from collections import Counter
import random

import pytest

from fsmp.components.queue_manager import QueueIndexError, QueueManager
from fsmp.components.queue_state import QueueSnapshot, RepeatMode


def make_queue(track_ids, repeat_mode=RepeatMode.NONE, rng=None):
    queue = QueueManager(rng or random.Random(42))
    queue.set_queue(track_ids)
    queue.repeat_mode = repeat_mode
    return queue


def test_new_queue_is_empty():
    queue = QueueManager()

    assert queue.count == 0
    assert queue.current_index == -1
    assert queue.current_track_id is None
    assert queue.repeat_mode is RepeatMode.NONE
    assert queue.is_shuffled is False


def test_set_queue_starts_at_first_track():
    queue = make_queue([5, 3, 9])

    assert queue.current_index == 0
    assert queue.current_track_id == 5
    assert queue.play_order == (5, 3, 9)
    assert queue.original_order == (5, 3, 9)


def test_set_queue_empty():
    queue = make_queue([1, 2])
    queue.set_queue([])

    assert queue.count == 0
    assert queue.current_index == -1
    assert queue.current_track_id is None


def test_set_queue_copies_input():
    ids = [1, 2, 3]
    queue = make_queue(ids)
    ids.append(4)

    assert queue.count == 3


def test_set_queue_keeps_duplicates_and_repeat_mode(rng):
    queue = make_queue([1, 2, 3], RepeatMode.ALL, rng)
    queue.toggle_shuffle()

    queue.set_queue([7, 7, 8])

    assert queue.play_order == (7, 7, 8)
    assert queue.is_shuffled is False
    assert queue.repeat_mode is RepeatMode.ALL


def test_clear_queue(rng):
    queue = make_queue([1, 2, 3], rng=rng)
    queue.toggle_shuffle()

    queue.clear_queue()

    assert queue.count == 0
    assert queue.current_index == -1
    assert queue.is_shuffled is False
    assert queue.original_order == ()


def test_next_track_advances():
    queue = make_queue([10, 20, 30])

    assert queue.next_track() == 20
    assert queue.current_index == 1
    assert queue.next_track() == 30
    assert queue.current_index == 2


def test_next_track_at_end_without_repeat():
    queue = make_queue([10, 20])
    queue.jump_to(1)

    assert queue.next_track() is None
    assert queue.current_index == 1


def test_next_track_at_end_wraps_with_repeat_all():
    queue = make_queue([10, 20], RepeatMode.ALL)
    queue.jump_to(1)

    assert queue.next_track() == 10
    assert queue.current_index == 0


def test_previous_track_at_start_without_repeat():
    queue = make_queue([10, 20])

    assert queue.previous_track() is None
    assert queue.current_index == 0


def test_previous_track_at_start_wraps_with_repeat_all():
    queue = make_queue([10, 20, 30], RepeatMode.ALL)

    assert queue.previous_track() == 30
    assert queue.current_index == 2


def test_previous_track_retreats():
    queue = make_queue([10, 20, 30])
    queue.jump_to(2)

    assert queue.previous_track() == 20
    assert queue.current_index == 1


@pytest.mark.parametrize("index", [0, 1, 2])
def test_repeat_one_replays_current(index):
    queue = make_queue([10, 20, 30], RepeatMode.ONE)
    queue.jump_to(index)
    current = queue.current_track_id

    assert queue.next_track() == current
    assert queue.previous_track() == current
    assert queue.current_index == index


@pytest.mark.parametrize("mode", list(RepeatMode))
def test_navigation_on_empty_queue(mode):
    queue = make_queue([], mode)

    assert queue.next_track() is None
    assert queue.previous_track() is None
    assert queue.has_next is False
    assert queue.has_previous is False
    assert queue.current_index == -1


@pytest.mark.parametrize("mode", list(RepeatMode))
@pytest.mark.parametrize("index", [0, 1, 2])
def test_has_next_and_has_previous_match_moves(mode, index):
    for move, predicate in (("next_track", "has_next"), ("previous_track", "has_previous")):
        queue = make_queue([10, 20, 30], mode)
        queue.jump_to(index)
        expected = getattr(queue, predicate)

        assert (getattr(queue, move)() is not None) == expected


def test_has_next_does_not_move():
    queue = make_queue([10, 20])

    assert queue.has_next is True
    assert queue.has_previous is False
    assert queue.current_index == 0


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_jump_to_out_of_range(index):
    queue = make_queue([10, 20, 30])

    with pytest.raises(QueueIndexError) as excinfo:
        queue.jump_to(index)

    assert isinstance(excinfo.value, IndexError)
    assert excinfo.value.index == index
    assert "index" in str(excinfo.value)
    assert queue.current_index == 0


def test_jump_to_last():
    queue = make_queue([10, 20, 30])
    queue.jump_to(queue.count - 1)

    assert queue.current_index == 2
    assert queue.current_track_id == 30


def test_jump_to_on_empty_queue():
    with pytest.raises(QueueIndexError):
        QueueManager().jump_to(0)


def test_toggle_shuffle_on_empty_queue_does_nothing():
    queue = QueueManager()
    queue.toggle_shuffle()

    assert queue.is_shuffled is False
    assert queue.current_index == -1


def test_toggle_shuffle_keeps_current_track_and_elements(rng):
    ids = list(range(1, 21))
    queue = make_queue(ids, rng=rng)
    queue.jump_to(7)

    queue.toggle_shuffle()

    assert queue.is_shuffled is True
    assert queue.current_track_id == 8
    assert queue.current_index == 0
    assert Counter(queue.play_order) == Counter(ids)
    assert queue.original_order == tuple(ids)


def test_toggle_shuffle_twice_restores_original_order(rng):
    ids = list(range(1, 21))
    queue = make_queue(ids, rng=rng)
    queue.jump_to(4)
    queue.toggle_shuffle()
    queue.next_track()
    current = queue.current_track_id

    queue.toggle_shuffle()

    assert queue.is_shuffled is False
    assert queue.play_order == tuple(ids)
    assert queue.current_track_id == current
    assert queue.current_index == ids.index(current)


def test_toggle_shuffle_with_duplicates(rng):
    ids = [1, 2, 2, 3, 2]
    queue = make_queue(ids, rng=rng)
    queue.jump_to(2)

    queue.toggle_shuffle()
    assert queue.current_track_id == 2
    assert Counter(queue.play_order) == Counter(ids)

    queue.toggle_shuffle()
    assert queue.play_order == tuple(ids)
    assert queue.current_index == 1


def test_shuffle_is_reproducible_with_seeded_rng():
    first = make_queue(list(range(30)), rng=random.Random(7))
    second = make_queue(list(range(30)), rng=random.Random(7))

    first.toggle_shuffle()
    second.toggle_shuffle()

    assert first.play_order == second.play_order
    assert first.play_order != tuple(range(30))


def test_get_state_is_independent_copy(rng):
    queue = make_queue([10, 20, 30], RepeatMode.ALL, rng)
    queue.next_track()

    state = queue.get_state()
    state.play_order.append(99)
    state.original_order.clear()
    state.current_index = 2

    assert queue.play_order == (10, 20, 30)
    assert queue.original_order == (10, 20, 30)
    assert queue.current_index == 1
    assert queue.next_track() == 30
    assert queue.next_track() == 10


def test_restore_state_clamps_high_index():
    queue = QueueManager()
    queue.restore_state(QueueSnapshot([1, 2, 3], [1, 2, 3], 99, RepeatMode.NONE, False))

    assert queue.current_index == 2
    assert queue.current_track_id == 3


def test_restore_state_clamps_negative_index():
    queue = QueueManager()
    queue.restore_state(QueueSnapshot([1, 2, 3], [3, 1, 2], -5, RepeatMode.ONE, True))

    assert queue.current_index == 0
    assert queue.play_order == (3, 1, 2)
    assert queue.repeat_mode is RepeatMode.ONE
    assert queue.is_shuffled is True


def test_restore_state_empty_snapshot():
    queue = make_queue([1, 2])
    queue.restore_state(QueueSnapshot(current_index=4))

    assert queue.count == 0
    assert queue.current_index == -1
    assert queue.current_track_id is None


def test_restore_state_copies_snapshot_lists():
    snapshot = QueueSnapshot([1, 2], [2, 1], 0, RepeatMode.NONE, True)
    queue = QueueManager()
    queue.restore_state(snapshot)

    snapshot.play_order.append(3)

    assert queue.play_order == (2, 1)


def test_round_trip_through_state(rng):
    source = make_queue(list(range(1, 11)), RepeatMode.ALL, rng)
    source.next_track()
    source.toggle_shuffle()
    source.next_track()
    source.next_track()
    source.repeat_mode = RepeatMode.ONE

    target = QueueManager()
    target.restore_state(source.get_state())

    assert target.count == source.count
    assert target.current_index == source.current_index
    assert target.current_track_id == source.current_track_id
    assert target.repeat_mode is source.repeat_mode
    assert target.is_shuffled is source.is_shuffled
    assert target.play_order == source.play_order
    assert target.get_state() == source.get_state()

    target.toggle_shuffle()
    assert target.play_order == tuple(range(1, 11))


def test_random_operations_keep_invariants():
    ops_rng = random.Random(99)
    queue = QueueManager(random.Random(5))
    for _ in range(500):
        op = ops_rng.choice(["set", "next", "prev", "jump", "shuffle", "repeat", "clear"])
        if op == "set":
            queue.set_queue([ops_rng.randint(1, 5) for _ in range(ops_rng.randint(0, 8))])
        elif op == "next":
            queue.next_track()
        elif op == "prev":
            queue.previous_track()
        elif op == "jump" and queue.count:
            queue.jump_to(ops_rng.randrange(queue.count))
        elif op == "shuffle":
            before = queue.current_track_id
            queue.toggle_shuffle()
            assert queue.current_track_id == before
        elif op == "repeat":
            queue.repeat_mode = ops_rng.choice(list(RepeatMode))
        elif op == "clear":
            queue.clear_queue()

        assert len(queue.play_order) == len(queue.original_order)
        assert Counter(queue.play_order) == Counter(queue.original_order)
        assert -1 <= queue.current_index < queue.count
        assert (queue.current_index == -1) == (queue.count == 0)
        if not queue.is_shuffled:
            assert queue.play_order == queue.original_order


def test_queue_change_callback_is_called():
    queue = QueueManager()
    calls = []
    queue.set_on_queue_change_callback(lambda q: calls.append(q.current_index))

    queue.set_queue([1, 2])
    queue.next_track()
    queue.next_track()  # at the end, nothing changes

    assert calls == [0, 1]


def test_failing_queue_change_callback_is_ignored():
    queue = QueueManager()

    def broken(_queue):
        raise RuntimeError("boom")

    queue.set_on_queue_change_callback(broken)
    queue.set_queue([1, 2])

    assert queue.next_track() == 2
