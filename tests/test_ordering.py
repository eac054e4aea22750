from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from todo_client.models import Priority, TaskFilter
from todo_client.ordering import filter_tasks, is_past_due, order

from .fakes import make_task, utc


def ids(tasks):
    return [t.id for t in tasks]


class TestOrderScenarios:
    def test_due_dates_order_within_priority_and_beat_lower_priority(self):
        tasks = [
            make_task("feb", priority=Priority.HIGH, due=utc(2024, 2, 1)),
            make_task("jan", priority=Priority.HIGH, due=utc(2024, 1, 1)),
            make_task("med", priority=Priority.MEDIUM),
        ]
        assert ids(order(tasks)) == ["jan", "feb", "med"]

    def test_incomplete_precedes_completed(self):
        tasks = [
            make_task("done", completed=True),
            make_task("open", completed=False),
        ]
        assert ids(order(tasks)) == ["open", "done"]

    def test_priority_beats_completion_and_dates(self):
        tasks = [
            make_task("low-open-early", priority=Priority.LOW, due=utc(2020, 1, 1)),
            make_task("high-done-undated", priority=Priority.HIGH, completed=True),
            make_task("med-open", priority=Priority.MEDIUM, due=utc(2030, 1, 1)),
        ]
        assert ids(order(tasks)) == ["high-done-undated", "med-open", "low-open-early"]

    def test_dated_before_undated_in_same_tier(self):
        tasks = [
            make_task("undated"),
            make_task("dated", due=utc(2099, 12, 31)),
        ]
        assert ids(order(tasks)) == ["dated", "undated"]

    def test_time_of_day_is_compared(self):
        tasks = [
            make_task("evening", due=utc(2024, 3, 1, 18)),
            make_task("morning", due=utc(2024, 3, 1, 9)),
        ]
        assert ids(order(tasks)) == ["morning", "evening"]

    def test_offsets_compare_as_instants(self):
        plus_two = timezone(timedelta(hours=2))
        tasks = [
            # 10:00 UTC
            make_task("utc", due=utc(2024, 3, 1, 10)),
            # 09:00 UTC
            make_task("cest", due=datetime(2024, 3, 1, 11, tzinfo=plus_two)),
        ]
        assert ids(order(tasks)) == ["cest", "utc"]

    def test_microseconds_apart_at_far_dates(self):
        end = utc(9999, 12, 31, 23, 59)
        tasks = [
            make_task("later", due=end + timedelta(microseconds=1)),
            make_task("earlier", due=end),
        ]
        assert ids(order(tasks)) == ["earlier", "later"]

    def test_earliest_representable_due_date_still_before_undated(self):
        tasks = [
            make_task("undated"),
            make_task("dated", due=datetime.min.replace(tzinfo=timezone.utc)),
        ]
        assert ids(order(tasks)) == ["dated", "undated"]

    def test_full_ties_keep_input_order(self):
        same = utc(2024, 5, 5)
        tasks = [make_task(str(i), due=same) for i in range(5)]
        assert ids(order(tasks)) == ["0", "1", "2", "3", "4"]
        assert ids(order(reversed(tasks))) == ["4", "3", "2", "1", "0"]

    def test_empty_input(self):
        assert order([]) == []

    def test_does_not_mutate_input(self):
        tasks = [make_task("b", priority=Priority.LOW), make_task("a", priority=Priority.HIGH)]
        snapshot = list(tasks)
        order(tasks)
        assert tasks == snapshot


def _random_tasks(seed: int, n: int = 40):
    rng = random.Random(seed)
    base = utc(2024, 1, 1)
    out = []
    for i in range(n):
        due = base + timedelta(hours=rng.randrange(0, 72)) if rng.random() < 0.6 else None
        out.append(
            make_task(
                str(i),
                priority=rng.choice(list(Priority)),
                completed=rng.random() < 0.4,
                due=due,
            )
        )
    return out


class TestOrderProperties:
    def test_idempotent(self):
        for seed in range(10):
            once = order(_random_tasks(seed))
            assert order(once) == once

    def test_tiers_hold(self):
        for seed in range(10):
            ordered = order(_random_tasks(seed))
            for a, b in zip(ordered, ordered[1:]):
                assert a.priority.weight >= b.priority.weight
                if a.priority is b.priority:
                    # incomplete before completed
                    assert not (a.completed and not b.completed)
                    if a.completed == b.completed:
                        # dated before undated, dated ascending
                        assert not (a.due_date is None and b.due_date is not None)
                        if a.due_date is not None and b.due_date is not None:
                            assert a.due_date <= b.due_date

    def test_permutation_independent_up_to_ties(self):
        tasks = _random_tasks(3)
        shuffled = list(tasks)
        random.Random(99).shuffle(shuffled)
        keys = [(t.priority, t.completed, t.due_date) for t in order(tasks)]
        assert keys == [(t.priority, t.completed, t.due_date) for t in order(shuffled)]


class TestFilterAndPastDue:
    def test_filter_views(self):
        tasks = [make_task("a"), make_task("b", completed=True), make_task("c")]
        assert ids(filter_tasks(tasks, TaskFilter.ALL)) == ["a", "b", "c"]
        assert ids(filter_tasks(tasks, TaskFilter.COMPLETED)) == ["b"]
        assert ids(filter_tasks(tasks, TaskFilter.INCOMPLETE)) == ["a", "c"]
        # plain strings are accepted too
        assert ids(filter_tasks(tasks, "completed")) == ["b"]

    def test_is_past_due(self):
        now = utc(2024, 6, 1, 12)
        assert is_past_due(make_task("x", due=utc(2024, 6, 1, 11)), now)
        assert not is_past_due(make_task("y", due=utc(2024, 6, 1, 13)), now)
        assert not is_past_due(make_task("z"), now)

    def test_is_past_due_defaults_to_current_time(self):
        assert is_past_due(make_task("old", due=utc(2000, 1, 1)))
        assert not is_past_due(make_task("future", due=utc(2999, 1, 1)))
