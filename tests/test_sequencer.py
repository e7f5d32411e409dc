import math
import random

import pytest

from fieldtrack.models.domain import Coordinate, Task
from fieldtrack.services.geospatial import haversine_km
from fieldtrack.services.routing.geocoder import GeocodeResolver
from fieldtrack.services.routing.sequencer import RouteSequencer, sequence_by_pincode

ORIGIN = Coordinate(12.9716, 77.5946)


def _task(tid: str, **fields) -> Task:
    return Task(id=tid, title=f"Case {tid}", **fields)


@pytest.fixture
def sequencer(pincodes) -> RouteSequencer:
    return RouteSequencer(GeocodeResolver(pincodes))


def _mixed_tasks(seed: int) -> list[Task]:
    rng = random.Random(seed)
    tasks = []
    for index in range(25):
        roll = rng.random()
        if roll < 0.4:
            tasks.append(
                _task(
                    f"T{index}",
                    latitude=round(12.8 + rng.random() * 0.4, 5),
                    longitude=round(77.4 + rng.random() * 0.4, 5),
                )
            )
        elif roll < 0.6:
            tasks.append(_task(f"T{index}", pincode=rng.choice(["560001", "560002", "560100"])))
        elif roll < 0.75:
            lat = round(12.8 + rng.random() * 0.4, 4)
            lon = round(77.4 + rng.random() * 0.4, 4)
            tasks.append(_task(f"T{index}", map_url=f"https://maps.google.com/@{lat},{lon},15z"))
        else:
            tasks.append(_task(f"T{index}", pincode=rng.choice(["999999", None, ""])))
    return tasks


def test_nearest_pincode_task_goes_first(sequencer):
    t1 = _task("T1", pincode="560001")
    t2 = _task("T2", pincode="560100")

    route = sequencer.plan([t2, t1], ORIGIN)

    assert route.tasks == [t1, t2]
    assert route.stops[0].distance_from_prev_km == 0.0
    assert route.stops[1].distance_from_prev_km == pytest.approx(
        haversine_km(12.9716, 77.5946, 12.845, 77.661)
    )


def test_unknown_pincode_lands_in_unresolved_tail(sequencer):
    unknown = _task("T9", pincode="999999")
    known = _task("T1", pincode="560002")

    route = sequencer.plan([unknown, known], ORIGIN)

    assert route.tasks == [known, unknown]
    assert route.unresolved == [unknown]


def test_equal_distances_keep_input_order(sequencer):
    first = _task("A", latitude=13.0, longitude=77.6)
    second = _task("B", latitude=13.0, longitude=77.6)
    third = _task("C", latitude=13.0, longitude=77.6)

    assert sequencer.sequence([first, second, third], ORIGIN) == [first, second, third]
    assert sequencer.sequence([third, first, second], ORIGIN) == [third, first, second]


def test_empty_input_returns_empty_route(sequencer):
    route = sequencer.plan([], ORIGIN)

    assert route.tasks == []
    assert route.total_distance_km == 0.0


def test_all_unresolved_keeps_input_order(sequencer):
    tasks = [_task("X1"), _task("X2", pincode="999999"), _task("X3", pincode="")]

    assert sequencer.sequence(tasks, ORIGIN) == tasks


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_sequence_is_a_permutation_with_resolved_first(sequencer, seed):
    tasks = _mixed_tasks(seed)
    resolver = sequencer.resolver

    ordered = sequencer.sequence(tasks, ORIGIN)

    assert len(ordered) == len(tasks)
    assert sorted(id(task) for task in ordered) == sorted(id(task) for task in tasks)

    flags = [resolver.resolve(task) is not None for task in ordered]
    boundary = flags.index(False) if False in flags else len(flags)
    assert all(flags[:boundary])
    assert not any(flags[boundary:])

    expected_unresolved = [task for task in tasks if resolver.resolve(task) is None]
    assert ordered[boundary:] == expected_unresolved


@pytest.mark.parametrize("seed", [3, 11, 99])
def test_each_step_picks_the_closest_remaining_task(sequencer, seed):
    tasks = _mixed_tasks(seed)
    route = sequencer.plan(tasks, ORIGIN)

    current = ORIGIN
    remaining = [stop.coordinate for stop in route.stops]
    for stop in route.stops:
        chosen = haversine_km(current.latitude, current.longitude, stop.coordinate.latitude, stop.coordinate.longitude)
        for other in remaining:
            candidate = haversine_km(current.latitude, current.longitude, other.latitude, other.longitude)
            assert chosen <= candidate
        assert stop.distance_from_prev_km == pytest.approx(chosen)
        remaining.remove(stop.coordinate)
        current = stop.coordinate


def test_total_distance_sums_legs(sequencer):
    tasks = [_task("T1", pincode="560100"), _task("T2", latitude=13.05, longitude=77.62)]

    route = sequencer.plan(tasks, ORIGIN)

    assert route.total_distance_km == pytest.approx(
        sum(stop.distance_from_prev_km for stop in route.stops)
    )
    assert math.isfinite(route.total_distance_km)


def test_plan_does_not_mutate_tasks_or_input_list(sequencer):
    tasks = [_task("T1", pincode="560100", latitude="", longitude=None), _task("T2", pincode="560001")]
    snapshot = [(task.id, task.pincode, task.latitude, task.longitude) for task in tasks]
    original_order = list(tasks)

    sequencer.plan(tasks, ORIGIN)

    assert tasks == original_order
    assert [(task.id, task.pincode, task.latitude, task.longitude) for task in tasks] == snapshot


def test_sequence_by_pincode_groups_and_puts_missing_last():
    a = _task("A", pincode="560100")
    b = _task("B")
    c = _task("C", pincode="560001")
    d = _task("D", pincode="560100")
    e = _task("E", pincode="  ")
    f = _task("F", pincode="560001")

    ordered = sequence_by_pincode([a, b, c, d, e, f])

    assert [task.id for task in ordered] == ["C", "F", "A", "D", "B", "E"]


def test_sequence_by_pincode_leaves_input_untouched():
    tasks = [_task("A", pincode="560002"), _task("B", pincode="560001")]

    ordered = sequence_by_pincode(tasks)

    assert [task.id for task in tasks] == ["A", "B"]
    assert [task.id for task in ordered] == ["B", "A"]
