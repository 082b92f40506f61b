from datetime import datetime, timedelta

from autodump.runtime.budget import DumpBudget, day_key

NOW = datetime(2024, 5, 1, 9, 30, 0)


def test_budget_admits_one_more_than_max():
    budget = DumpBudget(3, now=NOW)
    results = [budget.try_reserve(NOW + timedelta(minutes=i)) for i in range(6)]
    assert results == [True, True, True, True, False, False]
    assert budget.dumps_today == 4


def test_denied_reservation_does_not_mutate():
    budget = DumpBudget(0, now=NOW)
    assert budget.try_reserve(NOW)
    assert not budget.try_reserve(NOW)
    assert budget.dumps_today == 1


def test_budget_resets_on_day_change():
    budget = DumpBudget(1, now=NOW)
    assert budget.try_reserve(NOW)
    assert budget.try_reserve(NOW)
    assert not budget.try_reserve(NOW)

    tomorrow = NOW + timedelta(days=1)
    assert budget.try_reserve(tomorrow)
    assert budget.dumps_today == 1
    assert budget.day_key == "20240502"


def test_strict_budget_stops_at_max():
    budget = DumpBudget(2, strict=True, now=NOW)
    assert [budget.try_reserve(NOW) for _ in range(3)] == [True, True, False]
    assert budget.exhausted(NOW)
    assert not budget.exhausted(NOW + timedelta(days=1))


def test_release_refunds_reservation():
    budget = DumpBudget(1, strict=True, now=NOW)
    assert budget.try_reserve(NOW)
    budget.release()
    assert budget.dumps_today == 0
    assert budget.try_reserve(NOW)
    budget.release()
    budget.release()
    assert budget.dumps_today == 0


def test_day_key_format():
    assert day_key(datetime(2023, 12, 31, 23, 59, 59)) == "20231231"
