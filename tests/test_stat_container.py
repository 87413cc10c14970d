import pytest

from matchengine.stat_container import StatContainer
from schema import StatKey


def test_average_matches_arithmetic_mean() -> None:
    values = [12, 7, 19, 3, 22, 8, 15, 10, 0, 31]
    c = StatContainer()
    for v in values:
        c.update_stat(StatKey.PTS, v)

    assert c.get_average(StatKey.PTS) == pytest.approx(sum(values) / len(values))
    assert c.get_max(StatKey.PTS) == 31
    assert c.get_sum(StatKey.PTS) == sum(values)
    assert c.count(StatKey.PTS) == len(values)


def test_average_is_not_pairwise_halving() -> None:
    c = StatContainer()
    for v in (10, 10, 10, 40):
        c.update_stat(StatKey.TOV, v)
    # (avg + new) / 2 would give 25.0
    assert c.get_average(StatKey.TOV) == pytest.approx(17.5)


def test_history_order_and_nth_value() -> None:
    c = StatContainer()
    c.update_many({StatKey.AST: 4, StatKey.STL: 1})
    c.update_stat(StatKey.AST, 9)

    assert c.get_all_values(StatKey.AST) == [4, 9]
    assert list(c.keys()) == [StatKey.AST, StatKey.STL]
    assert len(c) == 2
    assert c.get_nth_value(StatKey.AST, 1) == 9
    with pytest.raises(IndexError):
        c.get_nth_value(StatKey.AST, 2)


def test_unknown_key_reads_as_zero() -> None:
    c = StatContainer()
    assert not c.stat_exists(StatKey.BLK)
    assert c.stat_is_empty(StatKey.BLK)
    assert c.get_sum(StatKey.BLK) == 0
    assert c.get_average(StatKey.BLK) == 0.0
    with pytest.raises(KeyError):
        c.get_max(StatKey.BLK)


def test_float_values_and_string_dump() -> None:
    c = StatContainer()
    c.update_stat("minutes", 30.5)
    c.update_stat("minutes", 20.0)
    assert c.get_average("minutes") == pytest.approx(25.25)

    text = str(c)
    assert text.startswith("Stat History:")
    assert "minutes" in text
    assert "Best: 30.5" in text


def test_rejects_non_numeric_values() -> None:
    c = StatContainer()
    with pytest.raises(TypeError):
        c.update_stat(StatKey.PTS, "12")
    with pytest.raises(TypeError):
        c.update_stat(StatKey.PTS, True)
