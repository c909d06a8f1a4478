import pytest

from pushpipe import create

ascending = lambda a, b: a < b
same = lambda a, b: a == b


def test_distinct_then_sorted():
    assert create([3, 1, 2, 1]).distinct(same).sorted(ascending).to_list() == [1, 2, 3]


def test_sorted_descending():
    assert create([5, 2, 9, 1]).sorted(lambda a, b: a > b).to_list() == [9, 5, 2, 1]


def test_sorted_students_by_age(students):
    ages = create(students).sorted(lambda a, b: a.age < b.age).map(lambda s: s.age).to_list()
    assert ages == list(range(15, 26))


def test_sorted_is_stable():
    records = [("b", 1), ("a", 2), ("b", 3), ("a", 4), ("c", 5), ("a", 6)]
    out = create(records).sorted(lambda x, y: x[0] < y[0]).to_list()
    assert out == [("a", 2), ("a", 4), ("a", 6), ("b", 1), ("b", 3), ("c", 5)]


def test_distinct_keeps_first_occurrence(students):
    out = create(students).distinct(lambda a, b: a.name == b.name).to_list()
    assert [s.name for s in out] == ["Tom", "Kate", "Lucy", "Jim", "Jack", "King", "Lee", "Mask"]
    assert [s.id for s in out] == [1, 2, 3, 4, 5, 6, 7, 8]


@pytest.mark.parametrize("data", [[], [1, 1, 1], [3, 1, 2, 1, 3, 4, 2], ["a", "b", "A", "a"]])
def test_distinct_is_idempotent(data):
    once = create(data).distinct(same).to_list()
    twice = create(data).distinct(same).distinct(same).to_list()
    assert once == twice


def test_distinct_uses_comparator_not_equality():
    out = create(["a", "B", "A", "b", "c"]).distinct(lambda a, b: a.lower() == b.lower()).to_list()
    assert out == ["a", "B", "c"]


@pytest.mark.parametrize("n, expected", [
    (-3, [1, 2, 3, 4]),
    (0, [1, 2, 3, 4]),
    (1, [2, 3, 4]),
    (3, [4]),
    (4, []),
    (10, []),
])
def test_skip(n, expected):
    assert create([1, 2, 3, 4]).skip(n).to_list() == expected


@pytest.mark.parametrize("n, expected", [
    (-3, []),
    (0, []),
    (1, [1]),
    (3, [1, 2, 3]),
    (4, [1, 2, 3, 4]),
    (10, [1, 2, 3, 4]),
])
def test_limit(n, expected):
    assert create([1, 2, 3, 4]).limit(n).to_list() == expected


def test_skip_and_limit_on_empty():
    assert create([]).skip(5).to_list() == []
    assert create([]).limit(5).to_list() == []


def test_skip_then_limit_pages(students):
    page = create(students).skip(5).limit(3).map(lambda s: s.id).to_list()
    assert page == [6, 7, 8]


@pytest.mark.parametrize("bad", [1.5, "2", None, True])
def test_skip_limit_reject_non_int(bad):
    with pytest.raises(TypeError):
        create([1, 2]).skip(bad)
    with pytest.raises(TypeError):
        create([1, 2]).limit(bad)


def test_flat_map(students):
    high = create(students[:3]) \
        .flat_map(lambda s: s.scores) \
        .filter(lambda score: score > 90) \
        .sorted(lambda a, b: a > b) \
        .to_list()
    assert high == [95, 94, 93]


def test_flat_map_preserves_order():
    out = create([[1, 2], [], (3,), [4, 5, 6]]).flat_map(lambda x: x).to_list()
    assert out == [1, 2, 3, 4, 5, 6]


def test_flat_map_skips_none():
    out = create([1, 2, 3]).flat_map(lambda x: None if x == 2 else [x] * x).to_list()
    assert out == [1, 3, 3, 3]


@pytest.mark.parametrize("bad_result", [5, "abc", {"a": 1}])
def test_flat_map_rejects_non_sequence(bad_result):
    with pytest.raises(TypeError):
        create([1]).flat_map(lambda x: bad_result)


@pytest.mark.parametrize("method", ["sorted", "distinct", "flat_map"])
def test_non_callable_fails_at_construction(method):
    calls = []
    stream = create([1, 2]).peek(calls.append)
    with pytest.raises(TypeError):
        getattr(stream, method)(None)
    assert calls == []


def test_stateful_after_filter_counts():
    stream = create([5, 3, 8, 1, 9]).filter(lambda x: x > 2).sorted(ascending)
    assert stream.count() == 4
    assert stream.to_list() == [3, 5, 8, 9]
