import pytest

from src.attendance_reconciler.attendance_reconciler.core.exceptions import UnresolvedEmployee
from src.attendance_reconciler.attendance_reconciler.employees.model import Employee
from src.attendance_reconciler.attendance_reconciler.employees.name_normalizer import (
    EmployeeNameIndex,
    name_patterns,
    normalize,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Cabarliza M.", "cabarliza m"),
        ("  OGAO-OGAO   Ruel ", "ogao ogao ruel"),
        ("dela Cruz, Juan", "dela cruz juan"),
        ("O'Brien", "obrien"),
        ("Peña", "pena"),
        ("Santos Jr.", "santos jr"),
        ("#@!", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_examples(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize("raw", ["Cabarliza M.", "  OGAO-OGAO\tRuel", "Peña, José_Luis", "a//b", "ÅNGSTRÖM"])
def test_normalize_is_idempotent(raw):
    assert normalize(normalize(raw)) == normalize(raw)


def test_normalize_ignores_case_and_whitespace():
    assert normalize("Juan  DELA cruz") == normalize("  juan dela\tCRUZ ")


def test_patterns_cover_device_formats():
    emp = Employee(employee_id=7, first_name="Maria Clara", middle_name="Santos", last_name="Cabarliza")

    patterns = name_patterns(emp)

    assert "cabarliza maria clara" in patterns
    assert "maria clara cabarliza" in patterns
    assert "maria clara s cabarliza" in patterns
    assert "cabarliza maria" in patterns
    assert "cabarliza ma" in patterns
    assert "cabarliza m" in patterns
    assert len(patterns) == len(set(patterns))


def test_index_resolves_unique_names():
    index = EmployeeNameIndex(
        [
            Employee(employee_id=1, first_name="Juan", last_name="Dela Cruz"),
            Employee(employee_id=2, first_name="Ruel", last_name="Ogao-Ogao"),
        ]
    )

    assert index.resolve("DELA CRUZ, JUAN") == 1
    assert index.resolve("ogao ogao ruel") == 2
    assert index.resolve("Ruel Ogao-Ogao") == 2


def test_index_never_guesses_between_namesakes():
    index = EmployeeNameIndex(
        [
            Employee(employee_id=1, first_name="Ana", last_name="Reyes"),
            Employee(employee_id=2, first_name="Alma", last_name="Reyes"),
        ]
    )

    with pytest.raises(UnresolvedEmployee) as exc:
        index.resolve("Reyes A")
    assert exc.value.candidates == (1, 2)

    assert index.resolve("Reyes An") == 1


def test_index_rejects_unknown_and_empty_names():
    index = EmployeeNameIndex([Employee(employee_id=1, first_name="Ana", last_name="Reyes")])

    with pytest.raises(UnresolvedEmployee):
        index.resolve("Nobody Here")
    with pytest.raises(UnresolvedEmployee):
        index.resolve("...")
