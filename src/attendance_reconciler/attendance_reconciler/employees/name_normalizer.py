"""Device-name normalization and the employee name index.

Biometric devices store whatever was typed at enrolment: "Cabarliza M.",
"OGAO-OGAO", "dela cruz, juan". `normalize` folds such strings into a
matchable key and `EmployeeNameIndex` joins keys to directory entries.
"""

from __future__ import annotations

import unicodedata
from collections import defaultdict
from typing import Iterable, NewType, Optional, Sequence

from ..core.exceptions import UnresolvedEmployee
from .model import Employee

NormalizedKey = NewType("NormalizedKey", str)

_REMOVED = {".", "'", "’", "`"}
_SEPARATORS = {"-", ",", "_", "/", "\\", "‐", "–", "—"}


def normalize(raw_name: Optional[str]) -> NormalizedKey:
    """Canonical join key for a free-text name.

    Lowercase, accents folded, periods/apostrophes dropped, separators turned
    into spaces, any other punctuation removed, whitespace collapsed.
    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    if not raw_name:
        return NormalizedKey("")

    text = unicodedata.normalize("NFKD", raw_name.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch)).lower()

    out: list[str] = []
    for ch in text:
        if ch in _REMOVED:
            continue
        if ch in _SEPARATORS or ch.isspace():
            out.append(" ")
        elif ch.isalnum():
            out.append(ch)

    return NormalizedKey(" ".join("".join(out).split()))


def name_patterns(employee: Employee) -> list[NormalizedKey]:
    """Every key under which a device may have recorded this employee.

    More specific patterns come first.
    """
    last = normalize(employee.last_name)
    first = normalize(employee.first_name)
    middle = normalize(employee.middle_name)
    if not last or not first:
        return [k for k in (last, first) if k]

    patterns = [
        f"{last} {first[:2]}",
        f"{last} {first}",
        f"{first} {last}",
    ]
    if middle:
        patterns += [
            f"{last} {first} {middle}",
            f"{first} {middle} {last}",
            f"{first} {middle[0]} {last}",
            f"{last} {first} {middle[0]}",
        ]
    if " " in first:
        first_word = first.split(" ")[0]
        patterns += [f"{last} {first_word}", f"{first_word} {last}"]
    patterns += [f"{last} {first[0]}", last]

    seen: set[str] = set()
    out: list[NormalizedKey] = []
    for p in patterns:
        if p not in seen:
            seen.add(p)
            out.append(NormalizedKey(p))
    return out


class EmployeeNameIndex:
    """Lookup from normalized device names to employee ids.

    A key shared by several employees (common last names) is ambiguous and
    never resolved by guessing.
    """

    def __init__(self, employees: Iterable[Employee]):
        self._index: dict[str, list[int]] = defaultdict(list)
        for employee in employees:
            for key in name_patterns(employee):
                ids = self._index[key]
                if employee.employee_id not in ids:
                    ids.append(employee.employee_id)

    def candidates(self, raw_name: str) -> Sequence[int]:
        return tuple(self._index.get(normalize(raw_name), ()))

    def resolve(self, raw_name: str) -> int:
        """Employee id for a raw device name; raises UnresolvedEmployee otherwise."""
        ids = self.candidates(raw_name)
        if len(ids) != 1:
            raise UnresolvedEmployee(raw_name, candidates=ids)
        return ids[0]
