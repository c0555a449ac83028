"""Pytest fixtures for family tree tests."""

import pytest

from graph import build_family_tree
from models import Person

# id, name, sex, birth, father, mother, spouses
SAMPLE_FAMILY = [
    ("PGF", "George Smith", "M", "1900", None, None, ["PGM"]),
    ("PGM", "Alice Jones", "F", "1902", None, None, []),
    ("MGF", "Henry Brown", "M", "1905", None, None, ["MGM"]),
    ("MGM", "Mary Green", "F", "1907", None, None, []),
    ("F", "Frank Smith", "M", "1930", "PGF", "PGM", ["M"]),
    ("M", "Martha Brown", "F", "1932", "MGF", "MGM", []),
    ("U", "Samuel Smith", "M", "1934", "PGF", "PGM", ["UW"]),
    ("UW", "Wendy White", "F", "1935", None, None, []),
    ("WF", "Walter Stone", "M", "1935", None, None, []),
    ("S", "Susan Smith", "F", "1958", "F", "M", []),
    ("R", "Robert Smith", "M", "1960", "F", "M", ["W"]),
    ("W", "Wilma Stone", "F", "1962", "WF", None, []),
    ("C", "Carl Smith", "M", "1961", "U", "UW", []),
    ("K1", "Kevin Smith", "M", "1990", "R", "W", []),
    ("K2", "Karen Smith", "F", "1988", "R", "W", []),
    ("N", "Nina Smith", "F", "1985", None, "S", []),
    ("GK", "Gary Smith", "M", "2015", "K1", None, []),
    ("Z", "Zed Loner", None, None, None, None, []),
]

SAMPLE_COLLECTIONS = {
    "Smith": ["PGF", "PGM", "F", "U", "C", "S", "R", "K1", "K2", "GK", "N"],
    "Brown": ["MGF", "MGM", "M"],
    "Stone": ["W", "WF"],
}


def build_people(records, collections=None) -> list[Person]:
    """
    Build Person records with consistent back-references.

    Children are listed on each parent in declaration order and every
    marriage is recorded on both partners.
    """
    collection_of = {pid: name for name, ids in (collections or {}).items() for pid in ids}
    children: dict[str, list[str]] = {r[0]: [] for r in records}
    spouses: dict[str, list[str]] = {r[0]: [] for r in records}

    for pid, _, _, _, father, mother, partner_ids in records:
        for parent in (father, mother):
            if parent in children:
                children[parent].append(pid)
        for partner in partner_ids:
            if partner not in spouses[pid]:
                spouses[pid].append(partner)
            if partner in spouses and pid not in spouses[partner]:
                spouses[partner].append(pid)

    people = []
    for pid, name, sex, birth, father, mother, _ in records:
        given, _, surname = name.partition(" ")
        people.append(
            Person(
                id=pid,
                name=name,
                given_name=given,
                surname=surname or None,
                sex=sex,
                birth_date=birth,
                father_id=father,
                mother_id=mother,
                spouse_ids=tuple(spouses[pid]),
                child_ids=tuple(children[pid]),
                collection=collection_of.get(pid),
            )
        )
    return people


@pytest.fixture
def make_tree():
    """Factory: records -> FamilyTree including every record."""

    def _make(records, root_id=None, collections=None, connected_only=False):
        people = build_people(records, collections)
        return build_family_tree(people, root_id or people[0].id, connected_only=connected_only)

    return _make


@pytest.fixture
def sample_people():
    """Three generations around Robert Smith, plus one unconnected person."""
    return build_people(SAMPLE_FAMILY)


@pytest.fixture
def tree(make_tree):
    """Sample family rooted at Robert Smith (R)."""
    return make_tree(SAMPLE_FAMILY, root_id="R")


@pytest.fixture
def tagged_tree(make_tree):
    """Sample family with Smith/Brown/Stone collection tags; UW and Z untagged."""
    return make_tree(SAMPLE_FAMILY, root_id="R", collections=SAMPLE_COLLECTIONS)


@pytest.fixture
def chain(make_tree):
    """
    Factory for two descent lines from a shared ancestor "A".

    chain(3, 5) builds A -> L1 -> L2 -> L3 and A -> R1 -> ... -> R5.
    """

    def _chain(left: int, right: int):
        records = [("A", "Adam Root", "M", None, None, None, [])]
        for side, length in (("L", left), ("R", right)):
            previous = "A"
            for i in range(1, length + 1):
                pid = f"{side}{i}"
                records.append((pid, f"{side}{i} Person", None, None, previous, None, []))
                previous = pid
        return make_tree(records, root_id="A")

    return _chain
