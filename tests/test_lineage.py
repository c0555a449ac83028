"""Test lineage tracking."""

import pytest

from lineage import (
    all_lineages,
    assign_lineage,
    describe_lineage_type,
    find_common_lineages,
    format_lineage_type,
    people_in_lineage,
    remove_lineage,
    suggest_lineage_name,
    write_lineages,
)
from models import Person, PersonNotFoundError


class TestAssignLineage:
    """Tests for tagging descendants."""

    def test_all_descendants(self, tree):
        """Test following every child."""
        stats = assign_lineage(tree, "Smith Line", "PGF")
        ids = [a.person_id for a in stats.assignments]
        assert ids == ["PGF", "F", "U", "S", "R", "C", "N", "K1", "K2", "GK"]
        assert stats.max_generation == 4
        assert stats.assignments[-1].path_from_root == [
            "George Smith",
            "Frank Smith",
            "Robert Smith",
            "Kevin Smith",
            "Gary Smith",
        ]

    def test_patrilineal(self, tree):
        """Test following father-to-child descent only."""
        stats = assign_lineage(tree, "Smith Line", "PGF", "patrilineal")
        ids = {a.person_id for a in stats.assignments}
        assert "N" not in ids
        assert stats.total_members == 9

    def test_matrilineal(self, tree):
        """Test following mother-to-child descent only."""
        stats = assign_lineage(tree, "Brown Line", "M", "matrilineal")
        assert [a.person_id for a in stats.assignments] == ["M", "S", "R", "N"]

    def test_keeps_existing_lineages(self, tree):
        """Test that earlier lineages are kept and names not repeated."""
        current = {"F": ["Brown Line"], "R": ["Smith Line"]}
        stats = assign_lineage(tree, "Smith Line", "PGF", current_lineages=current)
        by_id = {a.person_id: a.lineages for a in stats.assignments}
        assert by_id["F"] == ["Brown Line", "Smith Line"]
        assert by_id["R"] == ["Smith Line"]
        assert current["F"] == ["Brown Line"]

    def test_unknown_root(self, tree):
        """Test that an unknown root raises."""
        with pytest.raises(PersonNotFoundError):
            assign_lineage(tree, "Nobody Line", "nobody")

    def test_unknown_type(self, tree):
        """Test that an unknown lineage type raises."""
        with pytest.raises(ValueError):
            assign_lineage(tree, "Smith Line", "PGF", "sideways")


class TestLineageStore:
    """Tests for the write-back helpers."""

    def test_write_and_query(self, tree):
        """Test writing lineages and querying them back."""
        store: dict[str, list[str]] = {}
        stats = assign_lineage(tree, "Smith Line", "U")
        assert write_lineages(stats, store.__setitem__) == 2
        assert store == {"U": ["Smith Line"], "C": ["Smith Line"]}
        assert people_in_lineage(store, "Smith Line") == ["U", "C"]

    def test_remove(self):
        """Test removing one lineage from everyone."""
        store = {"A": ["Smith Line", "Brown Line"], "B": ["Brown Line"], "C": []}
        assert remove_lineage(store, "Brown Line", store.__setitem__) == 2
        assert store == {"A": ["Smith Line"], "B": [], "C": []}

    def test_all_and_common(self):
        """Test listing and intersecting lineages."""
        store = {"A": ["Smith Line", "Brown Line"], "B": ["Brown Line", "Stone Line"]}
        assert all_lineages(store) == ["Brown Line", "Smith Line", "Stone Line"]
        assert find_common_lineages(store, "A", "B") == ["Brown Line"]
        assert find_common_lineages(store, "A", "nobody") == []


class TestNaming:
    """Tests for lineage names and labels."""

    def test_suggest_from_surname(self):
        """Test the surname suggestion."""
        assert suggest_lineage_name(Person(id="1", name="Anne Marie Tudor", surname="Tudor")) == "Tudor Line"
        assert suggest_lineage_name(Person(id="2", name="John Doe")) == "Doe Line"
        assert suggest_lineage_name(Person(id="3", name="Cher")) == "Cher Line"

    def test_type_labels(self):
        """Test display labels."""
        assert format_lineage_type("patrilineal") == "Patrilineal (father's line)"
        assert "mother-to-child" in describe_lineage_type("matrilineal")
