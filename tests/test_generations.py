"""Test generation assignment."""

import pytest

from generations import ANCESTORS, DESCENDANTS, assign_generations, normalize_direction
from models import PersonNotFoundError


class TestAssignGenerations:
    """Tests for signed generation numbers."""

    def test_toward_ancestors(self, tree):
        """Test that parents count up and children count down."""
        assignment = assign_generations(tree, ANCESTORS)
        gens = assignment.generation_map
        assert gens["R"] == 0
        assert gens["F"] == 1
        assert gens["PGF"] == 2
        assert gens["K1"] == -1
        assert gens["GK"] == -2
        assert assignment.bounds == (-2, 2)

    def test_toward_descendants(self, tree):
        """Test the reversed sign convention."""
        gens = assign_generations(tree, DESCENDANTS).generation_map
        assert gens["F"] == -1
        assert gens["GK"] == 2

    def test_spouses_share_generation(self, tree):
        """Test that marriage does not change generation."""
        gens = assign_generations(tree).generation_map
        assert gens["W"] == gens["R"]
        assert gens["UW"] == gens["U"] == 1
        assert gens["WF"] == 1

    def test_cousins_same_generation(self, tree):
        """Test people reached through other branches."""
        gens = assign_generations(tree).generation_map
        assert gens["C"] == 0
        assert gens["S"] == 0
        assert gens["N"] == -1

    def test_only_reachable_people(self, tree):
        """Test that unconnected people get no generation."""
        assignment = assign_generations(tree)
        assert "Z" not in assignment.generation_map
        assert len(assignment.generation_map) == 17

    def test_other_root(self, tree):
        """Test counting from a root other than the tree's."""
        gens = assign_generations(tree, root_id="PGF").generation_map
        assert gens["PGF"] == 0
        assert gens["R"] == -2

    def test_unknown_root(self, tree):
        """Test that an unknown root raises."""
        with pytest.raises(PersonNotFoundError):
            assign_generations(tree, root_id="nobody")

    def test_people_at(self, tree):
        """Test listing a generation."""
        assignment = assign_generations(tree)
        assert set(assignment.people_at(2)) == {"PGF", "PGM", "MGF", "MGM"}

    def test_cycle_terminates(self, make_tree):
        """Test that inconsistent cyclic data still terminates."""
        records = [
            ("A", "Ann", None, None, "B", None, []),
            ("B", "Ben", None, None, "A", None, []),
        ]
        assignment = assign_generations(make_tree(records))
        assert set(assignment.generation_map) == {"A", "B"}


class TestDirection:
    """Tests for direction names."""

    @pytest.mark.parametrize("name, expected", [("up", ANCESTORS), ("Down", DESCENDANTS), ("ancestors", ANCESTORS)])
    def test_aliases(self, name, expected):
        """Test accepted aliases."""
        assert normalize_direction(name) == expected

    def test_unknown_defaults(self, caplog):
        """Test that an unknown direction falls back with a warning."""
        assert normalize_direction("sideways") == ANCESTORS
        assert "sideways" in caplog.text
