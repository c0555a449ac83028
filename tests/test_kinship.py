"""Test relationship path search and kinship naming."""

import pytest

from kinship import (
    calculate_relationship,
    classify_path,
    cousin_term,
    find_path,
    format_relationship,
    ordinal,
    removal_text,
)

# id, name, sex, birth, father, mother, spouses
STEP_FAMILY = [
    ("P", "Paul Parent", "M", None, None, None, ["Q"]),
    ("Q", "Quinn Second", "F", None, None, None, []),
    ("X", "Xavier Child", "M", None, "P", None, ["Y"]),
    ("Y", "Yara Spouse", "F", None, None, None, []),
    ("X2", "Xena Sibling", "F", None, "P", None, ["Z2"]),
    ("Z2", "Zane Partner", "M", None, None, None, []),
]

UNMARRIED_PARENTS = [
    ("PA", "Pete Father", "M", None, None, None, []),
    ("MA", "Mia Mother", "F", None, None, None, []),
    ("KID", "Kit Child", None, None, "PA", "MA", []),
]


class TestNaming:
    """Tests for the naming helpers."""

    @pytest.mark.parametrize("n, expected", [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th")])
    def test_ordinal(self, n, expected):
        """Test ordinal suffixes."""
        assert ordinal(n) == expected

    def test_removal_text(self):
        """Test removal wording."""
        assert removal_text(1) == "once removed"
        assert removal_text(2) == "twice removed"
        assert removal_text(3) == "3 times removed"

    def test_cousin_term(self):
        """Test cousin degree and removal."""
        assert cousin_term(2, 2) == ("1st Cousin", 1, 0)
        assert cousin_term(3, 5) == ("2nd Cousin twice removed", 2, 2)


class TestFindPath:
    """Tests for the breadth-first path search."""

    def test_grandparent_path(self, tree):
        """Test the R -> F -> GF scenario."""
        path = find_path(tree, "R", "PGF")
        assert [s.person_id for s in path] == ["R", "F", "PGF"]
        assert [s.direction for s in path] == ["start", "up", "up"]
        assert [s.relationship for s in path] == ["start", "father", "father"]

    def test_father_side_preferred(self, tree):
        """Test that the father is explored before the mother on ties."""
        path = find_path(tree, "R", "C")
        assert [s.person_id for s in path] == ["R", "F", "PGF", "U", "C"]

    def test_unreachable(self, tree):
        """Test that an unconnected person yields no path."""
        assert find_path(tree, "R", "Z") is None

    def test_missing_person(self, tree):
        """Test that a missing endpoint yields no path."""
        assert find_path(tree, "R", "nobody") is None

    @pytest.mark.parametrize("a, b", [("R", "C"), ("K1", "U"), ("GK", "MGM"), ("W", "N"), ("UW", "WF")])
    def test_distance_symmetry(self, tree, a, b):
        """Test that both directions find paths of equal length."""
        assert len(find_path(tree, a, b)) == len(find_path(tree, b, a))


class TestClassify:
    """Tests for kinship classification."""

    def test_grandparent(self, tree):
        """Test the grandparent scenario."""
        result = calculate_relationship(tree, "R", "PGF")
        assert result.description == "Grandparent"
        assert result.generations_up == 2
        assert result.generations_down == 0
        assert result.is_direct_line
        assert result.is_blood_relation
        assert result.common_ancestor.id == "PGF"

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("R", "F", "Parent"),
            ("GK", "PGF", "Great-Great-Grandparent"),
            ("R", "K1", "Child"),
            ("PGF", "GK", "Great-Great-Grandchild"),
            ("R", "S", "Sibling"),
            ("R", "N", "Niece/Nephew"),
            ("R", "U", "Aunt/Uncle"),
            ("K1", "U", "Great-Grand Aunt/Uncle"),
            ("U", "K1", "Great-Grand Niece/Nephew"),
            ("R", "C", "1st Cousin"),
            ("C", "K1", "1st Cousin once removed"),
            ("R", "W", "Spouse"),
            ("R", "WF", "Parent-in-law"),
        ],
    )
    def test_terms(self, tree, a, b, expected):
        """Test kinship terms across the sample family."""
        assert calculate_relationship(tree, a, b).description == expected

    def test_first_cousin(self, tree):
        """Test cousins sharing grandparents."""
        result = calculate_relationship(tree, "R", "C")
        assert result.cousin_degree == 1
        assert result.removal == 0
        assert result.common_ancestor.id == "PGF"
        assert not result.is_direct_line

    def test_second_cousin_twice_removed(self, chain):
        """Test 3 generations up on one side and 5 on the other."""
        tree = chain(3, 5)
        result = calculate_relationship(tree, "L3", "R5")
        assert result.description == "2nd Cousin twice removed"
        assert result.cousin_degree == 2
        assert result.removal == 2
        assert result.common_ancestor.id == "A"

    def test_cousin_symmetry(self, chain):
        """Test that degree and removal match in both directions."""
        tree = chain(3, 5)
        forward = calculate_relationship(tree, "L3", "R5")
        backward = calculate_relationship(tree, "R5", "L3")
        assert (forward.cousin_degree, forward.removal) == (backward.cousin_degree, backward.removal)
        assert (forward.generations_up, forward.generations_down) == (3, 5)
        assert (backward.generations_up, backward.generations_down) == (5, 3)

    def test_aunt_niece_magnitudes(self, tree):
        """Test that aunt/uncle and niece/nephew swap with the same counts."""
        forward = calculate_relationship(tree, "R", "U")
        backward = calculate_relationship(tree, "U", "R")
        assert forward.description == "Aunt/Uncle"
        assert backward.description == "Niece/Nephew"
        assert (forward.generations_up, forward.generations_down) == (backward.generations_down, backward.generations_up)

    def test_spouse_not_blood(self, tree):
        """Test that a pure marriage link is not a blood relation."""
        result = calculate_relationship(tree, "R", "W")
        assert not result.is_blood_relation
        assert result.common_ancestor is None

    def test_common_ancestor_of_descendant_path(self, tree):
        """Test that an all-down path ends at its common ancestor."""
        result = calculate_relationship(tree, "R", "GK")
        assert result.description == "Grandchild"
        assert result.common_ancestor.id == "GK"


class TestAffinal:
    """Tests for in-law and step terms."""

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("X", "Q", "Step-parent"),
            ("Q", "X", "Step-child"),
            ("P", "Y", "Child-in-law"),
            ("Y", "P", "Parent-in-law"),
            ("X", "Z2", "Sibling-in-law"),
            ("Y", "X2", "Sibling-in-law"),
        ],
    )
    def test_marriage_position(self, make_tree, a, b, expected):
        """Test that the marriage step position picks the term."""
        tree = make_tree(STEP_FAMILY)
        assert calculate_relationship(tree, a, b).description == expected

    def test_two_marriages(self, make_tree):
        """Test that two marriage steps are only related by marriage."""
        tree = make_tree(STEP_FAMILY)
        result = calculate_relationship(tree, "Y", "Z2")
        assert result.description == "Related by marriage"

    def test_unmarried_coparent_flagged(self, make_tree):
        """Test that a down-then-up path is flagged for review."""
        tree = make_tree(UNMARRIED_PARENTS)
        result = calculate_relationship(tree, "PA", "MA")
        assert result.description == "Related (1 gen. up, 1 gen. down)"
        assert result.needs_review

    def test_classify_path_direct(self, tree):
        """Test classifying a path on its own."""
        analysis = classify_path(find_path(tree, "R", "MGF"))
        assert analysis.description == "Grandparent"
        assert analysis.common_ancestor_id == "MGF"


class TestCalculateRelationship:
    """Tests for the relationship entry point."""

    def test_same_person(self, tree):
        """Test the zero-length same-person result."""
        result = calculate_relationship(tree, "R", "R")
        assert result.description == "Same person"
        assert result.distance == 0
        assert len(result.path) == 1

    def test_not_related(self, tree):
        """Test an explicit not-related result."""
        result = calculate_relationship(tree, "R", "Z")
        assert result.description == "Not related"
        assert not result.is_related

    def test_missing_person_returns_none(self, tree, caplog):
        """Test that a missing person gives None and a warning."""
        assert calculate_relationship(tree, "R", "nobody") is None
        assert "Person not found" in caplog.text

    def test_format(self, tree):
        """Test the plain-text report."""
        text = format_relationship(tree, calculate_relationship(tree, "R", "C"))
        assert "Relationship: Robert Smith -> Carl Smith" in text
        assert "Result: 1st Cousin" in text
        assert "Common ancestor: George Smith" in text
        assert "  -> child -> Carl Smith" in text
