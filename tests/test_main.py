"""Test the command-line entry point."""

import pytest

import main


@pytest.fixture
def run(monkeypatch, sample_people, capsys):
    """Run the CLI against the sample family; returns (exit code, stdout)."""
    monkeypatch.setattr(main, "load_people", lambda path, collection_by=None: sample_people)

    def _run(*argv):
        code = main.main(["family.ged", *argv])
        return code, capsys.readouterr().out

    return _run


class TestMain:
    """Tests for the sub-commands."""

    def test_relationship(self, run):
        """Test the relationship report."""
        code, out = run("relationship", "R", "C")
        assert code == 0
        assert "Found 18 persons" in out
        assert "Result: 1st Cousin" in out

    def test_relationship_missing(self, run):
        """Test an unknown person in a relationship query."""
        code, out = run("relationship", "R", "nobody")
        assert code == 1
        assert "Person not found" in out

    def test_unknown_root(self, run):
        """Test that an unknown root is reported, not raised."""
        code, out = run("generations", "nobody")
        assert code == 1
        assert "Error: Person ID nobody not found in graph" in out

    def test_number(self, run):
        """Test Ahnentafel output."""
        code, out = run("number", "R", "--system", "ahnentafel")
        assert code == 0
        assert "Frank Smith: #2" in out
        assert "Assigned 7 numbers" in out

    def test_branch_preview(self, run):
        """Test the branch preview listing."""
        code, out = run("split-branches", "R", "--preview")
        assert code == 0
        assert "paternal: 4 people, 4 boundary people" in out
        assert "maternal: 4 people, 2 boundary people" in out

    def test_validate(self, run):
        """Test validation of a clean family."""
        code, out = run("validate")
        assert code == 0
        assert "No validation issues found" in out

    def test_number_root_from_environment(self, run, monkeypatch):
        """Test the configured numbering root when none is given."""
        monkeypatch.setenv("KINGRAPH_NUMBERING_ROOT_ID", "@F@")
        code, out = run("number")
        assert code == 0
        assert "George Smith: #2" in out
        assert "Assigned 3 numbers" in out

    def test_number_root_argument_wins(self, run, monkeypatch):
        """Test that an explicit root overrides the configured one."""
        monkeypatch.setenv("KINGRAPH_NUMBERING_ROOT_ID", "F")
        code, out = run("number", "R")
        assert code == 0
        assert "Assigned 7 numbers" in out

    def test_surname_preview(self, run):
        """Test the surname preview listing."""
        code, out = run("split-surnames", "--surname", "Stone", "--preview")
        assert code == 0
        assert "Preview: 1 partitions, 3 people" in out
        assert "  Stone: 3 people" in out

    def test_surname_split_combined(self, run):
        """Test one combined surname partition."""
        code, out = run("split-surnames", "--surname", "Stone", "--surname", "Brown", "--combined", "--no-spouses")
        assert code == 0
        assert "Split into 1 surname partitions" in out
        assert "  Stone, Brown: 4 people" in out
