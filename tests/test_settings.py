"""Test split and numbering settings."""

import pytest

from settings import (
    BranchSplitSettings,
    CollectionSplitSettings,
    GenerationSplitSettings,
    NumberingSettings,
    Settings,
    SurnameSplitSettings,
)


class TestGenerationSettings:
    """Tests for generation split settings."""

    def test_defaults(self):
        """Test default values."""
        settings = GenerationSplitSettings()
        assert settings.generations_per_partition == 4
        assert settings.direction == "ancestors"

    @pytest.mark.parametrize("width", [0, -3, "abc"])
    def test_invalid_width_falls_back(self, width, caplog):
        """Test that a bad band width is replaced by the default."""
        assert GenerationSplitSettings(generations_per_partition=width).generations_per_partition == 4
        assert "generations_per_partition" in caplog.text

    @pytest.mark.parametrize("direction, expected", [("up", "ancestors"), ("Down", "descendants"), ("sideways", "ancestors")])
    def test_direction(self, direction, expected):
        """Test direction aliases and the fallback."""
        assert GenerationSplitSettings(direction=direction).direction == expected

    def test_from_environment(self, monkeypatch):
        """Test reading values from the environment."""
        monkeypatch.setenv("KINGRAPH_GENERATION_GENERATIONS_PER_PARTITION", "3")
        assert GenerationSplitSettings().generations_per_partition == 3


class TestBranchSettings:
    """Tests for branch split settings."""

    def test_defaults(self):
        """Test default values."""
        settings = BranchSplitSettings()
        assert settings.include_paternal
        assert settings.include_maternal
        assert not settings.include_descendants
        assert settings.max_generations is None
        assert settings.recursion_depth == 0

    def test_invalid_values(self):
        """Test fallbacks for the cap and recursion depth."""
        settings = BranchSplitSettings(max_generations="x", recursion_depth=-1)
        assert settings.max_generations is None
        assert settings.recursion_depth == 0

    def test_flag_strings(self):
        """Test textual booleans."""
        settings = BranchSplitSettings(include_spouses="no", include_descendants="yes")
        assert not settings.include_spouses
        assert settings.include_descendants


class TestCollectionSettings:
    """Tests for collection split settings."""

    def test_comma_list(self):
        """Test that comma-separated lists are split and trimmed."""
        assert CollectionSplitSettings(priority="a, b").priority == ["a", "b"]

    def test_from_environment(self, monkeypatch):
        """Test list values from the environment."""
        monkeypatch.setenv("KINGRAPH_COLLECTION_PRIORITY", "Smith,Brown")
        assert CollectionSplitSettings().priority == ["Smith", "Brown"]


class TestNumberingSettings:
    """Tests for numbering settings."""

    @pytest.mark.parametrize("system, expected", [("d'Aboville", "daboville"), ("HENRY", "henry"), ("roman", "ahnentafel")])
    def test_system(self, system, expected):
        """Test system normalization and the fallback."""
        assert NumberingSettings(system=system).system == expected

    def test_root_id(self):
        """Test that GEDCOM pointer markers are stripped."""
        assert NumberingSettings(root_id="@I1@").root_id == "I1"


class TestSurnameSettings:
    """Tests for surname split settings."""

    def test_defaults(self):
        """Test default values."""
        settings = SurnameSplitSettings()
        assert settings.surnames == []
        assert settings.include_spouses
        assert settings.include_maiden_names
        assert settings.handle_variants
        assert settings.separate_partitions

    def test_from_environment(self, monkeypatch):
        """Test list and flag values from the environment."""
        monkeypatch.setenv("KINGRAPH_SURNAME_SURNAMES", "Smith, Stone")
        monkeypatch.setenv("KINGRAPH_SURNAME_HANDLE_VARIANTS", "false")
        settings = SurnameSplitSettings()
        assert settings.surnames == ["Smith", "Stone"]
        assert not settings.handle_variants


class TestSettings:
    """Tests for the aggregate settings."""

    def test_reads_environment_per_instance(self, monkeypatch):
        """Test that sub-settings pick up the environment when built."""
        monkeypatch.setenv("KINGRAPH_NUMBERING_ROOT_ID", "@I7@")
        monkeypatch.setenv("KINGRAPH_BRANCH_RECURSION_DEPTH", "2")
        settings = Settings()
        assert settings.numbering.root_id == "I7"
        assert settings.branch.recursion_depth == 2
