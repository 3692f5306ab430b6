"""Tests for tax-year configuration management."""

import shutil
import pytest

from sweetspot.config.manager import ConfigManager
from sweetspot.engine.errors import InvalidScheduleError


@pytest.fixture
def manager(tmp_path, config_root):
    """ConfigManager over a scratch copy of the packaged configs."""
    root = tmp_path / "configs"
    shutil.copytree(config_root, root)
    return ConfigManager(root)


class TestYears:

    def test_available_years(self, manager):
        assert 2026 in manager.get_available_years()

    def test_missing_root(self, tmp_path):
        assert ConfigManager(tmp_path / "nowhere").get_available_years() == []

    def test_year_exists(self, manager):
        assert manager.year_exists(2026)
        assert not manager.year_exists(1999)

    def test_create_year(self, manager):
        result = manager.create_year(2026, 2027)
        assert result["success"]
        assert manager.year_exists(2027)
        copied = manager.load_config(2027)
        assert copied.year == 2027
        assert copied.irpf_brackets == manager.load_config(2026).irpf_brackets

    def test_create_year_refuses_overwrite(self, manager):
        manager.create_year(2026, 2027)
        with pytest.raises(ValueError, match="already exists"):
            manager.create_year(2026, 2027)
        assert manager.create_year(2026, 2027, overwrite=True)["success"]

    def test_overwrite_keeps_archive_history(self, manager):
        manager.create_year(2026, 2027)
        archive_dir = manager.config_root / "2027" / "_archive"
        archive_dir.mkdir()
        older = archive_dir / "spain_20260101_000000.yaml"
        older.write_text("year: 2027\n", encoding="utf-8")

        result = manager.create_year(2026, 2027, overwrite=True)

        assert older.exists()
        assert result["archive_file"] is not None
        assert len(list(archive_dir.iterdir())) == 2
        assert manager.load_config(2027).year == 2027

    def test_create_from_missing_year(self, manager):
        with pytest.raises(ValueError, match="does not exist"):
            manager.create_year(1999, 2027)


class TestUpdates:

    def test_update_irpf_brackets(self, manager):
        result = manager.update_irpf_brackets(2026, [
            {"upper_limit": 20000, "rate": 0.2},
            {"upper_limit": None, "rate": 0.4},
        ])
        assert result["brackets_count"] == 2
        assert result["archive_file"] is not None

        config = manager.load_config(2026)
        assert [b.rate for b in config.irpf_brackets] == [0.2, 0.4]
        assert config.irpf_brackets[-1].upper_limit is None

    def test_update_irpf_brackets_rejects_bad_schedule(self, manager):
        with pytest.raises(InvalidScheduleError):
            manager.update_irpf_brackets(2026, [{"upper_limit": 20000, "rate": 0.2}])
        # file untouched
        assert len(manager.load_config(2026).irpf_brackets) == 10

    def test_update_parameters(self, manager):
        result = manager.update_parameters(2026, corporate_tax_rate=0.25)
        assert result["updated"] == ["corporate_tax_rate"]
        config = manager.load_config(2026)
        assert config.corporate_tax_rate == 0.25
        assert config.minimum_salary == 16576

    def test_update_parameters_requires_a_change(self, manager):
        with pytest.raises(ValueError, match="Nothing to update"):
            manager.update_parameters(2026)

    def test_saved_file_round_trips(self, manager):
        before = manager.load_config(2026)
        manager.save_config(2026, before)
        assert manager.load_config(2026) == before


class TestSummary:

    def test_config_summary(self, manager):
        summary = manager.get_config_summary(2026)
        assert summary["country"] == "Spain"
        assert summary["currency"] == "EUR"
        assert summary["irpf_bracket_count"] == 10
        assert summary["irpf_rate_range_percent"] == pytest.approx([18.0, 45.0])
        assert summary["savings"]["first_limit"] == 6000
        assert summary["minimum_salary"] == 16576
