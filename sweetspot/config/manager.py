"""Configuration manager for Spain tax-year configurations.

Handles listing, copying, modifying, and saving per-year parameter files.
"""

from __future__ import annotations
import shutil
from pathlib import Path
from ruamel.yaml import YAML
from typing import Dict, Any, List, Optional
from datetime import datetime

from ..engine.models import TaxYearConfig, TaxBracket
from ..io.loader import CONFIG_FILE_NAME, load_tax_year_config, validate_tax_year_config


class ConfigManager:
    """Manager for Spain tax configuration files."""

    def __init__(self, config_root: Path):
        """Initialize config manager.

        Args:
            config_root: Path to the configs directory
        """
        self.config_root = config_root

    def get_available_years(self) -> List[int]:
        """Get list of available tax years."""
        years = []
        if not self.config_root.exists():
            return years

        for item in self.config_root.iterdir():
            if item.is_dir() and item.name.isdigit():
                years.append(int(item.name))

        return sorted(years)

    def year_exists(self, year: int) -> bool:
        """Check if a tax year configuration exists."""
        year_dir = self.config_root / str(year)
        config_file = year_dir / CONFIG_FILE_NAME
        return year_dir.exists() and config_file.exists()

    def create_year(self, source_year: int, target_year: int, overwrite: bool = False) -> Dict[str, Any]:
        """Create new year configuration by copying from existing year.

        The copied file is re-stamped with the target year so it loads cleanly.

        Args:
            source_year: Year to copy from
            target_year: Year to create
            overwrite: Whether to overwrite if target exists

        Returns:
            Dict with operation result
        """
        if not self.year_exists(source_year):
            raise ValueError(f"Source year {source_year} does not exist")

        target_dir = self.config_root / str(target_year)
        if target_dir.exists() and not overwrite:
            raise ValueError(f"Target year {target_year} already exists. Use overwrite=True to replace.")

        source = self.load_config(source_year)
        # an existing target is archived by save_config, its _archive/ history stays
        save_result = self.save_config(target_year, source.model_copy(update={"year": target_year}))

        return {
            "source_year": source_year,
            "target_year": target_year,
            "success": True,
            "message": f"Successfully created {target_year} configuration from {source_year}",
            "archive_file": save_result.get("archive_file")
        }

    def load_config(self, year: int) -> TaxYearConfig:
        """Load Spain configuration for a given year."""
        return load_tax_year_config(self.config_root, year)

    def save_config(self, year: int, config: TaxYearConfig) -> Dict[str, Any]:
        """Save configuration to file.

        Always creates an archive copy of the existing file before overwriting.

        Args:
            year: Tax year
            config: Configuration to save

        Returns:
            Dict with save result
        """
        year_dir = self.config_root / str(year)
        config_file = year_dir / CONFIG_FILE_NAME

        year_dir.mkdir(parents=True, exist_ok=True)

        archive_file = None
        if config_file.exists():
            archive_dir = year_dir / "_archive"
            archive_dir.mkdir(exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            archive_file = archive_dir / f"spain_{timestamp}.yaml"
            shutil.copy2(config_file, archive_file)

        try:
            # mode="json" turns the bracket tuple into a plain list for YAML
            config_dict = config.model_dump(mode="json", exclude_none=False)

            yaml_handler = YAML()
            yaml_handler.width = 150
            yaml_handler.indent(mapping=2, sequence=4, offset=2)
            yaml_handler.default_flow_style = None
            # spell out null so the unbounded bracket reads {upper_limit: null, ...}
            yaml_handler.representer.add_representer(
                type(None),
                lambda rep, _: rep.represent_scalar("tag:yaml.org,2002:null", "null"),
            )

            config_dict = self._apply_custom_formatting(config_dict)

            with open(config_file, 'w', encoding='utf-8') as f:
                f.write("# Spain tax parameters for a Sociedad Limitada owner\n")
                f.write("# upper_limit is the cumulative ceiling of each bracket, null means unbounded\n")
                f.write("\n")
                yaml_handler.dump(config_dict, f)

            return {
                "success": True,
                "message": f"Configuration saved successfully for year {year}",
                "archive_file": str(archive_file) if archive_file else None
            }

        except Exception as e:
            if archive_file and archive_file.exists():
                shutil.copy2(archive_file, config_file)

            raise ValueError(f"Failed to save configuration: {str(e)}")

    def get_config_summary(self, year: int) -> Dict[str, Any]:
        """Get summary of configuration for a year."""
        config = self.load_config(year)

        top = config.irpf_brackets[-1]
        return {
            "year": year,
            "schema_version": config.schema_version,
            "country": config.country,
            "currency": config.currency,
            "irpf_bracket_count": len(config.irpf_brackets),
            "irpf_rate_range_percent": [config.irpf_brackets[0].rate * 100, top.rate * 100],
            "savings": config.savings.model_dump(),
            "corporate_tax_rate": config.corporate_tax_rate,
            "minimum_salary": config.minimum_salary,
            "defaults": config.defaults.model_dump(),
        }

    def update_irpf_brackets(self, year: int, brackets_data: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Replace the IRPF bracket schedule for a year."""
        config = self.load_config(year)

        brackets = tuple(TaxBracket.model_validate(b) for b in brackets_data)
        updated = config.model_copy(update={"irpf_brackets": brackets})
        validate_tax_year_config(updated)

        save_result = self.save_config(year, updated)

        return {
            "success": True,
            "brackets_count": len(brackets),
            "message": f"IRPF brackets for {year} updated successfully",
            "archive_file": save_result.get("archive_file")
        }

    def update_parameters(
        self,
        year: int,
        corporate_tax_rate: Optional[float] = None,
        minimum_salary: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Update the flat corporate rate and/or the minimum salary for a year."""
        config = self.load_config(year)

        changes: Dict[str, Any] = {}
        if corporate_tax_rate is not None:
            changes["corporate_tax_rate"] = corporate_tax_rate
        if minimum_salary is not None:
            changes["minimum_salary"] = minimum_salary
        if not changes:
            raise ValueError("Nothing to update: pass corporate_tax_rate and/or minimum_salary")

        updated = config.model_copy(update=changes)
        validate_tax_year_config(updated)
        save_result = self.save_config(year, updated)

        return {
            "success": True,
            "updated": sorted(changes.keys()),
            "message": f"Parameters for {year} updated successfully",
            "archive_file": save_result.get("archive_file")
        }

    def _apply_custom_formatting(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Write each bracket on one line, the way the hand-maintained files do."""
        from ruamel.yaml.comments import CommentedMap, CommentedSeq

        formatted_config = CommentedMap(config_dict)

        if "irpf_brackets" in formatted_config:
            formatted_config.yaml_set_comment_before_after_key(
                "irpf_brackets",
                before="\n# IRPF brackets (state + regional combined)"
            )
            brackets = CommentedSeq(formatted_config["irpf_brackets"])
            for i, bracket in enumerate(brackets):
                bracket_map = CommentedMap(bracket)
                bracket_map.fa.set_flow_style()
                brackets[i] = bracket_map
            formatted_config["irpf_brackets"] = brackets

        if "savings" in formatted_config:
            formatted_config.yaml_set_comment_before_after_key(
                "savings",
                before="\n# Base del ahorro, applied to dividends"
            )

        return formatted_config
