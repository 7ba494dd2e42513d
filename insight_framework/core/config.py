"""Analysis configuration parsing and validation."""

import os
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

from insight_framework.core import constants
from insight_framework.core.exceptions import ConfigError


# YAML section -> AnalysisConfig fields it may set
CONFIG_SECTIONS: Dict[str, List[str]] = {
    "data_quality": [
        "min_completeness", "min_consistency", "max_quality_issues",
        "min_data_density", "max_dataset_cells",
    ],
    "type_inference": [
        "numeric_ratio_threshold", "datetime_ratio_threshold",
        "categorical_unique_ratio", "categorical_max_avg_length",
    ],
    "charts": [
        "max_charts", "chartable_text_max_unique", "scatter_column_cap",
        "bucket_column_ceiling",
    ],
    "report": [
        "max_report_length",
    ],
    "timeouts": [
        "analysis_timeout", "column_analysis_timeout", "chart_generation_timeout",
        "insight_generation_timeout", "report_generation_timeout",
    ],
}


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Tunable parameters for one analysis run.

    Defaults come from insight_framework.core.constants. The type-inference
    thresholds are empirical cut-offs, not derived values; they are exposed
    here so they can be tuned per deployment.
    """
    # Data quality rejection
    min_completeness: float = constants.MIN_COMPLETENESS
    min_consistency: float = constants.MIN_CONSISTENCY
    max_quality_issues: int = constants.MAX_QUALITY_ISSUES
    min_data_density: float = constants.MIN_DATA_DENSITY
    max_dataset_cells: int = constants.MAX_DATASET_CELLS

    # Type inference cascade
    numeric_ratio_threshold: float = constants.NUMERIC_RATIO_THRESHOLD
    datetime_ratio_threshold: float = constants.DATETIME_RATIO_THRESHOLD
    categorical_unique_ratio: float = constants.CATEGORICAL_UNIQUE_RATIO
    categorical_max_avg_length: float = constants.CATEGORICAL_MAX_AVG_LENGTH

    # Chart generation
    max_charts: int = constants.MAX_CHARTS
    chartable_text_max_unique: int = constants.CHARTABLE_TEXT_MAX_UNIQUE
    scatter_column_cap: int = constants.SCATTER_COLUMN_CAP
    bucket_column_ceiling: int = constants.BUCKET_COLUMN_CEILING

    # Report
    max_report_length: int = constants.MAX_REPORT_LENGTH

    # Budgets (seconds)
    analysis_timeout: float = constants.ANALYSIS_TIMEOUT
    column_analysis_timeout: float = constants.COLUMN_ANALYSIS_TIMEOUT
    chart_generation_timeout: float = constants.CHART_GENERATION_TIMEOUT
    insight_generation_timeout: float = constants.INSIGHT_GENERATION_TIMEOUT
    report_generation_timeout: float = constants.REPORT_GENERATION_TIMEOUT

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(
                    f"Config value '{f.name}' must be a number, got {type(value).__name__}",
                    field=f.name
                )
            if value < 0:
                raise ConfigError(f"Config value '{f.name}' must not be negative", field=f.name)
        for ratio in ("min_completeness", "min_consistency", "min_data_density",
                      "numeric_ratio_threshold", "datetime_ratio_threshold",
                      "categorical_unique_ratio"):
            if getattr(self, ratio) > 1:
                raise ConfigError(f"Config value '{ratio}' must be between 0 and 1", field=ratio)
        if self.max_charts < 1:
            raise ConfigError("Config value 'max_charts' must be at least 1", field="max_charts")
        if self.max_charts > constants.MAX_CHARTS:
            raise ConfigError(
                f"Config value 'max_charts' must not exceed {constants.MAX_CHARTS}",
                field="max_charts"
            )
        if self.max_report_length > constants.MAX_REPORT_LENGTH:
            raise ConfigError(
                f"Config value 'max_report_length' must not exceed {constants.MAX_REPORT_LENGTH:,}",
                field="max_report_length"
            )

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> "AnalysisConfig":
        """
        Build a config from the sectioned YAML structure.

        Expected shape:
            analysis:
              charts:
                max_charts: 50
              timeouts:
                analysis_timeout: 30

        Raises:
            ConfigError: Unknown section/key or invalid value
        """
        if not config_dict:
            return cls()
        if not isinstance(config_dict, dict) or "analysis" not in config_dict:
            raise ConfigError("Configuration must have an 'analysis' key")

        analysis = config_dict["analysis"] or {}
        if not isinstance(analysis, dict):
            raise ConfigError("'analysis' must be a mapping of sections", field="analysis")

        values: Dict[str, Any] = {}
        for section, section_values in analysis.items():
            if section not in CONFIG_SECTIONS:
                raise ConfigError(
                    f"Unknown config section '{section}'. "
                    f"Valid sections: {', '.join(CONFIG_SECTIONS)}",
                    field=f"analysis.{section}"
                )
            if not isinstance(section_values, dict):
                raise ConfigError(f"Section '{section}' must be a mapping", field=f"analysis.{section}")
            for key, value in section_values.items():
                if key not in CONFIG_SECTIONS[section]:
                    raise ConfigError(
                        f"Unknown key '{key}' in section '{section}'",
                        field=f"analysis.{section}.{key}"
                    )
                values[key] = value

        return cls(**values)

    @classmethod
    def from_yaml(cls, config_path: str) -> "AnalysisConfig":
        """
        Load configuration from YAML file with security validations.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            AnalysisConfig instance

        Raises:
            ConfigError: If file not found, too large, too deeply nested or invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > constants.MAX_YAML_FILE_SIZE:
            raise ConfigError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {constants.MAX_YAML_FILE_SIZE:,} bytes"
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                # Use safe_load to prevent code execution
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is not None:
            cls._validate_yaml_structure(config_dict)

        return cls.from_dict(config_dict)

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0,
                                 total_keys: Optional[List[int]] = None) -> None:
        """Reject excessively nested or oversized YAML structures."""
        if total_keys is None:
            total_keys = [0]

        if current_depth > constants.MAX_YAML_NESTING_DEPTH:
            raise ConfigError(
                f"YAML nesting depth exceeds maximum of {constants.MAX_YAML_NESTING_DEPTH} levels"
            )

        if isinstance(obj, dict):
            total_keys[0] += len(obj)
            if total_keys[0] > constants.MAX_YAML_KEY_COUNT:
                raise ConfigError(
                    f"YAML structure contains more than {constants.MAX_YAML_KEY_COUNT:,} keys/items"
                )
            for value in obj.values():
                cls._validate_yaml_structure(value, current_depth + 1, total_keys)

        elif isinstance(obj, list):
            total_keys[0] += len(obj)
            if total_keys[0] > constants.MAX_YAML_KEY_COUNT:
                raise ConfigError(
                    f"YAML structure contains more than {constants.MAX_YAML_KEY_COUNT:,} keys/items"
                )
            for item in obj:
                cls._validate_yaml_structure(item, current_depth + 1, total_keys)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the sectioned structure accepted by from_dict()."""
        flat = asdict(self)
        return {
            "analysis": {
                section: {key: flat[key] for key in keys}
                for section, keys in CONFIG_SECTIONS.items()
            }
        }

    def to_yaml(self) -> str:
        """Render as YAML text."""
        return yaml.safe_dump(self.to_dict(), sort_keys=False)


DEFAULT_CONFIG = AnalysisConfig()
