"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Literal, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Canonical field names resolved by the normalizer
CANONICAL_FIELDS = (
    "date",
    "counterparty",
    "gross_amount",
    "discount_amount",
    "category",
)


class DatasetConfig(BaseModel):
    """Column aliases and parsing rules for one dataset."""

    name: str
    header_match: Literal["exact", "normalized"] = "normalized"
    column_aliases: dict[str, list[str]] = Field(default_factory=dict)
    required_columns: list[str] = Field(default_factory=list)
    date_formats: list[str] = Field(
        default_factory=lambda: ["%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y"]
    )
    excel_serial_dates: bool = True

    def aliases_for(self, field_name: str) -> list[str]:
        """Configured header aliases for a canonical field, in priority order."""
        return self.column_aliases.get(field_name, [])


class LabelRules(BaseModel):
    """Normalization rules for category labels and counterparty names."""

    strip_prefixes: list[str] = Field(default_factory=lambda: ["Credit "])
    aliases: dict[str, str] = Field(
        default_factory=lambda: {
            "American": "American Express",
            "Amex": "American Express",
        }
    )
    generic_cardholder: str = "CARDHOLDER"
    cardholder_variants: list[str] = Field(
        default_factory=lambda: [
            "CARDHOLDER",
            "CARD HOLDER",
            "CARD-HOLDER",
            "CARDHOLDER NAME",
            "VALUED CARDHOLDER",
        ]
    )


class CategoryRule(BaseModel):
    """Substring that maps a label onto a canonical category."""

    contains: str
    category: str


class CategoryConfig(BaseModel):
    """Category canonicalization and ordering for the totals section."""

    default_categories: list[str] = Field(
        default_factory=lambda: ["Visa", "Mastercard", "American Express", "Discover"]
    )
    rules: list[CategoryRule] = Field(
        default_factory=lambda: [
            CategoryRule(contains="visa", category="Visa"),
            CategoryRule(contains="mastercard", category="Mastercard"),
            CategoryRule(contains="master", category="Mastercard"),
            CategoryRule(contains="american express", category="American Express"),
            CategoryRule(contains="amex", category="American Express"),
            CategoryRule(contains="american", category="American Express"),
            CategoryRule(contains="discover", category="Discover"),
        ]
    )
    excluded_tokens: list[str] = Field(default_factory=lambda: ["cash"])


class MatchingConfig(BaseModel):
    """Configuration for the matching engine."""

    amount_epsilon: float = Field(default=0.01, gt=0)
    max_rows: int = Field(default=20000, gt=0)
    bucket_by_date: bool = True


class OutputConfig(BaseModel):
    """Configuration for the result table and Excel output."""

    detail_headers: list[str] = Field(
        default_factory=lambda: [
            "Date",
            "Customer Name",
            "Total Transaction Amount",
            "Cash Discounting Amount",
            "Card Brand",
            "Total (-) Fee",
        ]
    )
    summary_headers: list[str] = Field(
        default_factory=lambda: ["Category", "Hub Report", "Sales Report", "Difference"]
    )
    total_label: str = "Total"
    display_date_format: str = "%m/%d/%Y"
    sheet_name: str = "Reconciliation"
    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown logging level {value!r}")
        return level


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    hub: DatasetConfig
    sales: DatasetConfig
    labels: LabelRules = Field(default_factory=LabelRules)
    categories: CategoryConfig = Field(default_factory=CategoryConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "hub": {
            "name": "hub",
            "header_match": "exact",
            "column_aliases": {
                "date": ["Date"],
                "counterparty": ["Customer Name"],
                "gross_amount": ["Total Transaction Amount"],
                "discount_amount": ["Cash Discounting Amount"],
                "category": ["Card Brand"],
            },
            "required_columns": [],
            "date_formats": ["%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y"],
            "excel_serial_dates": True,
        },
        "sales": {
            "name": "sales",
            "header_match": "normalized",
            "column_aliases": {
                "date": ["Date Closed", "Date"],
                "counterparty": ["Customer Name", "Customer"],
                "gross_amount": ["Amount", "Total"],
                "discount_amount": [],
                "category": ["Name", "Card Brand", "Card Type"],
            },
            "required_columns": ["date", "gross_amount", "category"],
            "date_formats": ["%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y"],
            "excel_serial_dates": True,
        },
        "labels": {
            "strip_prefixes": ["Credit "],
            "aliases": {
                "American": "American Express",
                "Amex": "American Express",
            },
            "generic_cardholder": "CARDHOLDER",
            "cardholder_variants": [
                "CARDHOLDER",
                "CARD HOLDER",
                "CARD-HOLDER",
                "CARDHOLDER NAME",
                "VALUED CARDHOLDER",
            ],
        },
        "categories": {
            "default_categories": ["Visa", "Mastercard", "American Express", "Discover"],
            # Checked in order; the first substring found in the label wins
            "rules": [
                {"contains": "visa", "category": "Visa"},
                {"contains": "mastercard", "category": "Mastercard"},
                {"contains": "master", "category": "Mastercard"},
                {"contains": "american express", "category": "American Express"},
                {"contains": "amex", "category": "American Express"},
                {"contains": "american", "category": "American Express"},
                {"contains": "discover", "category": "Discover"},
            ],
            "excluded_tokens": ["cash"],
        },
        "matching": {
            "amount_epsilon": 0.01,
            "max_rows": 20000,
            "bucket_by_date": True,
        },
        "output": {
            "detail_headers": [
                "Date",
                "Customer Name",
                "Total Transaction Amount",
                "Cash Discounting Amount",
                "Card Brand",
                "Total (-) Fee",
            ],
            "summary_headers": ["Category", "Hub Report", "Sales Report", "Difference"],
            "total_label": "Total",
            "display_date_format": "%m/%d/%Y",
            "sheet_name": "Reconciliation",
            "filename_template": "reconciliation_report_{date}_{time}.xlsx",
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def build_config(overrides: Optional[dict[str, Any]] = None) -> ReconConfig:
    """
    Build a configuration from the defaults plus in-memory overrides.

    Args:
        overrides: Partial configuration merged over the defaults

    Returns:
        Validated ReconConfig

    Raises:
        ConfigurationError: If the merged settings fail validation
    """
    config_dict = get_default_config()
    if overrides:
        config_dict = _deep_merge(config_dict, overrides)

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping"
            )

        config = build_config(user_config)
        config.config_file_path = str(config_path)
        return config

    logger.info("Using default configuration")
    return build_config()


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Lists are replaced, not concatenated, so a user alias list fully
    overrides the default one.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Hub / Sales Reconciliation Configuration
# Generated configuration file - customize column aliases and categories per client

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
