"""Configuration loader and validation for reconciliation settings."""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CsvInputConfig(BaseModel):
    """Configuration for importing one ledger from CSV."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: str = "%m/%d/%Y"
    column_mappings: dict[str, str] = Field(default_factory=dict)


class InputConfig(BaseModel):
    """Configuration for CSV imports."""

    check_register: CsvInputConfig = Field(
        default_factory=lambda: CsvInputConfig(
            column_mappings={
                "date": "Date",
                "check_number": "Check Number",
                "description": "Description",
                "withdrawal": "Withdrawal",
                "deposit": "Deposit",
                "balance": "Balance",
                "status": "Status",
            }
        )
    )
    bank_feed: CsvInputConfig = Field(
        default_factory=lambda: CsvInputConfig(
            column_mappings={
                "transaction_id": "Transaction ID",
                "date": "Date",
                "description": "Description",
                "amount": "Amount",
                "balance": "Balance",
            }
        )
    )


class MatchingTier(BaseModel):
    """One matching pass and its date tolerance."""

    tier: int
    name: str
    description: str = ""
    enabled: bool = True
    # 0 means the calendar days must be identical
    date_tolerance_days: int = 0


class MatchingConfig(BaseModel):
    """Configuration for the tiered matcher."""

    similarity_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    amount_tolerance: float = Field(default=0.01, gt=0.0)
    tiers: list[MatchingTier] = Field(
        default_factory=lambda: [
            MatchingTier(tier=1, name="exact_date", date_tolerance_days=0),
            MatchingTier(tier=2, name="within_7_days", date_tolerance_days=7),
            MatchingTier(tier=3, name="within_30_days", date_tolerance_days=30),
        ]
    )

    def get_tier(self, tier: int) -> Optional[MatchingTier]:
        return next((t for t in self.tiers if t.tier == tier), None)


class LedgerConfig(BaseModel):
    """Layout of the ledger workbook used as the record store."""

    check_register_sheet: str = "Check Register"
    bank_statement_sheet: str = "Bank Statement"
    reconciliation_sheet: str = "Reconciliation"
    beginning_balance_label: str = "Beginning Balance"
    check_columns: dict[str, str] = Field(
        default_factory=lambda: {
            "date": "Date",
            "check_number": "Check Number",
            "description": "Description",
            "withdrawal": "Withdrawal",
            "deposit": "Deposit",
            "balance": "Balance",
            "status": "Status",
        }
    )
    bank_columns: dict[str, str] = Field(
        default_factory=lambda: {
            "transaction_id": "Transaction ID",
            "date": "Date",
            "description": "Description",
            "amount": "Amount",
            "balance": "Balance",
        }
    )
    tier_colors: dict[int, str] = Field(
        default_factory=lambda: {1: "C6EFCE", 2: "FFEB9C", 3: "F8CBAD"}
    )


class LockConfig(BaseModel):
    """Configuration for the exclusive ledger lock."""

    timeout_seconds: float = Field(default=10.0, gt=0.0)
    poll_interval_seconds: float = Field(default=0.1, gt=0.0)
    lock_file_suffix: str = ".lock"


class OutputConfig(BaseModel):
    """Configuration for the Excel run report."""

    filename_template: str = "match_run_{date}_{time}.xlsx"
    summary_sheet: str = "Summary"
    matched_sheet: str = "Matched"
    outstanding_checks_sheet: str = "Outstanding Checks"
    unmatched_bank_sheet: str = "Unmatched Bank"

    def report_filename(self, run_at: datetime) -> str:
        """
        Fill the filename template with the run date (YYYYMMDD) and time (HHMMSS).

        Raises:
            ConfigurationError: If the template uses other placeholders
        """
        try:
            return self.filename_template.format(
                date=run_at.strftime("%Y%m%d"),
                time=run_at.strftime("%H%M%S"),
            )
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid output.filename_template '{self.filename_template}': {e!r}"
            ) from e


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return ReconConfig().model_dump(exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be read or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read configuration {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration {config_path} must contain a mapping at the top level"
            )

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Lists (such as the tier list) are replaced, not merged.
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

    yaml_content = """# Check register / bank feed reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
