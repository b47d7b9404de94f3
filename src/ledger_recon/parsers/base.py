"""Shared CSV reading for check register and bank feed exports."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..config import CsvInputConfig
from ..utils.exceptions import ParseError
from ..utils.values import parse_amount

logger = logging.getLogger(__name__)


class CsvLedgerParser:
    """
    Base class for CSV ledger parsers.

    Subclasses turn DataFrame rows into ledger items using the configured
    column mappings.
    """

    source_name = "ledger"

    def __init__(self, input_config: CsvInputConfig):
        """
        Args:
            input_config: Encoding, delimiter, date format and column mappings
        """
        self.input_config = input_config
        self.column_mappings = input_config.column_mappings

    def read_frame(self, file_path: Path) -> pd.DataFrame:
        """
        Read a CSV file into a DataFrame of strings.

        Raises:
            ParseError: If the file cannot be read
        """
        logger.info(f"Parsing {self.source_name} CSV file: {file_path}")

        try:
            df = pd.read_csv(
                file_path,
                encoding=self.input_config.encoding,
                delimiter=self.input_config.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise ParseError(f"Failed to read {self.source_name} CSV file {file_path}: {e}") from e

        return df

    def column(self, field_name: str) -> str:
        return self.column_mappings.get(field_name, field_name)

    def text(self, row: pd.Series, field_name: str) -> str:
        value = row.get(self.column(field_name))
        if value is None or pd.isna(value):
            return ""
        return str(value).strip()

    def parse_date(self, date_value) -> Optional[date]:
        """
        Parse a date using the configured format, falling back to pandas.

        Returns:
            Calendar day or None if the value is empty or unparsable
        """
        if date_value is None or (not isinstance(date_value, str) and pd.isna(date_value)):
            return None
        if isinstance(date_value, datetime):
            return date_value.date()
        if isinstance(date_value, date):
            return date_value

        text = str(date_value).strip()
        if not text:
            return None

        try:
            return datetime.strptime(text, self.input_config.date_format).date()
        except ValueError:
            try:
                return pd.to_datetime(text).date()
            except (ValueError, TypeError):
                return None

    def parse_amount(self, amount_value) -> Optional[Decimal]:
        """Parse a currency value such as "$1,234.56" or "(12.00)"."""
        return parse_amount(amount_value)
