"""
Delimited-text parser for bulk customer uploads.

Usage:
    from churn_risk.parser import CsvParser

    result = CsvParser().parse(text)
    for record in result.records:
        ...
    for warning in result.warnings:
        print(warning)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

import pandas as pd

from .exceptions import ParseWarning, SchemaError
from .schemas import FIELDS, FIELDS_BY_NAME, REQUIRED_FIELDS

logger = logging.getLogger(__name__)

QUOTE_CHARS = ('"', "'")

NumericPolicy = Literal["zero", "missing", "strict"]

CustomerRecord = Dict[str, object]


@dataclass
class ParseResult:
    """
    Output of a parse.

    Attributes:
        records: One dict per accepted data row, keyed by schema field name
        rows: Input row number of each record (header is row 1)
        warnings: Data rows that were skipped
    """

    records: List[CustomerRecord]
    rows: List[int]
    warnings: List[ParseWarning] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [str(w) for w in self.warnings]

    def to_frame(self) -> pd.DataFrame:
        """Records as a DataFrame in schema column order."""
        return pd.DataFrame(
            self.records,
            columns=[spec.name for spec in FIELDS],
        )


def strip_quotes(value: str) -> str:
    """
    Remove one layer of surrounding quote characters.

    Inside a double-quoted value a doubled quote ("") stands for one quote,
    as written by standard CSV writers.
    """
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTE_CHARS:
        inner = value[1:-1]
        if value[0] == '"':
            return inner.replace('""', '"')
        return inner
    return value


class CsvParser:
    """
    Parse comma-delimited customer data into typed records.

    The first non-empty line is the header. Column names match schema
    fields case-insensitively; extra columns are ignored. Rows with the
    wrong number of values are skipped and reported as warnings.

    Numeric values that fail to parse are handled by numeric_policy:
    - "zero": substitute 0 (default)
    - "missing": keep None so the validator flags the field
    - "strict": raise SchemaError
    """

    def __init__(
        self,
        delimiter: str = ",",
        numeric_policy: NumericPolicy = "zero",
    ):
        if numeric_policy not in ("zero", "missing", "strict"):
            raise ValueError(f"Unknown numeric policy: {numeric_policy}")
        self.delimiter = delimiter
        self.numeric_policy = numeric_policy

    def _split(self, line: str) -> List[str]:
        """
        Split on the delimiter, except inside double quotes.

        Values keep their quote characters; strip_quotes removes them.
        """
        values = []
        current: List[str] = []
        in_quotes = False
        for char in line:
            if char == '"':
                in_quotes = not in_quotes
            if char == self.delimiter and not in_quotes:
                values.append("".join(current))
                current = []
            else:
                current.append(char)
        values.append("".join(current))
        return values

    def _read_header(self, line: str) -> List[str]:
        header = [strip_quotes(name).lower() for name in self._split(line)]
        missing = [name for name in REQUIRED_FIELDS if name not in header]
        if missing:
            raise SchemaError(f"Missing required columns: {', '.join(missing)}")
        return header

    def _coerce_numeric(self, name: str, value: str, row: int) -> Optional[float]:
        try:
            number = FIELDS_BY_NAME[name].parse_number(value)
        except ValueError:
            number = None
            if self.numeric_policy == "strict":
                raise SchemaError(
                    f"Row {row}: {name} value {value!r} is not a number"
                ) from None
        if number is None and self.numeric_policy == "zero":
            return 0.0
        return number

    def parse(self, text: str) -> ParseResult:
        """
        Parse delimited text.

        Args:
            text: Raw file contents, header first

        Returns:
            ParseResult with records in input order

        Raises:
            SchemaError: If there are no data rows or required columns
                are missing from the header
        """
        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            raise SchemaError("Input must contain a header row and at least one data row")

        header = self._read_header(lines[0])
        positions = {}
        for i, name in enumerate(header):
            positions.setdefault(name, i)

        records: List[CustomerRecord] = []
        rows: List[int] = []
        warnings: List[ParseWarning] = []

        for row, line in enumerate(lines[1:], start=2):
            values = self._split(line)
            if len(values) != len(header):
                warning = ParseWarning(
                    row=row,
                    message=(
                        f"expected {len(header)} values, found {len(values)}; "
                        "row skipped"
                    ),
                )
                logger.warning("Skipping malformed row: %s", warning)
                warnings.append(warning)
                continue

            record: CustomerRecord = {}
            for spec in FIELDS:
                raw = strip_quotes(values[positions[spec.name]])
                if spec.is_numeric:
                    record[spec.name] = self._coerce_numeric(spec.name, raw, row)
                else:
                    record[spec.name] = raw
            records.append(record)
            rows.append(row)

        logger.info(
            "Parsed %d record(s), skipped %d row(s)", len(records), len(warnings)
        )
        return ParseResult(records=records, rows=rows, warnings=warnings)


def parse(text: str, numeric_policy: NumericPolicy = "zero") -> ParseResult:
    """Parse comma-delimited text with the default parser."""
    return CsvParser(numeric_policy=numeric_policy).parse(text)
