"""
Record validation.

Two passes over a batch:
1. Presence and type: every required field must be present, non-blank and
   convertible to its schema type.
2. Constraints: range and enum rules, run as one lazy Pandera validation so
   every failing cell is reported, not just the first.

Validation is exhaustive. A batch with N independent violations yields N
issues.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import pandas as pd
import pandera as pa

from .exceptions import ValidationFailed, ValidationIssue
from .schemas import CONSTRAINT_SCHEMA, FIELDS, FIELDS_BY_NAME

FIELD_ORDER = {spec.name: i for i, spec in enumerate(FIELDS)}


class RecordValidator:
    """Check customer records against the schema."""

    def __init__(self, schema: pa.DataFrameSchema = CONSTRAINT_SCHEMA):
        self.schema = schema

    def _coerce_records(
        self, records: Sequence[Mapping]
    ) -> Tuple[List[Dict[str, object]], List[Tuple[int, str, str]]]:
        """Coerce every field, collecting presence/type failures."""
        coerced = []
        failures = []
        for i, record in enumerate(records):
            values: Dict[str, object] = {}
            for spec in FIELDS:
                try:
                    value = spec.coerce(record.get(spec.name))
                except ValueError as exc:
                    failures.append((i, spec.name, str(exc)))
                    value = None
                else:
                    if value is None and spec.required:
                        failures.append((i, spec.name, f"{spec.name} is required"))
                values[spec.name] = value
            coerced.append(values)
        return coerced, failures

    def _constraint_failures(
        self, coerced: List[Dict[str, object]]
    ) -> Set[Tuple[int, str]]:
        """Cells failing a range or enum check."""
        frame = pd.DataFrame(
            {
                spec.name: pd.Series(
                    [values[spec.name] for values in coerced],
                    dtype=float if spec.is_numeric else object,
                )
                for spec in FIELDS
            }
        )
        try:
            self.schema.validate(frame, lazy=True)
        except pa.errors.SchemaErrors as err:
            cases = err.failure_cases
            failed = set()
            for index, column in zip(cases["index"], cases["column"]):
                if pd.isna(index) or column not in FIELDS_BY_NAME:
                    continue
                failed.add((int(index), column))
            return failed
        return set()

    def validate(
        self,
        records: Sequence[Mapping],
        rows: Optional[Sequence[int]] = None,
    ) -> List[ValidationIssue]:
        """
        Validate a batch of records.

        Args:
            records: Parsed or form-submitted records
            rows: Input row number for each record. Defaults to position + 2
                (first data row after the header).

        Returns:
            Issues ordered by row, then by schema field order
        """
        if rows is None:
            rows = [i + 2 for i in range(len(records))]

        coerced, failures = self._coerce_records(records)
        found = {(i, name): message for i, name, message in failures}

        if coerced:
            for i, name in self._constraint_failures(coerced):
                found.setdefault((i, name), FIELDS_BY_NAME[name].constraint_message())

        ordered = sorted(found.items(), key=lambda item: (item[0][0], FIELD_ORDER[item[0][1]]))
        return [
            ValidationIssue(row=rows[i], field=name, message=message)
            for (i, name), message in ordered
        ]

    def ensure_valid(
        self,
        records: Sequence[Mapping],
        rows: Optional[Sequence[int]] = None,
    ) -> None:
        """
        Raise if any record has an issue.

        Raises:
            ValidationFailed: Carrying the full issue list
        """
        issues = self.validate(records, rows)
        if issues:
            raise ValidationFailed(issues)


def invalid_rows(issues: Iterable[ValidationIssue]) -> Set[int]:
    """Row numbers that have at least one issue."""
    return {issue.row for issue in issues}


def validate(
    records: Sequence[Mapping],
    rows: Optional[Sequence[int]] = None,
) -> List[ValidationIssue]:
    """Validate with the default schema."""
    return RecordValidator().validate(records, rows)


def normalize_record(record: Mapping) -> Dict[str, object]:
    """
    Coerce every schema field of an already validated record.

    Numeric fields become floats and contract_type is lower-cased.
    """
    return {spec.name: spec.coerce(record.get(spec.name)) for spec in FIELDS}
