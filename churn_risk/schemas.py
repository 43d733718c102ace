"""
Customer record schema.

FIELDS is the single source of truth for the 14 input fields: the parser
uses it for type coercion, the validator for presence and constraint checks.
Range and enum rules are also compiled into a Pandera DataFrameSchema so a
whole batch can be checked in one lazy pass.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from pandera import Column, Check, DataFrameSchema


CONTRACT_TYPES = ("monthly", "annual", "prepaid", "postpaid")


@dataclass(frozen=True)
class FieldSpec:
    """Name, semantic type and constraint of one input field."""

    name: str
    kind: str  # integer | decimal | enum | string
    required: bool = True
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Optional[Tuple[Any, ...]] = None
    description: str = ""

    @property
    def is_numeric(self) -> bool:
        return self.kind in ("integer", "decimal")

    def coerce(self, value: Any) -> Any:
        """
        Normalize a raw value to this field's type.

        Returns None for absent or blank values.

        Raises:
            ValueError: If the value cannot be converted
        """
        if self.is_numeric:
            number = self.parse_number(value)
            if number is not None and self.kind == "integer" and not number.is_integer():
                raise ValueError(f"{self.name} must be a whole number")
            return number
        if value is None:
            return None
        if isinstance(value, float) and math.isnan(value):
            return None
        text = str(value).strip()
        if not text:
            return None
        if self.kind == "enum":
            return text.lower()
        return text

    def parse_number(self, value: Any) -> Optional[float]:
        """
        Locale-independent float parsing, without the whole-number rule.

        Raises:
            ValueError: If the value is not a finite number
        """
        if value is None:
            return None
        if isinstance(value, float) and math.isnan(value):
            return None
        if isinstance(value, bool):
            raise ValueError(f"{self.name} must be numeric")
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            text = str(value).strip()
            if not text:
                return None
            try:
                number = float(text)
            except ValueError:
                raise ValueError(f"{self.name} must be numeric") from None
        if not math.isfinite(number):
            raise ValueError(f"{self.name} must be numeric")
        return number

    def constraint_message(self) -> str:
        """Human-readable description of the field's constraint."""
        if self.choices is not None:
            allowed = ", ".join(str(c) for c in self.choices)
            return f"{self.name} must be one of: {allowed}"
        if self.minimum is not None and self.maximum is not None:
            return f"{self.name} must be between {self.minimum:g} and {self.maximum:g}"
        if self.minimum is not None:
            return f"{self.name} must be >= {self.minimum:g}"
        if self.maximum is not None:
            return f"{self.name} must be <= {self.maximum:g}"
        return f"{self.name} is invalid"

    def checks(self) -> list:
        checks = []
        if self.choices is not None:
            checks.append(Check.isin(list(self.choices)))
        if self.minimum is not None:
            checks.append(Check.greater_than_or_equal_to(self.minimum))
        if self.maximum is not None:
            checks.append(Check.less_than_or_equal_to(self.maximum))
        return checks


FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("customer_id", "string", description="Unique customer identifier"),
    FieldSpec("monthly_sms", "integer", minimum=0, description="SMS sent per month"),
    FieldSpec("monthly_minutes", "integer", minimum=0, description="Call minutes per month"),
    FieldSpec("monthly_data_gb", "decimal", minimum=0, description="Data usage per month (GB)"),
    FieldSpec("monthly_charge", "decimal", minimum=0, description="Monthly bill (GHS)"),
    FieldSpec("late_payments", "integer", minimum=0, description="Number of late payments"),
    FieldSpec("is_fraud", "integer", choices=(0, 1), description="Fraud flag (0 or 1)"),
    FieldSpec("international_calls", "integer", minimum=0, description="International calls per month"),
    FieldSpec("device_age_months", "integer", minimum=0, description="Age of handset in months"),
    FieldSpec("customer_service_calls", "integer", minimum=0, description="Support calls placed"),
    FieldSpec("contract_type", "enum", choices=CONTRACT_TYPES, description="Contract type"),
    FieldSpec("city", "string", description="Customer city"),
    FieldSpec("age", "integer", minimum=18, maximum=100, description="Customer age in years"),
    FieldSpec("account_length_months", "integer", minimum=0, description="Account tenure in months"),
)

FIELDS_BY_NAME = {spec.name: spec for spec in FIELDS}
FIELD_NAMES = [spec.name for spec in FIELDS]
REQUIRED_FIELDS = [spec.name for spec in FIELDS if spec.required]
NUMERIC_FIELDS = [spec.name for spec in FIELDS if spec.is_numeric]


def build_constraint_schema() -> DataFrameSchema:
    """
    Pandera schema for the constraint pass.

    Expects values already coerced by FieldSpec.coerce (floats for numeric
    fields, lower-case strings for enums). Nulls are allowed here because
    presence is checked separately, and checks skip nulls.
    """
    columns = {}
    for spec in FIELDS:
        checks = spec.checks()
        if not checks:
            continue
        dtype = float if spec.is_numeric else None
        columns[spec.name] = Column(
            dtype,
            nullable=True,
            checks=checks,
            description=spec.description,
        )
    return DataFrameSchema(
        columns,
        strict=False,  # Allow other columns
        description="Range and enum constraints for customer records",
    )


CONSTRAINT_SCHEMA = build_constraint_schema()


# Schema for scored output rows
ASSESSMENT_OUTPUT_SCHEMA = DataFrameSchema(
    {
        "customer_id": Column(str, nullable=False),
        "risk_score": Column(
            int,
            nullable=False,
            checks=[
                Check.greater_than_or_equal_to(0),
                Check.less_than_or_equal_to(5),
            ],
        ),
        "churn_probability": Column(
            float,
            nullable=False,
            checks=Check.in_range(0.0, 1.0),
        ),
        "risk_level": Column(
            str,
            nullable=False,
            checks=Check.isin(["LOW", "MEDIUM", "HIGH"]),
        ),
    },
    strict=False,  # Allow indicator columns
    description="Schema for heuristic scoring output",
)
