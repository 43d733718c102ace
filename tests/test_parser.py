"""
Tests for delimited-text parsing.
"""

import pytest

from churn_risk.exceptions import SchemaError
from churn_risk.parser import CsvParser, parse, strip_quotes
from churn_risk.schemas import FIELD_NAMES

from conftest import HEADER, make_record, to_csv_text


ROW = "CUST_001,40,120,3.5,45,0,0,1,12,1,monthly,Accra,34,24"


class TestHeader:
    """Header and structure checks."""

    def test_header_only_raises(self):
        """A header without data rows is a schema error."""
        with pytest.raises(SchemaError, match="at least one data row"):
            parse(HEADER + "\n")

    def test_empty_input_raises(self):
        with pytest.raises(SchemaError):
            parse("")

    def test_missing_columns_listed_together(self):
        """Every missing column appears in one error."""
        header = "customer_id,monthly_sms,monthly_minutes"
        with pytest.raises(SchemaError) as exc_info:
            parse(header + "\nCUST_001,1,2\n")

        message = str(exc_info.value)
        assert "monthly_charge" in message
        assert "age" in message
        assert "account_length_months" in message
        assert "customer_id" not in message

    def test_header_case_insensitive(self):
        """Column names match regardless of case."""
        result = parse(HEADER.upper() + "\n" + ROW)

        assert len(result.records) == 1
        assert result.records[0]["customer_id"] == "CUST_001"

    def test_columns_in_any_order(self):
        """Values are matched by header name, not position."""
        names = HEADER.split(",")
        values = ROW.split(",")
        text = ",".join(reversed(names)) + "\n" + ",".join(reversed(values))

        record = parse(text).records[0]
        assert record["customer_id"] == "CUST_001"
        assert record["age"] == 34.0

    def test_extra_columns_ignored(self):
        result = parse(HEADER + ",notes\n" + ROW + ",vip")

        assert set(result.records[0]) == set(FIELD_NAMES)


class TestRows:
    """Row-level parsing."""

    def test_records_have_every_field(self, csv_text):
        result = parse(csv_text)

        assert len(result.records) == 3
        for record in result.records:
            assert set(record) == set(FIELD_NAMES)

    def test_order_preserved(self, csv_text):
        result = parse(csv_text)

        ids = [r["customer_id"] for r in result.records]
        assert ids == ["CUST_001", "CUST_002", "CUST_003"]

    def test_numeric_fields_are_floats(self):
        record = parse(HEADER + "\n" + ROW).records[0]

        assert record["monthly_charge"] == 45.0
        assert isinstance(record["late_payments"], float)
        assert record["city"] == "Accra"

    def test_wrong_value_count_skipped_with_warning(self):
        """Rows with too few or too many values are skipped, not fatal."""
        text = "\n".join([
            HEADER,
            ROW,
            "CUST_002,1,2,3",
            ROW.replace("CUST_001", "CUST_003") + ",extra",
            ROW.replace("CUST_001", "CUST_004"),
        ])
        result = parse(text)

        assert [r["customer_id"] for r in result.records] == ["CUST_001", "CUST_004"]
        assert [w.row for w in result.warnings] == [3, 4]
        assert "row skipped" in result.messages[0]

    def test_record_count_never_exceeds_rows(self, sample_data):
        text = sample_data.to_csv(index=False)
        result = parse(text)

        assert len(result.records) <= len(sample_data)

    def test_blank_lines_ignored(self):
        result = parse("\n" + HEADER + "\n\n" + ROW + "\n\n")

        assert len(result.records) == 1
        assert result.rows == [2]

    def test_row_numbers_account_for_header(self, csv_text):
        result = parse(csv_text)

        assert result.rows == [2, 3, 4]

    def test_quoted_values_unwrapped(self):
        row = '"CUST_001",40,120,3.5,45,0,0,1,12,1,\'monthly\',"Cape Coast, Central",34,24'
        record = parse(HEADER + "\n" + row).records[0]

        assert record["customer_id"] == "CUST_001"
        assert record["contract_type"] == "monthly"
        assert record["city"] == "Cape Coast, Central"

    def test_only_one_quote_layer_removed(self):
        """A CSV-quoted value keeps the quotes written inside it."""
        row = "\"'C1'\",40,120,3.5,45,0,0,1,12,1,monthly,'\"Accra\"',34,24"
        record = parse(HEADER + "\n" + row).records[0]

        assert record["customer_id"] == "'C1'"
        assert record["city"] == '"Accra"'

    def test_doubled_quotes_collapse(self):
        row = '"CUST ""A""",40,120,3.5,45,0,0,1,12,1,monthly,Accra,34,24'
        record = parse(HEADER + "\n" + row).records[0]

        assert record["customer_id"] == 'CUST "A"'

    def test_whitespace_trimmed(self):
        row = " CUST_001 , 40,120,3.5,45 ,0,0,1,12,1, monthly ,Accra,34,24"
        record = parse(HEADER + "\n" + row).records[0]

        assert record["customer_id"] == "CUST_001"
        assert record["monthly_charge"] == 45.0
        assert record["contract_type"] == "monthly"

    def test_to_frame_columns(self, csv_text):
        df = parse(csv_text).to_frame()

        assert list(df.columns) == FIELD_NAMES
        assert len(df) == 3


class TestNumericPolicy:
    """Handling of numbers that fail to parse."""

    BAD_ROW = "CUST_001,forty,120,3.5,45,0,0,1,12,1,monthly,Accra,,24"

    def test_zero_policy_substitutes_zero(self):
        record = parse(HEADER + "\n" + self.BAD_ROW).records[0]

        assert record["monthly_sms"] == 0.0
        assert record["age"] == 0.0

    def test_missing_policy_keeps_none(self):
        record = parse(HEADER + "\n" + self.BAD_ROW, numeric_policy="missing").records[0]

        assert record["monthly_sms"] is None
        assert record["age"] is None

    def test_strict_policy_raises(self):
        with pytest.raises(SchemaError, match="monthly_sms"):
            parse(HEADER + "\n" + self.BAD_ROW, numeric_policy="strict")

    @pytest.mark.parametrize("policy", ["zero", "missing", "strict"])
    def test_fractional_integer_kept_for_validator(self, policy):
        """A fractional count is a number; the validator rejects it, not the parser."""
        row = ROW.replace(",45,0,0,", ",45,3.5,0,")
        record = parse(HEADER + "\n" + row, numeric_policy=policy).records[0]

        assert record["late_payments"] == 3.5

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            CsvParser(numeric_policy="lenient")

    def test_locale_independent(self):
        """Comma decimal separators are not numbers."""
        row = ROW.replace(",3.5,", ',"3,5",')
        record = parse(HEADER + "\n" + row, numeric_policy="missing").records[0]

        assert record["monthly_data_gb"] is None


class TestStripQuotes:

    @pytest.mark.parametrize("raw,expected", [
        ('"abc"', "abc"),
        ("'abc'", "abc"),
        ('""abc""', '"abc"'),
        ('"abc', '"abc'),
        ("abc", "abc"),
        ('"', '"'),
    ])
    def test_single_layer_only(self, raw, expected):
        assert strip_quotes(raw) == expected


def test_round_trip_from_records():
    """Records written as CSV parse back to the same values."""
    records = [make_record(customer_id=f"CUST_{i}") for i in range(5)]
    parsed = parse(to_csv_text(records)).records

    assert parsed == records
