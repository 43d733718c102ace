"""
Tests for the command-line interface.
"""

import re

import pandas as pd

from churn_risk.cli import build_parser, main

from conftest import make_record, to_csv_text


def write_input(tmp_path, records):
    path = tmp_path / "customers.csv"
    path.write_text(to_csv_text(records))
    return path


class TestScoreCommand:

    def test_scores_and_writes_export(self, tmp_path, capsys):
        path = write_input(tmp_path, [make_record(), make_record(customer_id="CUST_002")])
        out_dir = tmp_path / "exports"

        code = main(["score", str(path), "--output-dir", str(out_dir), "--seed", "1"])

        assert code == 0
        output = capsys.readouterr().out
        assert re.search(r"Customers:\s+2\n", output)
        assert "Results saved to:" in output
        exports = list(out_dir.glob("churn_predictions_*.csv"))
        assert len(exports) == 1
        assert len(pd.read_csv(exports[0])) == 2

    def test_missing_input(self, tmp_path, capsys):
        code = main(["score", str(tmp_path / "nope.csv")])

        assert code == 1
        assert "Input not found" in capsys.readouterr().out

    def test_validation_failure_lists_issues(self, tmp_path, capsys):
        path = write_input(tmp_path, [make_record(age=10.0)])

        code = main(["score", str(path), "--output-dir", str(tmp_path)])

        output = capsys.readouterr().out
        assert code == 1
        assert "VALIDATION FAILED: 1 issue(s)" in output
        assert "Row 2: age must be between 18 and 100" in output

    def test_partial_flag(self, tmp_path, capsys):
        path = write_input(tmp_path, [make_record(age=10.0), make_record(customer_id="B")])

        code = main(["score", str(path), "--partial", "--output-dir", str(tmp_path)])

        assert code == 0
        assert re.search(r"Failed:\s+1\n", capsys.readouterr().out)

    def test_schema_error(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("customer_id\nCUST_001\n")

        code = main(["score", str(path)])

        assert code == 1
        assert "SCHEMA ERROR" in capsys.readouterr().out

    def test_config_file_and_logs(self, tmp_path, capsys):
        config_path = tmp_path / "pipeline.yaml"
        config_path.write_text("seed: 3\nscoring:\n  noise_scale: 0.0\n")
        logs_dir = tmp_path / "logs"
        path = write_input(tmp_path, [make_record()])

        code = main([
            "score", str(path),
            "--config", str(config_path),
            "--logs-dir", str(logs_dir),
            "--output-dir", str(tmp_path),
        ])

        assert code == 0
        assert len(list(logs_dir.glob("run_*.json"))) == 1


class TestOtherCommands:

    def test_sample(self, capsys):
        code = main(["sample", "5", "--seed", "1"])

        lines = capsys.readouterr().out.strip().splitlines()
        assert code == 0
        assert len(lines) == 6
        assert lines[0].startswith("customer_id,monthly_sms")

    def test_runs_empty(self, tmp_path, capsys):
        code = main(["runs", "--logs-dir", str(tmp_path)])

        assert code == 0
        assert "No runs found." in capsys.readouterr().out

    def test_runs_after_score(self, tmp_path, capsys):
        path = write_input(tmp_path, [make_record()])
        logs_dir = tmp_path / "logs"
        main(["score", str(path), "--logs-dir", str(logs_dir), "--output-dir", str(tmp_path)])
        capsys.readouterr()

        code = main(["runs", "--logs-dir", str(logs_dir)])

        assert code == 0
        assert "SUCCESS" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_remote_options_parsed(self):
        args = build_parser().parse_args([
            "score", "in.csv", "--remote", "https://x.example.com", "--timeout", "3", "--fallback",
        ])

        assert args.remote == "https://x.example.com"
        assert args.timeout == 3.0
        assert args.fallback
