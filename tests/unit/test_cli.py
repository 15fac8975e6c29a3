"""
Unit tests for the command-line interface.

Only dry runs are exercised here; they need neither the catalog service
nor PostgreSQL.
"""

import json
import os

import pytest

from catalog_ingest.cli.batch_cli import build_parser, main


@pytest.fixture
def products_csv(test_data_dir):
    return os.path.join(test_data_dir, "products.csv")


class TestProcessCommand:
    """Tests for the process sub-command"""

    def test_dry_run(self, products_csv, capsys):
        exit_code = main(["process", "--input", products_csv, "--dry-run"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["status"] == "completed"
        assert output["total_items"] == 6
        assert output["processed_items"] == 6
        assert output["batch_id"].startswith("batch_")

    def test_dry_run_small_chunks_enqueued(self, products_csv, capsys):
        exit_code = main([
            "process", "--input", products_csv, "--dry-run",
            "--enqueue", "--chunk-size", "2", "--workers", "3",
        ])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["status"] == "completed"
        assert output["processed_items"] == 6

    def test_parse_failure_exit_code(self, test_data_dir, capsys):
        exit_code = main([
            "process", "--input", os.path.join(test_data_dir, "dirty_products.csv"), "--dry-run",
        ])
        assert exit_code == 1
        assert capsys.readouterr().out == ""

    def test_undecodable_input_exit_code(self, tmp_path, capsys):
        path = tmp_path / "latin1.csv"
        path.write_bytes("familyFederatedId,title,details\nfam1,Caf\u00e9,D\n".encode("latin-1"))
        assert main(["process", "--input", str(path), "--dry-run"]) == 1
        assert capsys.readouterr().out == ""

    def test_missing_input_file(self, tmp_path):
        assert main(["process", "--input", str(tmp_path / "absent.csv"), "--dry-run"]) == 1

    def test_wildcard_input_rejected(self):
        assert main(["process", "--input", "data/*.csv", "--dry-run"]) == 1

    def test_invalid_chunk_size_is_configuration_error(self, products_csv):
        assert main(["process", "--input", products_csv, "--dry-run", "--chunk-size", "0"]) == 1


class TestParser:
    """Tests for argument parsing"""

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_process_defaults(self):
        args = build_parser().parse_args(["process", "--input", "x.csv"])
        assert args.delimiter == ","
        assert args.dry_run is False
        assert args.enqueue is False
        assert args.max_attempts == 3
        assert args.chunk_size is None

    def test_status_rejects_bad_batch_id(self):
        assert main(["status", "--batch-id", "batch; DROP TABLE ingest_batch"]) == 1
