"""
Unit tests for CLI module

Tests argument parsing, exit statuses and report/metrics file handling.
The diff run itself is mocked.
"""

import json
from unittest.mock import patch

import pytest

from sqldiff.cli import EXIT_ERROR, EXIT_MATCH, EXIT_MISMATCH, cmd_diff, create_parser, main
from sqldiff.errors import DatabaseConnectionError
from sqldiff.report import ConsoleRenderer, JSONRenderer
from sqldiff.types import Changed, DiffResult

DSN = "app:secret@tcp(127.0.0.1:3306)/shop"


def parse(*argv):
    return create_parser().parse_args(list(argv))


class TestCreateParser:
    """Tests for argument parsing"""

    def test_defaults(self):
        """Test only the required arguments"""
        args = parse("--table1", "bak_users", "--table2", "users")

        assert args.table1 == "bak_users"
        assert args.table2 == "users"
        assert args.dsn is None
        assert args.driver == "mysql"
        assert args.column == "*"
        assert args.key == "id"
        assert args.modified is False
        assert args.print_header is False
        assert args.format == "console"
        assert args.batch_size == 1000

    def test_single_dash_spellings(self):
        """Test the single-dash option names"""
        args = parse(
            "-dsn", DSN, "-table1", "bak_users", "-table2", "users",
            "-column", "id,name", "-modified", "-p",
        )

        assert args.dsn == DSN
        assert args.column == "id,name"
        assert args.modified is True
        assert args.print_header is True

    def test_all_options(self):
        args = parse(
            "--dsn", "dbinfo.json", "--driver", "postgresql",
            "--table1", "a", "--table2", "b", "--key", "uuid",
            "--format", "json", "--output", "out.json", "--batch-size", "50",
            "--metrics-file", "sqldiff.prom", "--log-level", "DEBUG",
        )

        assert args.driver == "postgresql"
        assert args.key == "uuid"
        assert args.format == "json"
        assert args.output == "out.json"
        assert args.batch_size == 50
        assert args.metrics_file == "sqldiff.prom"
        assert args.log_level == "DEBUG"

    def test_table_arguments_required(self):
        with pytest.raises(SystemExit) as exc_info:
            parse("--table1", "a")

        assert exc_info.value.code == 2

    def test_unknown_driver_rejected(self):
        with pytest.raises(SystemExit):
            parse("--table1", "a", "--table2", "b", "--driver", "oracle")


class TestCmdDiff:
    """Tests for cmd_diff exit statuses"""

    @patch('sqldiff.cli.commands.diff_tables')
    def test_match(self, mock_diff):
        mock_diff.return_value = DiffResult(rows_compared=3)
        args = parse("--dsn", DSN, "--table1", "bak_users", "--table2", "users")

        assert cmd_diff(args) == EXIT_MATCH

        call = mock_diff.call_args
        assert call.args == (DSN, "bak_users", "users")
        assert call.kwargs["driver"] == "mysql"
        assert call.kwargs["exclude_audit"] is False
        assert call.kwargs["metrics"] is None
        assert isinstance(call.kwargs["renderer"], ConsoleRenderer)

    @patch('sqldiff.cli.commands.diff_tables')
    def test_mismatch(self, mock_diff):
        mock_diff.return_value = DiffResult(changed_rows=1, rows_compared=3)
        args = parse("--dsn", DSN, "--table1", "bak_users", "--table2", "users", "--modified")

        assert cmd_diff(args) == EXIT_MISMATCH
        assert mock_diff.call_args.kwargs["exclude_audit"] is True

    @patch('sqldiff.cli.commands.diff_tables')
    def test_one_sided_rows_are_a_mismatch(self, mock_diff):
        mock_diff.return_value = DiffResult(right_only_rows=1)
        args = parse("--dsn", DSN, "--table1", "a", "--table2", "b")

        assert cmd_diff(args) == EXIT_MISMATCH

    @patch('sqldiff.cli.commands.diff_tables')
    def test_sqldiff_error(self, mock_diff, caplog):
        mock_diff.side_effect = DatabaseConnectionError("cannot connect to mysql")
        args = parse("--dsn", DSN, "--table1", "a", "--table2", "b")

        assert cmd_diff(args) == EXIT_ERROR
        assert "cannot connect to mysql" in caplog.text

    @patch('sqldiff.cli.commands.diff_tables')
    def test_unexpected_error(self, mock_diff):
        mock_diff.side_effect = RuntimeError("boom")
        args = parse("--dsn", DSN, "--table1", "a", "--table2", "b")

        assert cmd_diff(args) == EXIT_ERROR

    @patch('sqldiff.cli.commands.diff_tables')
    def test_invalid_dsn(self, mock_diff):
        args = parse("--dsn", "root@localhost", "--table1", "a", "--table2", "b")

        assert cmd_diff(args) == EXIT_ERROR
        mock_diff.assert_not_called()

    @patch('sqldiff.cli.commands.diff_tables')
    def test_dsn_from_environment(self, mock_diff, monkeypatch):
        monkeypatch.setenv("SQLDIFF_DSN", DSN)
        mock_diff.return_value = DiffResult()
        args = parse("--table1", "a", "--table2", "b")

        assert cmd_diff(args) == EXIT_MATCH
        assert mock_diff.call_args.args[0] == DSN

    @patch('sqldiff.cli.commands.diff_tables')
    def test_json_connection_file(self, mock_diff, tmp_path):
        dbinfo = tmp_path / "dbinfo.json"
        dbinfo.write_text(json.dumps({
            "database": "shop", "user": "app", "password": "secret",
            "host": "127.0.0.1", "port": 3306,
        }))
        mock_diff.return_value = DiffResult()
        args = parse("--dsn", str(dbinfo), "--table1", "a", "--table2", "b")

        assert cmd_diff(args) == EXIT_MATCH
        assert mock_diff.call_args.args[0] == DSN

    @patch('sqldiff.cli.commands.diff_tables')
    def test_output_file(self, mock_diff, tmp_path):
        """The renderer writes into the --output file"""
        def fake_diff(dsn, left, right, renderer, **kwargs):
            renderer.begin(left, right, [])
            renderer.event(Changed(
                left_key=1, right_key=1, column_index=1, column="name",
                left_value="a", right_value="b",
            ))
            result = DiffResult(changed_rows=1, rows_compared=1)
            renderer.finish(result)
            return result

        mock_diff.side_effect = fake_diff
        output = tmp_path / "reports" / "diff.json"
        args = parse(
            "--dsn", DSN, "--table1", "a", "--table2", "b",
            "--format", "json", "--output", str(output),
        )

        assert cmd_diff(args) == EXIT_MISMATCH
        assert isinstance(mock_diff.call_args.kwargs["renderer"], JSONRenderer)
        report = json.loads(output.read_text())
        assert report["summary"]["changed_rows"] == 1

    @patch('sqldiff.cli.commands.diff_tables')
    def test_metrics_file_written(self, mock_diff, tmp_path):
        def fake_diff(dsn, left, right, metrics, **kwargs):
            result = DiffResult(rows_compared=2)
            metrics.record_run(result, 0.1, "match")
            return result

        mock_diff.side_effect = fake_diff
        metrics_file = tmp_path / "sqldiff.prom"
        args = parse(
            "--dsn", DSN, "--table1", "a", "--table2", "b",
            "--metrics-file", str(metrics_file),
        )

        assert cmd_diff(args) == EXIT_MATCH
        assert 'sqldiff_runs_total{status="match"} 1.0' in metrics_file.read_text()

    @patch('sqldiff.cli.commands.diff_tables')
    def test_metrics_file_written_on_error(self, mock_diff, tmp_path):
        mock_diff.side_effect = DatabaseConnectionError("refused")
        metrics_file = tmp_path / "sqldiff.prom"
        args = parse(
            "--dsn", DSN, "--table1", "a", "--table2", "b",
            "--metrics-file", str(metrics_file),
        )

        assert cmd_diff(args) == EXIT_ERROR
        assert metrics_file.exists()


class TestMain:
    """Tests for main entry point"""

    @patch('sqldiff.cli.configure_from_env')
    @patch('sqldiff.cli.cmd_diff', return_value=EXIT_MISMATCH)
    def test_exit_status(self, mock_cmd, mock_logging):
        with pytest.raises(SystemExit) as exc_info:
            main(["--dsn", DSN, "--table1", "a", "--table2", "b", "--log-level", "INFO"])

        assert exc_info.value.code == EXIT_MISMATCH
        mock_logging.assert_called_once_with(level="INFO")

    @patch('sqldiff.cli.configure_from_env')
    @patch('sqldiff.cli.cmd_diff')
    def test_invalid_batch_size(self, mock_cmd, mock_logging):
        with pytest.raises(SystemExit) as exc_info:
            main(["--table1", "a", "--table2", "b", "--batch-size", "0"])

        assert exc_info.value.code == 2
        mock_cmd.assert_not_called()

    @patch('sqldiff.cli.shutdown_tracing')
    @patch('sqldiff.cli.configure_from_env')
    @patch('sqldiff.cli.cmd_diff', side_effect=KeyboardInterrupt)
    def test_tracing_shut_down(self, mock_cmd, mock_logging, mock_shutdown):
        with pytest.raises(KeyboardInterrupt):
            main(["--table1", "a", "--table2", "b"])

        mock_shutdown.assert_called_once()
