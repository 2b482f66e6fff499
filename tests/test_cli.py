"""Tests for vaporbench.cli — the run, backfill and history commands."""

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner
from history_test_helpers import make_entry, make_project

from vaporbench.backfill import BackfillError, BackfillResult, BackfillSummary
from vaporbench.build import MODE_BENCHMARK, MODE_INSPECT
from vaporbench.cli import main
from vaporbench.history import write_history


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.runner = CliRunner()

    def tearDown(self) -> None:
        logger = logging.getLogger("vaporbench")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        self.tmpdir.cleanup()


class TestHelp(CliTestCase):
    def test_group_help(self) -> None:
        result = self.runner.invoke(main, ["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("run", result.output)
        self.assertIn("backfill", result.output)
        self.assertIn("history", result.output)

    def test_run_help(self) -> None:
        result = self.runner.invoke(main, ["run", "--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--inspect", result.output)
        self.assertIn("--config", result.output)

    def test_version(self) -> None:
        result = self.runner.invoke(main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("0.1.0", result.output)


class TestRunCommand(CliTestCase):
    @patch("vaporbench.benchmark.run_benchmark")
    def test_success(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        mock_run.return_value = make_entry("3.6.0-alpha.2")
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Vapor 20.5 KB vs Classic 25.4 KB gzipped (-4.9 KB)", result.output)
        self.assertEqual(mock_run.call_args.args[1], MODE_BENCHMARK)
        self.assertEqual(mock_run.call_args.args[0].root, self.root.resolve())

    @patch("vaporbench.benchmark.run_benchmark")
    def test_inspect_flag(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        mock_run.return_value = make_entry("3.6.0-alpha.2", mode=MODE_INSPECT)
        result = self.runner.invoke(main, ["run", "--inspect", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_run.call_args.args[1], MODE_INSPECT)

    @patch("vaporbench.benchmark.run_benchmark")
    def test_profile_is_applied(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        (self.root / "vaporbench.yaml").write_text('build_command: "pnpm build"\n')
        mock_run.return_value = make_entry("3.6.0-alpha.2")
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_run.call_args.args[0].build_command, "pnpm build")

    @patch("vaporbench.benchmark.run_benchmark")
    def test_build_failure(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        mock_run.side_effect = subprocess.CalledProcessError(2, ["npm", "run", "build:ship"])
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("build command failed with exit code 2", result.output)

    @patch("vaporbench.benchmark.run_benchmark")
    def test_interrupted(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        mock_run.side_effect = KeyboardInterrupt
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 130)

    @patch("vaporbench.benchmark.run_benchmark")
    def test_invalid_project(self, mock_run: MagicMock) -> None:
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Tracked source file not found", result.output)
        mock_run.assert_not_called()

    @patch("vaporbench.benchmark.run_benchmark")
    def test_invalid_profile(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        (self.root / "vaporbench.yaml").write_text("- not\n- a mapping\n")
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("invalid configuration", result.output)
        mock_run.assert_not_called()


    @patch("vaporbench.benchmark.run_benchmark")
    def test_malformed_profile(self, mock_run: MagicMock) -> None:
        make_project(self.root)
        (self.root / "vaporbench.yaml").write_text("build_command: [unclosed\n")
        result = self.runner.invoke(main, ["run", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error: invalid configuration: Invalid YAML", result.output)
        self.assertNotIsInstance(result.exception, ValueError)
        mock_run.assert_not_called()


class TestBackfillCommand(CliTestCase):
    @patch("vaporbench.backfill.run_backfill")
    def test_summary(self, mock_backfill: MagicMock) -> None:
        make_project(self.root)
        mock_backfill.return_value = BackfillSummary(
            available=["3.6.0-alpha.1", "3.6.0-alpha.2"],
            results=[
                BackfillResult(version="3.6.0-alpha.1", success=False, error="exit 1"),
                BackfillResult(version="3.6.0-alpha.2", success=True),
            ],
            restored_version="3.6.0-alpha.2",
        )
        result = self.runner.invoke(main, ["backfill", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Succeeded: 1", result.output)
        self.assertIn("Failed:    1", result.output)
        self.assertIn("3.6.0-alpha.1", result.output)

    @patch("vaporbench.backfill.run_backfill")
    def test_registry_error(self, mock_backfill: MagicMock) -> None:
        make_project(self.root)
        mock_backfill.side_effect = BackfillError("Could not fetch published versions of vue")
        result = self.runner.invoke(main, ["backfill", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not fetch published versions", result.output)

    @patch("vaporbench.backfill.run_backfill")
    def test_install_failure(self, mock_backfill: MagicMock) -> None:
        make_project(self.root)
        mock_backfill.side_effect = subprocess.CalledProcessError(1, ["npm", "install"])
        result = self.runner.invoke(main, ["backfill", "--root", str(self.root), "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("install command failed", result.output)


class TestHistoryCommand(CliTestCase):
    def test_empty(self) -> None:
        result = self.runner.invoke(main, ["history", "--root", str(self.root)])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("No benchmarks recorded.", result.output)

    def test_table(self) -> None:
        config = make_project(self.root)
        write_history(config.history_path, make_entry("3.6.0-alpha.2"))
        write_history(
            config.history_path,
            make_entry("3.6.0-alpha.1", timestamp="2024-12-01T09:00:00.000Z"),
        )
        result = self.runner.invoke(main, ["history", "--root", str(self.root)])
        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.output.splitlines()
        self.assertIn("Version", lines[0])
        self.assertIn("3.6.0-alpha.1", lines[2])
        self.assertIn("2024-12-01", lines[2])
        self.assertIn("3.6.0-alpha.2", lines[3])
        self.assertIn("-4.9 KB", lines[3])

    def test_help_lists_common_options(self) -> None:
        result = self.runner.invoke(main, ["history", "--help"])
        self.assertEqual(result.exit_code, 0)
        for option in ("--root", "--config", "--json", "--verbose", "--quiet", "--log-file"):
            self.assertIn(option, result.output)
        self.assertIn("Project root", result.output)

    def test_malformed_entry_warning_goes_to_log_file(self) -> None:
        config = make_project(self.root)
        config.history_path.parent.mkdir(parents=True)
        config.history_path.write_text(json.dumps({"benchmarks": [{"vueVersion": "x"}]}))
        log_path = self.root / "logs" / "history.log"
        result = self.runner.invoke(
            main, ["history", "--root", str(self.root), "-q", "--log-file", str(log_path)]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No benchmarks recorded.", result.output)
        for handler in logging.getLogger("vaporbench").handlers:
            handler.close()
        self.assertIn("Skipping malformed history entry", log_path.read_text(encoding="utf-8"))

    def test_json(self) -> None:
        config = make_project(self.root)
        write_history(config.history_path, make_entry("3.6.0-alpha.2"))
        result = self.runner.invoke(main, ["history", "--root", str(self.root), "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(data["benchmarks"][0]["vueVersion"], "3.6.0-alpha.2")


if __name__ == "__main__":
    unittest.main()
