"""
Tests for the command-line surface: exit codes and report output.
"""

import json

from click.testing import CliRunner

from tdx_verifier.cli import cli


def _run(*args):
    return CliRunner().invoke(cli, ["--log-file", "", *args])


class TestSingleFile:

    def test_valid_evidence_exits_zero(self, write_json):
        path = write_json("tdx-evidence.json", {"evidence": {}})
        result = _run("verify", "--evidence", path)
        assert result.exit_code == 0
        assert f"{path}: VALID [standard]" in result.output
        assert '"valid": true' in result.output

    def test_invalid_token_exits_one(self, write_json):
        path = write_json("tdx-token.json", {"token": ""})
        result = _run("verify", "--token", path)
        assert result.exit_code == 1
        assert "missing_or_empty_token" in result.output

    def test_missing_quote_exits_one(self, tmp_path):
        result = _run("verify", "--quote", str(tmp_path / "tdx-quote.bin"))
        assert result.exit_code == 1
        assert "file_not_found" in result.output

    def test_one_invalid_among_several_exits_one(self, write_json, write_bytes):
        ev = write_json("tdx-evidence.json", {"evidence": {}})
        q = write_bytes("tdx-quote.bin", b"")
        result = _run("verify", "-e", ev, "-q", q)
        assert result.exit_code == 1

    def test_no_files_is_usage_error(self):
        result = _run("verify")
        assert result.exit_code == 2


class TestVerifyAll:

    def test_writes_report_and_exits_zero(self, tmp_path):
        (tmp_path / "json").mkdir()
        (tmp_path / "json" / "tdx-local-evidence.json").write_text(
            json.dumps({"tdx_status": {"available": True}, "system_measurements": {}}))
        result = _run("--root", str(tmp_path), "verify", "--all")
        assert result.exit_code == 0
        assert "Total files: 1, Valid: 1, Invalid: 0" in result.output
        report_path = tmp_path / "json" / "tdx-verification-report.json"
        data = json.loads(report_path.read_text())
        assert data["summary"]["valid_count"] == 1
        assert data["categories"]["local"] == 1

    def test_nothing_found_exits_one(self, tmp_path):
        report = tmp_path / "r.json"
        result = _run("--root", str(tmp_path), "--report", str(report), "verify", "--all")
        assert result.exit_code == 1
        assert json.loads(report.read_text())["summary"]["total"] == 0

    def test_root_from_environment(self, tmp_path):
        (tmp_path / "tdx-quote.bin").write_bytes(b"\x01\x02")
        result = CliRunner().invoke(
            cli, ["--log-file", "", "verify", "--all"],
            env={"TDX_VERIFIER_ROOT": str(tmp_path)},
        )
        assert result.exit_code == 0
        assert (tmp_path / "json" / "tdx-verification-report.json").exists()

    def test_log_file_is_written(self, tmp_path):
        (tmp_path / "tdx-quote.bin").write_bytes(b"\x01")
        result = CliRunner().invoke(cli, ["--root", str(tmp_path), "verify", "--all"])
        assert result.exit_code == 0
        log_text = (tmp_path / "log" / "tdx-verifier.log").read_text()
        assert "Verifying TDX quote file" in log_text
