import os

import pytest

from tdx_verifier.config import ConfigError, Settings


class TestSettings:

    def test_defaults_follow_root(self, tmp_path):
        s = Settings.build(root_dir=str(tmp_path))
        assert s.json_dir == os.path.join(str(tmp_path), "json")
        assert s.search_roots == (str(tmp_path), os.path.join(str(tmp_path), "json"))
        assert s.report_path == os.path.join(str(tmp_path), "json", "tdx-verification-report.json")
        assert s.log_path == os.path.join(str(tmp_path), "log", "tdx-verifier.log")
        assert s.parse_timeout == 5.0

    def test_from_env(self, tmp_path):
        env = {
            "TDX_VERIFIER_ROOT": str(tmp_path),
            "TDX_VERIFIER_REPORT": str(tmp_path / "r.json"),
            "TDX_VERIFIER_LOG": "",
            "TDX_VERIFIER_TIMEOUT": "1.5",
        }
        s = Settings.from_env(env)
        assert s.root_dir == str(tmp_path)
        assert s.report_path == str(tmp_path / "r.json")
        assert s.log_path == ""
        assert s.parse_timeout == 1.5

    @pytest.mark.parametrize("value", ["abc", "0", "-1", "nan"])
    def test_bad_timeout_is_rejected(self, tmp_path, value):
        with pytest.raises(ConfigError):
            Settings.from_env({"TDX_VERIFIER_ROOT": str(tmp_path), "TDX_VERIFIER_TIMEOUT": value})

    def test_unset_timeout_uses_default(self, tmp_path):
        s = Settings.from_env({"TDX_VERIFIER_ROOT": str(tmp_path), "TDX_VERIFIER_TIMEOUT": ""})
        assert s.parse_timeout == 5.0
