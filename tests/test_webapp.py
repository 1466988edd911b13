"""
Tests for the HTTP upload surface.
"""

import io
import json

import pytest

from tdx_verifier.config import Settings
from tdx_verifier.webapp import app


@pytest.fixture
def client(tmp_path):
    app.config["TDX_SETTINGS"] = Settings.build(root_dir=str(tmp_path), log_path="")
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
    app.config.pop("TDX_SETTINGS", None)


def _upload(client, body, name, kind):
    return client.post(
        "/verify",
        data={"kind": kind, "file": (io.BytesIO(body), name)},
        content_type="multipart/form-data",
    )


class TestVerifyEndpoint:

    def test_index(self, client):
        assert b"TDX Verifier" in client.get("/").data

    def test_valid_evidence_upload(self, client):
        r = _upload(client, json.dumps({"evidence": {}}).encode(), "tdx-evidence.json", "evidence")
        assert r.status_code == 200
        body = r.get_json()
        assert body["valid"] is True
        assert body["format"] == "standard"
        assert body["file"] == "tdx-evidence.json"

    def test_empty_quote_upload(self, client):
        r = _upload(client, b"", "tdx-quote.bin", "quote")
        body = r.get_json()
        assert body["valid"] is False
        assert body["error"] == "file_empty"

    def test_unknown_kind(self, client):
        r = _upload(client, b"{}", "x.json", "certificate")
        assert r.status_code == 400

    def test_missing_file(self, client):
        r = client.post("/verify", data={"kind": "token"})
        assert r.status_code == 400


class TestReportEndpoint:

    def test_empty_root_reports_failure(self, client):
        body = client.get("/report").get_json()
        assert body["succeeded"] is False
        assert body["summary"]["total"] == 0
        assert body["conclusion"]["status"] == "none_valid"

    def test_report_over_root(self, client, tmp_path):
        (tmp_path / "tdx-token.json").write_text(json.dumps({"token": "a.b.c"}))
        body = client.get("/report").get_json()
        assert body["succeeded"] is True
        assert body["results"][0]["details"]["token_format"] == "jwt_like"


class TestConfiguration:

    def test_bad_timeout_env_is_reported(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TDX_VERIFIER_ROOT", str(tmp_path))
        monkeypatch.setenv("TDX_VERIFIER_TIMEOUT", "abc")
        app.config.pop("TDX_SETTINGS", None)
        with app.test_client() as c:
            r = c.get("/report")
        assert r.status_code == 500
        assert r.get_json()["error"] == "bad configuration"
