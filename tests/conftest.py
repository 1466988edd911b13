import json
import logging

import pytest


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document (or raw text) to tmp_path/name and return the path as str."""
    def _write(name, doc):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(doc, (str, bytes)):
            data = doc.encode() if isinstance(doc, str) else doc
            path.write_bytes(data)
        else:
            path.write_text(json.dumps(doc))
        return str(path)
    return _write


@pytest.fixture
def write_bytes(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def _reset_logging():
    """The CLI installs root handlers bound to the runner's streams; drop them after each test."""
    yield
    root = logging.getLogger()
    for h in root.handlers[:]:
        if type(h) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(h)
            h.close()
