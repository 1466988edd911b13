# classifier.py
from typing import Any, Callable, Optional, Tuple
import multiprocessing
import base64
import binascii
import json

from .result import ErrorCode, EvidenceFormat, QuoteShape

DEFAULT_PARSE_TIMEOUT = 5.0
BASE64_PROBE_BYTES = 100
# parses in milliseconds; anything larger gets a killable worker
INLINE_PARSE_LIMIT = 256 * 1024

# bytes that `file` would still call text
_TEXT_CHARS = bytes({7, 8, 9, 10, 12, 13, 27} | set(range(0x20, 0x100)) - {0x7F})

class ClassificationError(ValueError):
    def __init__(self, code: ErrorCode, message: str = ""):
        super().__init__(message or code.value)
        self.code = code

def _loads(data: bytes) -> Any:
    try:
        return json.loads(data)
    except (ValueError, RecursionError) as e:
        raise ClassificationError(ErrorCode.INVALID_JSON, str(e))

def _loads_into(conn, data: bytes) -> None:
    # child side of a bounded parse
    try:
        conn.send(("ok", json.loads(data)))
    except (ValueError, RecursionError) as e:
        conn.send(("error", str(e)))
    finally:
        conn.close()

def parse_json(data: bytes, timeout: Optional[float] = DEFAULT_PARSE_TIMEOUT) -> Any:
    """
    Decode JSON bytes, giving up after ``timeout`` seconds.
    Syntax/encoding problems -> invalid_json; deadline -> invalid_json_or_timeout.

    json.loads holds the GIL, so documents above INLINE_PARSE_LIMIT are parsed in
    a child process that is killed at the deadline. Smaller ones parse inline.
    """
    if timeout is None or len(data) <= INLINE_PARSE_LIMIT:
        return _loads(data)

    recv, send = multiprocessing.Pipe(duplex=False)
    proc = multiprocessing.Process(target=_loads_into, args=(send, data), daemon=True)
    proc.start()
    send.close()
    try:
        if not recv.poll(timeout):
            raise ClassificationError(ErrorCode.INVALID_JSON_OR_TIMEOUT, f"JSON parse exceeded {timeout}s")
        status, payload = recv.recv()
    except EOFError:
        raise ClassificationError(ErrorCode.INVALID_JSON, "JSON parser exited without a result")
    finally:
        if proc.is_alive():
            proc.terminate()
        proc.join()
        recv.close()
    if status != "ok":
        raise ClassificationError(ErrorCode.INVALID_JSON, payload)
    return payload

def _obj(doc: Any, key: str) -> Optional[dict]:
    v = doc.get(key) if isinstance(doc, dict) else None
    return v if isinstance(v, dict) else None

def _is_standard(doc: Any) -> bool:
    return _obj(doc, "evidence") is not None

def _is_local(doc: Any) -> bool:
    return _obj(doc, "tdx_status") is not None

def is_mock(doc: Any) -> bool:
    ev = _obj(doc, "evidence")
    if ev is None:
        return False
    meta = _obj(doc, "metadata") or _obj(ev, "metadata") or {}
    return meta.get("is_mock") is True

# Checked in order, first match wins. MOCK sits behind STANDARD, so any mock
# document is reported as STANDARD; see DESIGN.md.
EVIDENCE_SHAPES: Tuple[Tuple[EvidenceFormat, Callable[[Any], bool]], ...] = (
    (EvidenceFormat.STANDARD, _is_standard),
    (EvidenceFormat.LOCAL, _is_local),
    (EvidenceFormat.MOCK, is_mock),
)

def evidence_format(doc: Any) -> EvidenceFormat:
    for fmt, matches in EVIDENCE_SHAPES:
        if matches(doc):
            return fmt
    return EvidenceFormat.UNKNOWN

def classify_evidence(data: bytes, timeout: Optional[float] = DEFAULT_PARSE_TIMEOUT) -> Tuple[Any, EvidenceFormat]:
    doc = parse_json(data, timeout)
    return doc, evidence_format(doc)

def looks_binary(data: bytes) -> bool:
    return bool(data.translate(None, _TEXT_CHARS))

def _looks_base64(data: bytes) -> bool:
    probe = b"".join(data[:BASE64_PROBE_BYTES].split())
    probe = probe[: len(probe) - len(probe) % 4]
    if not probe:
        return False
    try:
        base64.b64decode(probe, validate=True)
        return True
    except (binascii.Error, ValueError):
        return False

def classify_quote(data: bytes) -> QuoteShape:
    """
    Shape of a quote blob: empty, binary, or base64 text.
    Text that is not base64 still falls back to BINARY; quotes are only ever
    rejected for being empty.
    """
    if not data:
        return QuoteShape.EMPTY
    if looks_binary(data):
        return QuoteShape.BINARY
    if _looks_base64(data):
        return QuoteShape.BASE64
    return QuoteShape.BINARY
