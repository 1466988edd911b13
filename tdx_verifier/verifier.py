from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging
import os
import json

from .result import (
    ArtifactKind, ErrorCode, EvidenceFormat, VerificationReport, VerificationResult,
)
from .hashing import sha256_hex, hex_preview
from .classifier import (
    DEFAULT_PARSE_TIMEOUT, ClassificationError, classify_evidence, classify_quote, is_mock, parse_json,
)

log = logging.getLogger(__name__)

TOKEN_PREVIEW_CHARS = 50

# Discovery order matters: report results follow it exactly.
DEFAULT_CANDIDATES: Dict[ArtifactKind, Tuple[str, ...]] = {
    ArtifactKind.EVIDENCE: ("tdx-evidence.json", "tdx-local-evidence.json", "tdx-mock-evidence.json"),
    ArtifactKind.TOKEN: ("tdx-token.json", "tdx-mock-token.json"),
    ArtifactKind.QUOTE: ("tdx-quote.bin", "tdx-local-quote.bin", "tdx-mock-quote.bin"),
}

# ---------------- File helpers ----------------

def _read(path: str) -> Optional[bytes]:
    """Whole file, or None if it does not exist. Other OSErrors are raised."""
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        return None

# an unreadable file reads as a failed parse for JSON kinds and as absent for quotes
_UNREADABLE = {
    ArtifactKind.EVIDENCE: ErrorCode.INVALID_JSON,
    ArtifactKind.TOKEN: ErrorCode.INVALID_JSON,
    ArtifactKind.QUOTE: ErrorCode.FILE_NOT_FOUND,
}

def _load(path: str, kind: ArtifactKind) -> Tuple[Optional[bytes], Optional[VerificationResult]]:
    """(data, None) on success, (None, failed result) when missing or unreadable."""
    try:
        data = _read(path)
    except OSError as e:
        log.warning("Cannot read %s file %s: %s", kind.value, path, e)
        return None, VerificationResult(file=path, valid=False, kind=kind, error=_UNREADABLE[kind],
                                        details={"os_error": e.strerror or str(e)})
    if data is None:
        return None, _missing(path, kind)
    return data, None

def _missing(path: str, kind: ArtifactKind) -> VerificationResult:
    log.warning("%s file not found: %s", kind.value.capitalize(), path)
    return VerificationResult(file=path, valid=False, kind=kind, error=ErrorCode.FILE_NOT_FOUND)

def _invalid(path: str, kind: ArtifactKind, error: ErrorCode, **kw) -> VerificationResult:
    log.warning("%s %s is invalid: %s", kind.value, path, error.value)
    return VerificationResult(file=path, valid=False, kind=kind, error=error, **kw)

# ---------------- Evidence ----------------

def _standard_details(doc: Dict[str, Any]) -> Dict[str, Any]:
    ev = doc["evidence"]
    det: Dict[str, Any] = {
        "evidence_fields": len(ev),
        "has_quote": "quote" in ev,
        "has_report_data": "reportData" in ev,
    }
    if isinstance(ev.get("quote"), str):
        det["quote_length"] = len(ev["quote"])
    return det

def _local_details(doc: Dict[str, Any]) -> Dict[str, Any]:
    status = doc["tdx_status"]
    methods = status.get("detection_methods")
    return {
        "tdx_available": status.get("available"),
        "detection_methods": list(methods) if isinstance(methods, list) else [],
        "has_measurements": "system_measurements" in doc,
    }

def verify_evidence(path: str, *, timeout: Optional[float] = DEFAULT_PARSE_TIMEOUT) -> VerificationResult:
    """
    Structural evidence check:
      - standard: a top-level ``evidence`` object is enough; quote/reportData are
        reported in details but never gate validity,
      - local: needs both ``tdx_status`` and ``system_measurements``,
      - mock: valid (only reachable if the shape order changes),
      - anything else: unrecognized_format.
    """
    kind = ArtifactKind.EVIDENCE
    log.info("Verifying TDX evidence file: %s", path)
    data, failed = _load(path, kind)
    if failed is not None:
        return failed
    det: Dict[str, Any] = {"sha256": sha256_hex(data)}
    try:
        doc, fmt = classify_evidence(data, timeout)
    except ClassificationError as e:
        return _invalid(path, kind, e.code, size=len(data), details=det)

    if fmt == EvidenceFormat.STANDARD:
        det.update(_standard_details(doc))
        det["is_mock"] = is_mock(doc)
    elif fmt == EvidenceFormat.LOCAL:
        det.update(_local_details(doc))
        if not det["has_measurements"]:
            return _invalid(path, kind, ErrorCode.INCOMPLETE_STRUCTURE, format=fmt, size=len(data), details=det)
    elif fmt == EvidenceFormat.MOCK:
        meta = doc.get("metadata")
        det["purpose"] = meta.get("purpose") if isinstance(meta, dict) else None
    else:
        return _invalid(path, kind, ErrorCode.UNRECOGNIZED_FORMAT, format=fmt, size=len(data), details=det)

    log.info("%s evidence structure detected in %s", fmt.value.capitalize(), path)
    return VerificationResult(file=path, valid=True, kind=kind, format=fmt, size=len(data), details=det)

# ---------------- Token ----------------

def verify_token(path: str, *, timeout: Optional[float] = DEFAULT_PARSE_TIMEOUT) -> VerificationResult:
    kind = ArtifactKind.TOKEN
    log.info("Verifying attestation token file: %s", path)
    data, failed = _load(path, kind)
    if failed is not None:
        return failed
    det: Dict[str, Any] = {"sha256": sha256_hex(data)}
    try:
        doc = parse_json(data, timeout)
    except ClassificationError as e:
        return _invalid(path, kind, e.code, size=len(data), details=det)

    token = doc.get("token") if isinstance(doc, dict) else None
    if not isinstance(token, str) or not token:
        return _invalid(path, kind, ErrorCode.MISSING_OR_EMPTY_TOKEN, size=len(data), details=det)

    segments = token.split(".")
    det.update({
        "token_format": "jwt_like" if len(segments) == 3 else "non_standard",
        "token_segments": len(segments),
        "token_preview": token[:TOKEN_PREVIEW_CHARS],
    })
    if det["token_format"] != "jwt_like":
        log.warning("Token in %s is not standard JWT (%d parts)", path, len(segments))
    return VerificationResult(file=path, valid=True, kind=kind, size=len(data), details=det)

# ---------------- Quote ----------------

def verify_quote(path: str) -> VerificationResult:
    """Any non-empty quote is accepted; the shape is reported, not enforced."""
    kind = ArtifactKind.QUOTE
    log.info("Verifying TDX quote file: %s", path)
    data, failed = _load(path, kind)
    if failed is not None:
        return failed
    shape = classify_quote(data)
    if not data:
        return _invalid(path, kind, ErrorCode.FILE_EMPTY, size=0, details={"quote_shape": shape.value})
    det = {
        "sha256": sha256_hex(data),
        "quote_shape": shape.value,
        "hex_preview": hex_preview(data),
    }
    return VerificationResult(file=path, valid=True, kind=kind, size=len(data), details=det)

# ---------------- Main entry ----------------

def verify_path(kind: ArtifactKind, path: str, *, timeout: Optional[float] = DEFAULT_PARSE_TIMEOUT) -> VerificationResult:
    kind = ArtifactKind(kind)
    if kind == ArtifactKind.EVIDENCE:
        return verify_evidence(path, timeout=timeout)
    if kind == ArtifactKind.TOKEN:
        return verify_token(path, timeout=timeout)
    return verify_quote(path)

def discover(search_roots: Sequence[str],
             candidate_filenames: Mapping[ArtifactKind, Iterable[str]] = DEFAULT_CANDIDATES) -> List[Tuple[ArtifactKind, str]]:
    """
    Existing candidate files as (kind, path), grouped evidence -> token -> quote,
    each group walking roots in order and then its filenames in order.
    """
    found: List[Tuple[ArtifactKind, str]] = []
    seen = set()
    for kind in ArtifactKind:
        for root in search_roots:
            for name in candidate_filenames.get(kind, ()):
                path = os.path.join(root, name)
                key = os.path.realpath(path)
                if key in seen or not os.path.isfile(path):
                    continue
                seen.add(key)
                log.info("Found %s file: %s", kind.value, path)
                found.append((kind, path))
    return found

def verify_all(search_roots: Sequence[str],
               candidate_filenames: Mapping[ArtifactKind, Iterable[str]] = DEFAULT_CANDIDATES,
               *, timeout: Optional[float] = DEFAULT_PARSE_TIMEOUT) -> VerificationReport:
    results: List[VerificationResult] = []
    for kind, path in discover(search_roots, candidate_filenames):
        results.append(verify_path(kind, path, timeout=timeout))
    if not results:
        log.warning("No TDX files found to verify under %s", ", ".join(map(str, search_roots)))
    report = VerificationReport(results=tuple(results))
    s = report.summary
    log.info("Total files: %d, Valid: %d, Invalid: %d", s.total, s.valid_count, s.invalid_count)
    return report

def write_report(report: VerificationReport, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        f.write("\n")
    log.info("Verification report saved to: %s", path)
    return path
