from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import os

class ArtifactKind(str, Enum):
    EVIDENCE = "evidence"
    TOKEN = "token"
    QUOTE = "quote"

class EvidenceFormat(str, Enum):
    STANDARD = "standard"
    LOCAL = "local"
    MOCK = "mock"
    UNKNOWN = "unknown"

class QuoteShape(str, Enum):
    BINARY = "binary"
    BASE64 = "base64"
    EMPTY = "empty"

class ErrorCode(str, Enum):
    FILE_NOT_FOUND = "file_not_found"
    FILE_EMPTY = "file_empty"
    INVALID_JSON = "invalid_json"
    INVALID_JSON_OR_TIMEOUT = "invalid_json_or_timeout"
    UNRECOGNIZED_FORMAT = "unrecognized_format"
    INCOMPLETE_STRUCTURE = "incomplete_structure"
    MISSING_OR_EMPTY_TOKEN = "missing_or_empty_token"

class CheckState(str, Enum):
    MISSING = "missing"
    EMPTY = "empty"
    PARSE_FAILED = "parse_failed"
    STRUCTURE_INVALID = "structure_invalid"
    VALID = "valid"

_STATE_BY_ERROR = {
    ErrorCode.FILE_NOT_FOUND: CheckState.MISSING,
    ErrorCode.FILE_EMPTY: CheckState.EMPTY,
    ErrorCode.INVALID_JSON: CheckState.PARSE_FAILED,
    ErrorCode.INVALID_JSON_OR_TIMEOUT: CheckState.PARSE_FAILED,
}

def utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%SZ")

@dataclass(frozen=True)
class VerificationResult:
    file: str
    valid: bool
    kind: ArtifactKind
    format: Optional[EvidenceFormat] = None  # evidence only
    size: Optional[int] = None
    error: Optional[ErrorCode] = None
    timestamp: str = field(default_factory=utc_timestamp)
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.valid and self.error is not None:
            raise ValueError(f"valid result for {self.file} cannot carry error {self.error}")
        if not self.valid and self.error is None:
            raise ValueError(f"invalid result for {self.file} needs an error code")

    @property
    def state(self) -> CheckState:
        if self.error is None:
            return CheckState.VALID
        return _STATE_BY_ERROR.get(self.error, CheckState.STRUCTURE_INVALID)

    @property
    def is_mock(self) -> bool:
        """Mock artifact by file name (any kind) or by evidence metadata."""
        return (self.format == EvidenceFormat.MOCK or self.details.get("is_mock") is True
                or "mock" in os.path.basename(self.file))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "file": self.file,
            "valid": self.valid,
            "kind": self.kind.value,
        }
        if self.format is not None:
            out["format"] = self.format.value
        if self.size is not None:
            out["size"] = self.size
        if self.error is not None:
            out["error"] = self.error.value
        out["timestamp"] = self.timestamp
        if self.details:
            out["details"] = dict(self.details)
        return out

@dataclass(frozen=True)
class Summary:
    total: int
    valid_count: int
    invalid_count: int

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "valid_count": self.valid_count, "invalid_count": self.invalid_count}

@dataclass(frozen=True)
class VerificationReport:
    """Aggregate of one verification run, in discovery order.

    ``summary`` and ``categories`` are derived from ``results`` so the two can
    never disagree.
    """
    results: Tuple[VerificationResult, ...]
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def summary(self) -> Summary:
        valid = sum(1 for r in self.results if r.valid)
        return Summary(total=len(self.results), valid_count=valid, invalid_count=len(self.results) - valid)

    @property
    def categories(self) -> Dict[str, int]:
        counts = {fmt.value: 0 for fmt in EvidenceFormat}
        for r in self.results:
            if r.format is not None:
                counts[r.format.value] += 1
        return counts

    @property
    def mock_files(self) -> int:
        return sum(1 for r in self.results if r.is_mock)

    @property
    def succeeded(self) -> bool:
        # an empty run is a failure, not a vacuous success
        return self.summary.valid_count > 0

    def invalid_files(self) -> Tuple[str, ...]:
        return tuple(r.file for r in self.results if not r.valid)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
            "categories": self.categories,
        }
