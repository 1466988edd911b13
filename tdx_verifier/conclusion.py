from dataclasses import dataclass
from typing import List, Tuple

from .result import EvidenceFormat, VerificationReport

ALL_VALID = "all_valid"
PARTIAL = "partial"
NONE_VALID = "none_valid"

@dataclass(frozen=True)
class Conclusion:
    status: str
    headline: str
    lines: Tuple[str, ...] = ()

def conclude(report: VerificationReport) -> Conclusion:
    s = report.summary
    if s.total == 0:
        return Conclusion(NONE_VALID, "NO FILES FOUND - nothing to verify",
                          ("Run the local or mock attestation generator first",))
    if s.valid_count == s.total:
        return Conclusion(ALL_VALID, "ALL FILES VALID - attestation artifacts are well-formed",
                          ("All evidence, tokens, and quotes are properly formatted",))
    if s.valid_count > 0:
        lines = [f"{s.valid_count}/{s.total} files passed verification", "Invalid files:"]
        lines.extend(f"  - {path}" for path in report.invalid_files())
        return Conclusion(PARTIAL, "PARTIAL SUCCESS - some files need attention", tuple(lines))
    return Conclusion(NONE_VALID, "ALL FILES INVALID - attestation setup needs attention",
                      ("No files passed verification", "Check the file generation process"))

def recommendations(report: VerificationReport) -> List[str]:
    cats = report.categories
    local = cats[EvidenceFormat.LOCAL.value] > 0
    # mock evidence is classified standard, so mocks are told apart by name/metadata
    standard = any(r.format == EvidenceFormat.STANDARD and not r.is_mock for r in report.results)
    mock = report.mock_files > 0
    if local and mock:
        return ["Use local evidence for system analysis and TDX verification",
                "Use mock files for testing attestation workflows"]
    if local:
        return ["Local TDX evidence present: the system is TDX-capable",
                "For remote attestation, integrate with an attestation service"]
    if standard:
        return ["Standard evidence present: files follow the attestation service format"]
    if mock:
        return ["Mock files are for testing only",
                "Run local attestation to generate real TDX evidence"]
    return ["No evidence found: run the local or mock attestation generator"]
