from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
import os

from .classifier import DEFAULT_PARSE_TIMEOUT

REPORT_NAME = "tdx-verification-report.json"
LOG_NAME = "tdx-verifier.log"

class ConfigError(ValueError):
    pass

def _timeout(value) -> float:
    if value is None or value == "":
        return DEFAULT_PARSE_TIMEOUT
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"parse timeout must be a number of seconds, got {value!r}")
    if not seconds > 0:
        raise ConfigError(f"parse timeout must be > 0, got {value!r}")
    return seconds

@dataclass(frozen=True)
class Settings:
    root_dir: str
    report_path: str
    log_path: Optional[str]
    parse_timeout: float = DEFAULT_PARSE_TIMEOUT

    @property
    def json_dir(self) -> str:
        return os.path.join(self.root_dir, "json")

    @property
    def search_roots(self) -> Tuple[str, str]:
        return (self.root_dir, self.json_dir)

    @classmethod
    def build(cls, root_dir: Optional[str] = None, report_path: Optional[str] = None,
              log_path: Optional[str] = None, parse_timeout: Optional[float] = None) -> "Settings":
        root = os.path.abspath(root_dir or os.getcwd())
        return cls(
            root_dir=root,
            report_path=report_path or os.path.join(root, "json", REPORT_NAME),
            log_path=log_path if log_path is not None else os.path.join(root, "log", LOG_NAME),
            parse_timeout=_timeout(parse_timeout),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> "Settings":
        return cls.build(
            root_dir=environ.get("TDX_VERIFIER_ROOT"),
            report_path=environ.get("TDX_VERIFIER_REPORT"),
            log_path=environ.get("TDX_VERIFIER_LOG"),
            parse_timeout=environ.get("TDX_VERIFIER_TIMEOUT"),
        )
