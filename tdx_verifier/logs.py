import logging
import os
from typing import Optional

FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

def configure_logging(log_path: Optional[str] = None, verbose: bool = False) -> None:
    """Stderr handler always; file handler too when log_path is set and writable."""
    handlers = [logging.StreamHandler()]
    if log_path:
        try:
            os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
            handlers.append(logging.FileHandler(log_path, mode="w", encoding="utf-8"))
        except OSError as e:
            logging.getLogger(__name__).warning("Cannot write log file %s: %s", log_path, e)
    logging.basicConfig(
        format=FORMAT,
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=handlers,
        force=True,
    )
