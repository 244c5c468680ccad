from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

_logger = logging.getLogger(__name__)


def load_env_files(candidates: Optional[Iterable[Path]] = None) -> Optional[Path]:
    """Load the first existing ``.env``/``.dotenv`` file; return its path.

    Variables already set in the process environment are left untouched.
    """
    if candidates is None:
        cwd = Path.cwd()
        candidates = (cwd / ".env", cwd / ".dotenv")

    for path in candidates:
        if path.exists():
            load_dotenv(path)
            _logger.debug("Loaded environment variables from %s", path)
            return path

    _logger.debug("No .env/.dotenv file found")
    return None
