"""Logging set-up for the CLI, with secret redaction.

Tokens and assertions travel through request headers, form bodies and error
payloads; :func:`redact` masks them and :class:`RedactSecretsFilter` applies
the same masking to every record reaching a root handler.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"

MASK = "***"

_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[^\s'\",]+"),
    re.compile(
        r"((?:access_token|refresh_token|assertion|client_secret)['\"]?\s*[:=]\s*['\"]?)"
        r"[^\s'\",&}]+"
    ),
)


def redact(text: str) -> str:
    """Mask bearer tokens and token/assertion values in ``text``."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(r"\1" + MASK, text)
    return text


class RedactSecretsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def configure_logging(level: Optional[int]) -> None:
    """Configure root logging once; later calls only change the level.

    Every root handler gets a :class:`RedactSecretsFilter`.
    """
    lvl = logging.WARNING if level is None else level
    root = logging.getLogger()

    if root.handlers:
        root.setLevel(lvl)
    else:
        logging.basicConfig(level=lvl, format=_FMT, datefmt=_DATEFMT)

    for handler in root.handlers:
        if not any(isinstance(f, RedactSecretsFilter) for f in handler.filters):
            handler.addFilter(RedactSecretsFilter())

    # urllib3 logs request lines at DEBUG; keep it to errors
    logging.getLogger("urllib3.connectionpool").setLevel(max(lvl, logging.WARNING))
    logging.getLogger("urllib3.connection").setLevel(logging.ERROR)
