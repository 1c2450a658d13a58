"""Cell-level parsers for the pt-BR formatted spreadsheet values."""

from __future__ import annotations

import logging
import math
from datetime import datetime

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%d/%m/%Y", "%d/%m/%Y %H:%M:%S", "%d/%m/%Y %H:%M")


def parse_number(raw: str | None) -> float | None:
    """Convert a comma-decimal string such as ``"12,34"`` into a float.

    Blank cells mean "no value" and return ``None``, never zero. Malformed text
    is logged and also degrades to ``None``.
    """

    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None

    cleaned = text.removeprefix("R$").removesuffix("%").strip()
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        numeric = float(cleaned)
    except ValueError:
        logger.warning("Ignoring malformed numeric cell %r.", text)
        return None

    if math.isnan(numeric) or math.isinf(numeric):
        return None
    return numeric


def parse_date(raw: str | None) -> datetime | None:
    """Parse ISO (``2003-01-01``) or pt-BR (``01/01/2003``) cell text."""

    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
    if parsed is None:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        logger.warning("Ignoring malformed date cell %r.", text)
        return None
    # Sheets never carries offsets; keep everything naive for comparisons.
    return parsed.replace(tzinfo=None)


__all__ = ["parse_number", "parse_date"]
