"""
data/loader.py

Reading threat reports from delimited text.

Field reports are messy. A bad line is skipped, never fatal;
an unreadable file falls back to a small known scenario so the
swarm always has something to watch.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
import csv
import logging

from crow_eye.core.threat import Threat, ThreatCategory

logger = logging.getLogger(__name__)


FALLBACK_THREATS = (
    Threat(50.0, 30.0, ThreatCategory.PRIMARY_ALERT),
    Threat(80.0, 70.0, ThreatCategory.SECONDARY_ALERT),
)


def parse_threat_row(row: Sequence[str]) -> Threat:
    """
    Build a threat from `x, y, category[, severity]`.

    Extra columns beyond the fourth are ignored.
    Raises ValueError for anything that is not a usable record.
    """
    if len(row) < 3:
        raise ValueError(f"Expected at least 3 fields, got {len(row)}")

    x = float(row[0])
    y = float(row[1])
    category = ThreatCategory.parse(row[2])

    severity = None
    if len(row) > 3 and row[3].strip():
        severity = float(row[3])

    return Threat(x, y, category, severity)


def parse_threats(lines: Iterable[str], skip_header: bool = True) -> List[Threat]:
    """Parse delimited lines into threats, skipping malformed ones."""
    threats = []
    reader = csv.reader(lines)

    for line_number, row in enumerate(reader, start=1):
        if skip_header and line_number == 1:
            continue
        if not row or not any(cell.strip() for cell in row):
            continue
        try:
            threats.append(parse_threat_row(row))
        except ValueError as e:
            logger.warning(f"Skipping malformed threat record on line {line_number}: {e}")

    return threats


def load_threats(
    path: str | Path,
    fallback: Optional[Sequence[Threat]] = None
) -> List[Threat]:
    """
    Load threats from a CSV file with a header row.

    If the file cannot be opened, decoded as UTF-8 or split into
    records, returns `fallback` (defaults to one primary and one
    secondary alert).
    """
    path = Path(path)
    try:
        with path.open(newline="", encoding="utf-8") as f:
            threats = parse_threats(f)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        fallback = FALLBACK_THREATS if fallback is None else fallback
        logger.warning(f"Error loading {path}, using {len(fallback)} sample threats: {e}")
        return list(fallback)

    logger.info(f"Loaded {len(threats)} threats from {path}")
    return threats
