"""
Threat data sources.

- loader: delimited-text threat reports with a sample fallback
"""

from .loader import FALLBACK_THREATS, load_threats, parse_threat_row, parse_threats

__all__ = ["FALLBACK_THREATS", "load_threats", "parse_threat_row", "parse_threats"]
