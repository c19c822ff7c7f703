"""
Line parsing for client flat files.
"""

from .line_parser import FIELD_NAMES, ClientLineParser, build_field_rules

__all__ = [
    "ClientLineParser",
    "FIELD_NAMES",
    "build_field_rules",
]
