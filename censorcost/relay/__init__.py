"""Relay — ingestion delivered payload bid traces MEV-Boost relay."""

from .parser import (
    load_records,
    parse_relay_directory,
    parse_relay_file,
    parse_relay_traces,
)

__all__ = [
    "load_records",
    "parse_relay_directory",
    "parse_relay_file",
    "parse_relay_traces",
]
