"""
Test suite for censorcost

Contains:
- tests/unit/          : Unit tests for individual modules (engines, parser, config, CLI)
"""
