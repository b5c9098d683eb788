"""Spreadsheet <-> project board reconciliation tool."""

__version__ = "0.3.0"
