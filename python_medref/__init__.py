"""Medication reference table: grouped browsing plus admin editing and CSV import/export."""

__version__ = "1.0.0"
