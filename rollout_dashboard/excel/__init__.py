"""Workbook reading and extraction: raw matrices -> typed rows."""
