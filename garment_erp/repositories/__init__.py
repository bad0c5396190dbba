"""Data access layer: one repository per aggregate, sharing BaseRepository helpers."""
