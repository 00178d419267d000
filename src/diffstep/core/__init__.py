"""Diff engine, navigator and multi-file composition."""
