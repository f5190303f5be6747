"""Shared infrastructure: logging, settings, the persisted config file and text helpers."""
