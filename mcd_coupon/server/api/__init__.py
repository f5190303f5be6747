"""FastAPI route definitions for the relay."""
