"""Shared infrastructure: logging and exceptions."""
