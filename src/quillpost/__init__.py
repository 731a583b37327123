"""Quillpost: REST API for a blogging platform."""

__version__ = "1.0.0"
