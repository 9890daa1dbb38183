"""
VideoUp Service Libraries Package.

This package contains shared utilities used across VideoUp services:
structured logging, the error handling framework, HTTP metrics middleware
and the Result type.
"""

from .utils.result import Result

__all__ = ["Result"]
