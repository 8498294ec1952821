"""
Shared utilities module.

This module contains common utilities used across all layers of the application,
including Result types for functional error handling and logging configuration.
"""

from mux_console.shared.result import Err, ErrorInfo, Ok, Result

__all__ = ["Ok", "Err", "ErrorInfo", "Result"]
