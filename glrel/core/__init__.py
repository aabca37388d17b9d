"""Core types: results, errors, options and the publish context."""

from .errors import RELEASE_NAME, ErrorCode, PluginError, get_error
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # errors
    "RELEASE_NAME",
    "ErrorCode",
    "PluginError",
    "get_error",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
