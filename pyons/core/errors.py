"""Exceptions raised by the pyons client configuration layer."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Stable classification attached to every `ONSClientError`."""

    CLIENT_CHECK_MSG_EXCEPTION = "CLIENT_CHECK_MSG_EXCEPTION"


def error_message(message: str, code: ErrorCode) -> str:
    """Formats a human-readable message tagged with its error code.

    Args:
        message (str): The description of the failure.
        code (ErrorCode): The classification of the failure.

    Returns:
        str: The message prefixed with the code, e.g.
        ``"[CLIENT_CHECK_MSG_EXCEPTION] AccessKey must be set."``.
    """
    return f"[{code.value}] {message}"


class ONSClientError(Exception):
    """Raised when a client-side configuration check fails.

    Attributes:
        code (ErrorCode): The stable classification of the failure.
        key (Optional[str]): The property key that was being written.
        value (Optional[str]): The rejected value.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CLIENT_CHECK_MSG_EXCEPTION,
        key: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        super().__init__(error_message(message, code))
        self.reason = message
        self.code = code
        self.key = key
        self.value = value
