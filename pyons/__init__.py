"""pyons: client properties for an ONS/RocketMQ messaging SDK.

This package holds the typed configuration layer a producer or consumer is
built from: defaults, validation, the `~/ons/credential` overlay, and the
abstract ordered-consumer contract.
"""

from .core.enums import MessageModel, ONSChannel, OrderAction, Trace
from .core.errors import ErrorCode, ONSClientError
from .core.property import FactoryProperty

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__license__",
    "ErrorCode",
    "FactoryProperty",
    "MessageModel",
    "ONSChannel",
    "ONSClientError",
    "OrderAction",
    "Trace",
]
