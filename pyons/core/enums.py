"""Enumerations used by the property store and the consumer contract."""

from enum import Enum


class MessageModel(str, Enum):
    """How messages are spread over the consumers of one group."""

    BROADCASTING = "BROADCASTING"
    CLUSTERING = "CLUSTERING"


class ONSChannel(str, Enum):
    """Deployment environment of the messaging service."""

    CLOUD = "CLOUD"
    ALIYUN = "ALIYUN"
    ALL = "ALL"
    LOCAL = "LOCAL"
    INNER = "INNER"


class Trace(Enum):
    ON = "true"
    OFF = "false"


class OrderAction(str, Enum):
    """Verdict an ordered listener returns for a single message."""

    SUCCESS = "Success"
    SUSPEND = "Suspend"
