"""Manages the client properties of a pyons producer or consumer.

This module holds `FactoryProperty`, the string-to-string property map that
every client instance is configured with. The map is seeded with built-in
defaults, optionally overlaid with the user's `~/ons/credential` file, and
then mutated through validated setters. Typed accessors interpret the raw
strings for the session-establishment code that consumes them.
"""

import json
import logging
import re
import threading
from datetime import timedelta
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from . import keys
from .enums import MessageModel, ONSChannel, Trace
from .errors import ONSClientError
from ..utils.environment import default_credential_path

logger = logging.getLogger(__name__)

Duration = Union[int, timedelta]

_INT_PATTERN = re.compile(r"^\s*[+-]?\d+\s*$")
_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1


def _to_millis(duration: Duration) -> int:
    if isinstance(duration, timedelta):
        return duration // timedelta(milliseconds=1)
    return int(duration)


def _parse_int32(text: str) -> Optional[int]:
    """Parses a signed 32-bit integer, returning None on any failure."""
    if not _INT_PATTERN.match(text):
        return None
    value = int(text)
    if value < _INT32_MIN or value > _INT32_MAX:
        return None
    return value


class FactoryProperty:
    """Typed view over the properties of a single client instance.

    On construction the store applies its built-in defaults and then,
    unless disabled, imports `AccessKey`, `SecretKey`, `NAMESRV_ADDR` and
    `GroupId` from the credential file. A missing or malformed credential file is logged and
    otherwise ignored.

    Every write goes through `set_factory_property`, which rejects an
    unknown message model and empty credentials. The only exception is
    `set_factory_properties`, which swaps the whole map without validation.

    Attributes:
        DEFAULTS (Dict[str, str]): A snapshot of the map the built-in
            defaults produce. The defaults themselves are applied by the
            typed setters in `_set_defaults`; editing this dict does not
            change them.
    """

    DEFAULTS = {
        keys.MESSAGE_MODEL: MessageModel.CLUSTERING.value,
        keys.SEND_MSG_TIMEOUT_MILLIS: "3000",
        keys.SUSPEND_TIME_MILLIS: "3000",
        keys.MAX_MSG_CACHE_SIZE: "1000",
        keys.ONS_TRACE_SWITCH: Trace.ON.value,
    }

    def __init__(self, credential_path: Optional[Path] = None, load_credential: bool = True) -> None:
        """Initializes the store with defaults and the credential overlay.

        Args:
            credential_path (Optional[Path]): A credential file to read
                instead of `<home>/ons/credential`.
            load_credential (bool): If False, the credential file is not
                consulted at all. Defaults to True.
        """
        self._lock = threading.RLock()
        self._properties: Dict[str, str] = {}
        self._set_defaults()
        if load_credential:
            self._load_credential_file(credential_path)

    def _set_defaults(self) -> None:
        self.set_message_model(MessageModel.CLUSTERING)
        self.set_send_msg_timeout(timedelta(seconds=3))
        self.set_suspend_duration(timedelta(seconds=3))
        self.set_factory_property(keys.MAX_MSG_CACHE_SIZE, self.DEFAULTS[keys.MAX_MSG_CACHE_SIZE])
        self.with_trace_feature(Trace.ON)

    def _load_credential_file(self, credential_path: Optional[Path] = None) -> None:
        """Overlays credentials from a JSON file, if one is present.

        Only the keys in `keys.CREDENTIAL_FILE_KEYS` are imported. Nothing in
        this method raises: every problem is logged and the affected part of
        the overlay is skipped.

        Args:
            credential_path (Optional[Path]): The file to read. Defaults to
                `<home>/ons/credential`.
        """
        path = Path(credential_path) if credential_path is not None else default_credential_path()
        if path is None:
            logger.info("No home directory available; skipping default config file")
            return

        try:
            is_file = path.is_file()
        except OSError as e:
            logger.warning(f"Failed to inspect config file: {path}. Cause: {e}")
            return
        if not is_file:
            logger.info(f"No default config file found at {path}")
            return

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read config file: {path}. Cause: {e}")
            return

        try:
            root = json.loads(content)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Failed to parse config JSON. Cause: {e}")
            return

        if not isinstance(root, dict):
            logger.warning(f"Failed to parse config JSON. Cause: expected an object, got {type(root).__name__}")
            return

        for key in keys.CREDENTIAL_FILE_KEYS:
            if key not in root:
                continue
            value = root[key]
            if not isinstance(value, str):
                logger.warning(f"Ignoring {key} in default config file: expected a string, got {type(value).__name__}")
                continue
            try:
                self.set_factory_property(key, value)
            except ONSClientError as e:
                logger.warning(f"Ignoring {key} in default config file: {e}")
                continue
            logger.info(f"Set {key} through default config file")

    @staticmethod
    def validate(key: str, value: str) -> bool:
        """Checks a value against the constraints of its key.

        Args:
            key (str): The property key being written.
            value (str): The candidate value.

        Returns:
            bool: True if the value is acceptable.

        Raises:
            ONSClientError: If the message model is not BROADCASTING or
                CLUSTERING, or a credential is empty.
        """
        if key == keys.MESSAGE_MODEL:
            if value not in (MessageModel.BROADCASTING.value, MessageModel.CLUSTERING.value):
                raise ONSClientError(
                    "MessageModel could only be set to BROADCASTING or CLUSTERING, please set it.",
                    key=key,
                    value=value,
                )

        if key == keys.ACCESS_KEY and not value:
            raise ONSClientError("AccessKey must be set.", key=key, value=value)

        if key == keys.SECRET_KEY and not value:
            raise ONSClientError("SecretKey must be set.", key=key, value=value)

        return True

    def set_factory_property(self, key: str, value: str) -> None:
        """Validates and stores a single property.

        Args:
            key (str): The property key, usually one of the constants in
                `pyons.core.keys`.
            value (str): The string value to store.

        Raises:
            ONSClientError: If `validate` rejects the value. The previous
                value, if any, is kept.
            TypeError: If `value` is not a string.
        """
        if not isinstance(value, str):
            raise TypeError(f"Property {key} must be a string, got {type(value).__name__}")
        with self._lock:
            if self.validate(key, value):
                self._properties[key] = value

    def set_factory_properties(self, properties: Mapping[str, str]) -> None:
        """Replaces the whole property map.

        Warning: this is an unsafe bulk load. The values are NOT passed
        through `validate`, so it can install an empty AccessKey or an
        unknown MessageModel.

        Args:
            properties (Mapping[str, str]): The new property map. It is
                copied, so later changes to it do not leak into the store.

        Raises:
            TypeError: If a key or value is not a string. Nothing is replaced.
        """
        replacement = dict(properties)
        for key, value in replacement.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"Property {key!r} must map a string to a string, got {type(value).__name__}")
        with self._lock:
            self._properties = replacement

    def get_factory_properties(self) -> Dict[str, str]:
        """Returns an independent copy of the property map."""
        with self._lock:
            return dict(self._properties)

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Returns the raw value stored for `key`, or `default`."""
        return self._properties.get(key, default)

    # Identity

    def get_producer_id(self) -> str:
        """Returns the producer identity.

        GroupId wins over ProducerId when both are set.
        """
        group_id = self.get_property(keys.GROUP_ID)
        if group_id is not None:
            return group_id
        return self.get_property(keys.PRODUCER_ID, "")

    def get_consumer_id(self) -> str:
        """Returns the consumer identity.

        GroupId wins over ConsumerId when both are set.
        """
        group_id = self.get_property(keys.GROUP_ID)
        if group_id is not None:
            return group_id
        return self.get_property(keys.CONSUMER_ID, "")

    def get_group_id(self) -> str:
        return self.get_property(keys.GROUP_ID, "")

    def get_instance_id(self) -> str:
        return self.get_property(keys.INSTANCE_ID, "")

    def get_consumer_instance_name(self) -> str:
        return self.get_property(keys.CONSUMER_INSTANCE_NAME, "")

    # Credentials and addressing

    def get_access_key(self) -> str:
        return self.get_property(keys.ACCESS_KEY, "")

    def get_secret_key(self) -> str:
        return self.get_property(keys.SECRET_KEY, "")

    def get_name_srv_addr(self) -> str:
        """Returns the IP-style name server address (`NAMESRV_ADDR`)."""
        return self.get_property(keys.NAMESRV_ADDR, "")

    def get_name_srv_domain(self) -> str:
        """Returns the domain-style name server address (`ONSAddr`)."""
        return self.get_property(keys.ONS_ADDR, "")

    def get_log_path(self) -> str:
        return self.get_property(keys.LOG_PATH, "")

    # Delivery behavior

    def get_message_model(self) -> str:
        return self.get_property(keys.MESSAGE_MODEL, "")

    def set_message_model(self, message_model: MessageModel) -> "FactoryProperty":
        """Sets the message model.

        Args:
            message_model (MessageModel): BROADCASTING or CLUSTERING. A plain
                string is accepted and validated the same way.

        Returns:
            FactoryProperty: This store, for chaining.
        """
        value = message_model.value if isinstance(message_model, MessageModel) else message_model
        self.set_factory_property(keys.MESSAGE_MODEL, value)
        return self

    def get_send_msg_timeout(self) -> timedelta:
        """Returns the send timeout.

        A missing or unparseable value yields a zero duration.
        """
        return self._get_duration(keys.SEND_MSG_TIMEOUT_MILLIS)

    def set_send_msg_timeout(self, timeout: Duration) -> "FactoryProperty":
        """Sets the send timeout.

        Args:
            timeout (Union[int, timedelta]): Milliseconds, or a timedelta.

        Returns:
            FactoryProperty: This store, for chaining.
        """
        self.set_factory_property(keys.SEND_MSG_TIMEOUT_MILLIS, str(_to_millis(timeout)))
        return self

    def get_suspend_time_millis(self) -> timedelta:
        """Returns how long an ordered consumer suspends after a failure.

        A missing or unparseable value yields a zero duration.
        """
        return self._get_duration(keys.SUSPEND_TIME_MILLIS)

    def set_suspend_duration(self, duration: Duration) -> None:
        """Sets the suspend duration of ordered consumers.

        A zero duration is ignored and leaves the current value in place.

        Args:
            duration (Union[int, timedelta]): Milliseconds, or a timedelta.
        """
        millis = _to_millis(duration)
        if not millis:
            return
        self.set_factory_property(keys.SUSPEND_TIME_MILLIS, str(millis))

    def get_send_msg_retry_times(self) -> int:
        """Returns the send retry count, or -1 if unset.

        Raises:
            ValueError: If the stored value is not an integer.
        """
        return self._get_count(keys.SEND_MSG_RETRY_TIMES)

    def set_send_msg_retry_times(self, value: int) -> "FactoryProperty":
        self.set_factory_property(keys.SEND_MSG_RETRY_TIMES, str(int(value)))
        return self

    def get_consume_thread_nums(self) -> int:
        """Returns the consumer thread count, or -1 if unset.

        Raises:
            ValueError: If the stored value is not an integer.
        """
        return self._get_count(keys.CONSUME_THREAD_NUMS)

    def set_consume_thread_nums(self, value: int) -> "FactoryProperty":
        self.set_factory_property(keys.CONSUME_THREAD_NUMS, str(int(value)))
        return self

    def get_max_msg_cache_size(self) -> int:
        """Returns the per-queue message cache limit, or -1 if unset.

        Raises:
            ValueError: If the stored value is not an integer.
        """
        return self._get_count(keys.MAX_MSG_CACHE_SIZE)

    def set_max_msg_cache_size(self, value: int) -> "FactoryProperty":
        self.set_factory_property(keys.MAX_MSG_CACHE_SIZE, str(int(value)))
        return self

    def get_max_msg_cache_size_in_mib(self) -> int:
        """Returns the per-queue cache limit in MiB, or -1 if unset.

        Raises:
            ValueError: If the stored value is not an integer.
        """
        return self._get_count(keys.MAX_CACHED_MESSAGE_SIZE_IN_MIB)

    def set_max_msg_cache_size_in_mib(self, value: int) -> "FactoryProperty":
        self.set_factory_property(keys.MAX_CACHED_MESSAGE_SIZE_IN_MIB, str(int(value)))
        return self

    # Channel and tracing

    def get_ons_channel(self) -> ONSChannel:
        """Returns the channel, falling back to ALIYUN for unknown values."""
        value = self.get_property(keys.ONS_CHANNEL, keys.DEFAULT_CHANNEL)
        try:
            return ONSChannel(value)
        except ValueError:
            return ONSChannel.ALIYUN

    def get_channel(self) -> str:
        """Returns the raw channel string, defaulting to "ALIYUN"."""
        return self.get_property(keys.ONS_CHANNEL, keys.DEFAULT_CHANNEL)

    def set_ons_channel(self, channel: ONSChannel) -> None:
        """Sets the channel.

        Args:
            channel (ONSChannel): One of CLOUD, ALIYUN, ALL, LOCAL or INNER.
                The literal string is accepted as well.

        Raises:
            ONSClientError: If `channel` is not one of the five channels.
        """
        try:
            channel = ONSChannel(channel)
        except ValueError:
            raise ONSClientError(
                "ONSChannel could only be set to CLOUD/ALIYUN/ALL/LOCAL/INNER, please reset it.",
                key=keys.ONS_CHANNEL,
                value=str(channel),
            ) from None
        self.set_factory_property(keys.ONS_CHANNEL, channel.value)

    def get_ons_trace_switch(self) -> bool:
        """Returns False only when tracing was explicitly switched off."""
        return self.get_property(keys.ONS_TRACE_SWITCH, Trace.ON.value) != Trace.OFF.value

    def set_ons_trace_switch(self, should_trace: bool) -> "FactoryProperty":
        return self.with_trace_feature(Trace.ON if should_trace else Trace.OFF)

    def with_trace_feature(self, trace: Trace) -> "FactoryProperty":
        self.set_factory_property(keys.ONS_TRACE_SWITCH, trace.value)
        return self

    # Readiness

    def is_ready(self) -> bool:
        """Determines whether the properties are complete enough to connect.

        The ALIYUN channel requires both AccessKey and SecretKey; every other
        channel is always ready. Evaluated from the current map on each call.

        Returns:
            bool: True if a client may be started with these properties.
        """
        if self.get_ons_channel() is ONSChannel.ALIYUN:
            return bool(self.get_access_key()) and bool(self.get_secret_key())
        return True

    def __bool__(self) -> bool:
        return self.is_ready()

    def _get_duration(self, key: str) -> timedelta:
        value = self.get_property(key)
        if value is not None:
            millis = _parse_int32(value)
            if millis is not None:
                return timedelta(milliseconds=millis)
        return timedelta(0)

    def _get_count(self, key: str) -> int:
        # Unlike durations, a malformed count is an error for the caller.
        value = self.get_property(key)
        if value is None:
            return -1
        return int(value)

    def __str__(self) -> str:
        """Returns a string representation with the secret key masked."""
        shown = self.get_factory_properties()
        if shown.get(keys.SECRET_KEY):
            shown[keys.SECRET_KEY] = "******"
        return f"FactoryProperty({shown})"
