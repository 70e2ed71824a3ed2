"""
Abstract contracts for ordered message consumption.

pyons does not deliver messages itself. These classes describe the surface a
consumer runtime exposes and the listener it calls back into.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

from .enums import OrderAction

if TYPE_CHECKING:
    from .property import FactoryProperty


class MessageOrderListener(ABC):
    """Callback invoked by the runtime for each message of an ordered queue.

    Returning `OrderAction.SUSPEND` asks the runtime to pause the queue for
    the consumer's suspend duration and redeliver the message afterwards.
    """

    @abstractmethod
    def consume(self, message: Any, context: Dict[str, Any]) -> OrderAction:
        raise NotImplementedError("Subclasses must implement consume()")


class OrderConsumer(ABC):
    """Abstract base class for consumers that receive messages in order.

    The lifecycle is `start()`, then any number of `subscribe()` and
    `register_message_listener()` calls in any order, then `shutdown()`.
    A listener may be passed inline to `subscribe()` or registered once
    through `register_message_listener()`; implementations call
    `resolve_listener()` to pick whichever applies.

    Attributes:
        properties (FactoryProperty): The configuration the consumer was
            created with.
    """

    def __init__(self, properties: "FactoryProperty") -> None:
        """Initializes the consumer with its configuration.

        Args:
            properties (FactoryProperty): The client properties. Session
                setup reads the consumer id, name server address and
                credentials from it.
        """
        self.properties = properties
        self.listener: Optional[MessageOrderListener] = None

    @abstractmethod
    def start(self) -> None:
        raise NotImplementedError("Subclasses must implement start()")

    @abstractmethod
    def shutdown(self) -> None:
        raise NotImplementedError("Subclasses must implement shutdown()")

    @abstractmethod
    def subscribe(self, topic: str, sub_expression: str, listener: Optional[MessageOrderListener] = None) -> None:
        """Registers interest in `topic`, filtered by `sub_expression`.

        Args:
            topic (str): The topic to consume.
            sub_expression (str): The broker-side filter expression, e.g.
                ``"*"`` or ``"TagA || TagB"``.
            listener (Optional[MessageOrderListener]): The listener for this
                subscription. If omitted, the registered listener is used.
        """
        raise NotImplementedError("Subclasses must implement subscribe()")

    def register_message_listener(self, listener: MessageOrderListener) -> None:
        """Registers the listener used by subscriptions without their own."""
        self.listener = listener

    def resolve_listener(self, listener: Optional[MessageOrderListener] = None) -> MessageOrderListener:
        """Returns the inline listener if given, else the registered one.

        Raises:
            ValueError: If neither an inline nor a registered listener exists.
        """
        if listener is not None:
            return listener
        if self.listener is None:
            raise ValueError("No message listener was passed or registered")
        return self.listener
