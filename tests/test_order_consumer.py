import unittest

from pyons.core import keys
from pyons.core.consumer import MessageOrderListener, OrderConsumer
from pyons.core.enums import OrderAction
from pyons.core.property import FactoryProperty


class RecordingListener(MessageOrderListener):

    def __init__(self):
        self.messages = []

    def consume(self, message, context):
        self.messages.append(message)
        return OrderAction.SUCCESS


class InMemoryOrderConsumer(OrderConsumer):
    """Minimal consumer that hands queued messages straight to listeners."""

    def __init__(self, properties):
        super().__init__(properties)
        self.started = False
        self.subscriptions = {}

    def start(self):
        self.started = True

    def shutdown(self):
        self.started = False

    def subscribe(self, topic, sub_expression, listener=None):
        self.subscriptions[topic] = (sub_expression, self.resolve_listener(listener))

    def deliver(self, topic, message):
        _, listener = self.subscriptions[topic]
        return listener.consume(message, {"consumer_id": self.properties.get_consumer_id()})


class TestOrderConsumer(unittest.TestCase):

    def setUp(self):
        self.properties = FactoryProperty(load_credential=False)
        self.properties.set_factory_property(keys.GROUP_ID, "GID_orders")
        self.consumer = InMemoryOrderConsumer(self.properties)

    def test_abstract_contract_cannot_be_instantiated(self):
        with self.assertRaises(TypeError):
            OrderConsumer(self.properties)

    def test_inline_listener(self):
        listener = RecordingListener()
        self.consumer.start()
        self.consumer.subscribe("orders", "*", listener)

        self.assertEqual(self.consumer.deliver("orders", "m1"), OrderAction.SUCCESS)
        self.assertEqual(listener.messages, ["m1"])
        self.consumer.shutdown()
        self.assertFalse(self.consumer.started)

    def test_registered_listener_used_when_none_inline(self):
        """Test that subscribe() falls back to the registered listener."""
        listener = RecordingListener()
        self.consumer.register_message_listener(listener)
        self.consumer.subscribe("orders", "TagA || TagB")

        self.consumer.deliver("orders", "m2")
        self.assertEqual(listener.messages, ["m2"])
        self.assertEqual(self.consumer.subscriptions["orders"][0], "TagA || TagB")

    def test_inline_listener_wins_over_registered(self):
        registered, inline = RecordingListener(), RecordingListener()
        self.consumer.register_message_listener(registered)
        self.consumer.subscribe("orders", "*", inline)

        self.consumer.deliver("orders", "m3")
        self.assertEqual(inline.messages, ["m3"])
        self.assertEqual(registered.messages, [])

    def test_subscribe_without_any_listener_fails(self):
        with self.assertRaises(ValueError):
            self.consumer.subscribe("orders", "*")


if __name__ == '__main__':
    unittest.main()
