"""Message queuing for batch reporters."""

from .mailbox import Enqueue, Mailbox, Message, ReportEvents, Stop
from .producer import EventProducer

__all__ = ["Mailbox", "Message", "Enqueue", "ReportEvents", "Stop", "EventProducer"]
