"""Small asyncio demonstrations: a channel, a counter actor, TCP servers, a web app and a backpressure pipeline."""

__version__ = "0.1.0"