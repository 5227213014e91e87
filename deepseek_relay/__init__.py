"""
DeepSeek chat relay.

Forwards a single chat message to the DeepSeek chat API and returns the
streamed answer as one JSON document.
"""
__version__ = "1.0.0"
