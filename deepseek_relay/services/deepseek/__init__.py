from .client import DeepSeekClient
from .stream import DeltaAccumulator, LineBuffer, accumulate_stream, extract_delta, parse_event_line

__all__ = [
    "DeepSeekClient",
    "DeltaAccumulator",
    "LineBuffer",
    "accumulate_stream",
    "extract_delta",
    "parse_event_line",
]
