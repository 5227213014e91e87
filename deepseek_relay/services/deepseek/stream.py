"""
Reader for the DeepSeek completion stream.

The completions endpoint answers with ``data: {...}`` lines, each carrying a
JSON object whose ``choices[0].delta.content`` holds the next fragment of the
answer. Network chunks do not respect line boundaries, so lines are
reassembled before they are parsed.
"""
import json
import logging
from typing import Any, AsyncIterable, List, Optional

from deepseek_relay.exceptions import StreamParseError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class LineBuffer:
    """
    Splits a chunked text stream into complete lines.

    The trailing piece of every chunk is held back until a later chunk
    terminates it, or until ``flush`` is called at end of stream.
    Lines end on CRLF, LF or a lone CR. A CR that ends a chunk is held back
    too, since the LF completing it may arrive in the next chunk.
    """

    def __init__(self):
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> List[str]:
        text = self._pending + chunk
        held = ""
        if text.endswith("\r"):
            text, held = text[:-1], "\r"

        text = text.replace("\r\n", "\n").replace("\r", "\n")
        *lines, tail = text.split("\n")
        self._pending = tail + held
        return lines

    def flush(self) -> List[str]:
        remainder, self._pending = self._pending.rstrip("\r"), ""
        return [remainder] if remainder else []


def parse_event_line(line: str) -> Optional[Any]:
    """
    Decode one event line.

    Returns:
        The decoded JSON value, or None for lines that are not data events
        (blank lines, comments, other SSE fields, the end sentinel)

    Raises:
        StreamParseError: If the data payload is not valid JSON
    """
    stripped = line.strip()
    if not stripped.startswith(DATA_PREFIX):
        return None

    data = stripped[len(DATA_PREFIX):]
    if data == DONE_SENTINEL:
        return None

    try:
        return json.loads(data)
    except ValueError as e:
        raise StreamParseError(line, str(e)) from e


def extract_delta(event: Any) -> Optional[str]:
    """Return ``choices[0].delta.content`` if the event carries text."""
    try:
        content = event["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None

    if isinstance(content, str) and content:
        return content
    return None


class DeltaAccumulator:
    """Builds the combined answer from streamed chunks, in arrival order."""

    def __init__(self):
        self._lines = LineBuffer()
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, chunk: str) -> None:
        for line in self._lines.feed(chunk):
            self._consume(line)

    def finish(self) -> str:
        """Consume any unterminated last line and return the combined text."""
        for line in self._lines.flush():
            self._consume(line)
        return self.text

    def _consume(self, line: str) -> None:
        try:
            event = parse_event_line(line)
        except StreamParseError as e:
            # One bad line never aborts the stream
            logger.warning(f"Error parsing chunk data: {e}")
            return

        delta = extract_delta(event)
        if delta is not None:
            self._parts.append(delta)


async def accumulate_stream(chunks: AsyncIterable[str]) -> str:
    """Drain a text stream and return the concatenated deltas."""
    accumulator = DeltaAccumulator()
    async for chunk in chunks:
        accumulator.feed(chunk)
    return accumulator.finish()
