"""Accumulates a streamed response and projects its visible text."""

import re
from typing import List, Optional, Union

from ndraft.directives.grammar import parse_directives
from ndraft.logger import Logger
from ndraft.models.directives import DirectiveResult
from ndraft.streaming.frames import Frame, FrameDecoder

# A completed token, or a "!" that is still open at the end of the buffer.
OPEN_OR_CLOSED_TOKEN = re.compile(r"![^!]+!|![^!]*$")


def mask_directives(text: str) -> str:
    """Hide anything that is, or may still become, a directive."""
    return OPEN_OR_CLOSED_TOKEN.sub("", text)


class StreamAccumulator:
    """Append-only response buffer with a streaming-safe visible projection.

    ``feed`` returns the new visible text whenever it changes. Only
    ``finalize`` runs the directive grammar, on the full buffer.
    """

    def __init__(self, decoder: Optional[FrameDecoder] = None, logger: Optional[Logger] = None):
        self.decoder = decoder or FrameDecoder(logger=logger)
        self._raw = ""
        self._visible = ""
        self.done = False
        self.closed = False

    @property
    def raw_text(self) -> str:
        return self._raw

    @property
    def visible_text(self) -> str:
        return self._visible

    def feed(self, data: Union[bytes, str]) -> Optional[str]:
        if self.closed or self.done:
            return None
        return self._apply(self.decoder.feed(data))

    def finish(self) -> Optional[str]:
        """Mark the body as ended, decoding a trailing undelimited frame."""
        if self.closed or self.done:
            return None
        visible = self._apply(self.decoder.flush())
        self.done = True
        return visible

    def close(self) -> None:
        """Stop accepting data (cancellation)."""
        self.closed = True

    def finalize(self) -> DirectiveResult:
        return parse_directives(self._raw)

    def _apply(self, frames: List[Frame]) -> Optional[str]:
        appended = False
        for frame in frames:
            if frame.done:
                self.done = True
                break
            if frame.text:
                self._raw += frame.text
                appended = True

        if not appended:
            return None
        visible = mask_directives(self._raw)
        if visible == self._visible:
            return None
        self._visible = visible
        return visible
