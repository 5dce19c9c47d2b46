"""Server-sent event framing for the generation stream.

The backend answers with UTF-8 frames separated by a blank line::

    data: {"choices": [{"delta": {"content": "Hel"}}]}

    data: {"choices": [{"delta": {"content": "lo"}}]}

    data: [DONE]

Each frame line carries a ``data:`` marker. ``[DONE]`` ends the stream and is
never parsed as JSON. A frame that fails to parse is logged and skipped.
"""

import codecs
import json
from dataclasses import dataclass
from typing import List, Optional, Union

from ndraft.exceptions import FrameParseError
from ndraft.logger import Logger, session_logger

FRAME_DELIMITER = "\n\n"
DATA_MARKER = "data:"
DONE_SENTINEL = "[DONE]"
IGNORED_FIELDS = ("event:", "id:", "retry:")


@dataclass
class Frame:
    """One decoded frame: a text delta, or the end-of-stream sentinel."""

    text: str = ""
    done: bool = False


def parse_frame_payload(payload: str) -> str:
    """Return the incremental text at ``choices[0].delta.content``.

    Frames without content (role announcements, keep-alives) yield ``""``.

    Raises:
        FrameParseError: payload is not JSON or has the wrong shape
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise FrameParseError(payload, f"invalid JSON ({exc.msg})") from exc

    if not isinstance(data, dict):
        raise FrameParseError(payload, f"expected object, got {type(data).__name__}")

    choices = data.get("choices")
    if not choices:
        return ""
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise FrameParseError(payload, "'choices' is not a list of objects")

    delta = choices[0].get("delta") or {}
    if not isinstance(delta, dict):
        raise FrameParseError(payload, "'delta' is not an object")

    content = delta.get("content")
    if content is None:
        return ""
    if not isinstance(content, str):
        raise FrameParseError(payload, "'content' is not a string")
    return content


class FrameDecoder:
    """Incremental decoder from raw reads to frames.

    Reads may split a frame, a ``\\r\\n`` pair or a multi-byte character;
    nothing is emitted until its delimiter has arrived.
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger or session_logger
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.malformed_frames = 0

    def feed(self, data: Union[bytes, str]) -> List[Frame]:
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        self._buffer = (self._buffer + text).replace("\r\n", "\n")

        frames: List[Frame] = []
        while FRAME_DELIMITER in self._buffer:
            raw, self._buffer = self._buffer.split(FRAME_DELIMITER, 1)
            frame = self._decode_frame(raw)
            if frame is not None:
                frames.append(frame)
        return frames

    def flush(self) -> List[Frame]:
        """Decode whatever is left once the body has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        raw, self._buffer = self._buffer, ""
        frame = self._decode_frame(raw.replace("\r\n", "\n"))
        return [frame] if frame is not None else []

    def _decode_frame(self, raw: str) -> Optional[Frame]:
        lines = []
        for line in raw.split("\n"):
            line = line.strip()
            if not line or line.startswith(":") or line.startswith(IGNORED_FIELDS):
                continue
            if line.startswith(DATA_MARKER):
                line = line[len(DATA_MARKER):].strip()
            lines.append(line)

        payload = "\n".join(lines).strip()
        if not payload:
            return None
        if payload == DONE_SENTINEL:
            return Frame(done=True)

        try:
            return Frame(text=parse_frame_payload(payload))
        except FrameParseError as exc:
            self.malformed_frames += 1
            self.logger.warning("Skipping malformed stream frame", error=exc.message)
            return None
