"""Streaming response handling."""
from ndraft.streaming.accumulator import StreamAccumulator, mask_directives
from ndraft.streaming.frames import DONE_SENTINEL, Frame, FrameDecoder, parse_frame_payload

__all__ = [
    "StreamAccumulator",
    "mask_directives",
    "Frame",
    "FrameDecoder",
    "parse_frame_payload",
    "DONE_SENTINEL",
]
