"""Tests for server-sent event frame decoding."""

import pytest

from conftest import sse_frame
from ndraft.exceptions import FrameParseError
from ndraft.streaming import FrameDecoder, parse_frame_payload


class TestParseFramePayload:
    """Tests for payload extraction."""

    def test_content_extracted(self):
        """Test the delta content is returned."""
        assert parse_frame_payload('{"choices": [{"delta": {"content": "Hi"}}]}') == "Hi"

    def test_missing_content_is_empty(self):
        """Test frames without content yield empty text."""
        assert parse_frame_payload('{"choices": [{"delta": {"role": "assistant"}}]}') == ""
        assert parse_frame_payload('{"choices": []}') == ""
        assert parse_frame_payload("{}") == ""

    def test_invalid_json_raises(self):
        """Test invalid JSON raises FrameParseError."""
        with pytest.raises(FrameParseError):
            parse_frame_payload("{not json")

    def test_wrong_shape_raises(self):
        """Test non-object payloads raise FrameParseError."""
        with pytest.raises(FrameParseError):
            parse_frame_payload("[1, 2]")
        with pytest.raises(FrameParseError):
            parse_frame_payload('{"choices": [{"delta": {"content": 5}}]}')


class TestFrameDecoder:
    """Tests for incremental frame decoding."""

    def test_whole_frames(self, logger):
        """Test complete frames in one read."""
        decoder = FrameDecoder(logger=logger)
        frames = decoder.feed((sse_frame("Hel") + sse_frame("lo")).encode())

        assert [frame.text for frame in frames] == ["Hel", "lo"]

    def test_frame_split_across_reads(self, logger):
        """Test nothing is emitted until the delimiter arrives."""
        decoder = FrameDecoder(logger=logger)
        data = sse_frame("Hello").encode()

        assert decoder.feed(data[:10]) == []
        assert decoder.feed(data[10:-1]) == []
        frames = decoder.feed(data[-1:])

        assert [frame.text for frame in frames] == ["Hello"]

    def test_multibyte_character_split(self, logger):
        """Test a UTF-8 character split between reads is decoded once whole."""
        decoder = FrameDecoder(logger=logger)
        data = 'data: {"choices": [{"delta": {"content": "café"}}]}\n\n'.encode("utf-8")
        split = data.index("é".encode("utf-8")) + 1

        assert decoder.feed(data[:split]) == []
        frames = decoder.feed(data[split:])

        assert frames[0].text == "café"

    def test_crlf_delimiters(self, logger):
        """Test CRLF line endings, including a pair split across reads."""
        decoder = FrameDecoder(logger=logger)
        data = sse_frame("A").replace("\n", "\r\n").encode()

        assert decoder.feed(data[:-1]) == []
        frames = decoder.feed(data[-1:])

        assert [frame.text for frame in frames] == ["A"]

    def test_done_sentinel(self, logger):
        """Test [DONE] ends the stream without JSON parsing."""
        decoder = FrameDecoder(logger=logger)
        frames = decoder.feed(sse_frame("x").encode() + b"data: [DONE]\n\n")

        assert frames[-1].done is True
        assert decoder.malformed_frames == 0

    def test_malformed_frame_skipped(self, logger):
        """Test a bad frame is counted and skipped."""
        decoder = FrameDecoder(logger=logger)
        frames = decoder.feed(b"data: {broken\n\n" + sse_frame("ok").encode())

        assert [frame.text for frame in frames] == ["ok"]
        assert decoder.malformed_frames == 1

    def test_comments_and_fields_ignored(self, logger):
        """Test comment lines and non-data fields are ignored."""
        decoder = FrameDecoder(logger=logger)
        frames = decoder.feed(b": keep-alive\n\nevent: message\n" + sse_frame("z").encode())

        assert [frame.text for frame in frames] == ["z"]

    def test_flush_trailing_frame(self, logger):
        """Test a final frame without a blank line is decoded on flush."""
        decoder = FrameDecoder(logger=logger)
        data = sse_frame("tail").rstrip("\n").encode()

        assert decoder.feed(data) == []
        frames = decoder.flush()

        assert [frame.text for frame in frames] == ["tail"]
        assert decoder.flush() == []
