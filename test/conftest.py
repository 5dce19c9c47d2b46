"""Pytest configuration and fixtures

Provides shared fixtures for all tests: an isolated data directory, a scripted
stand-in for the generation client and helpers that build server-sent event
bodies.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ndraft.config import Config
from ndraft.controller import AppController
from ndraft.logger import ConsoleLogger
from ndraft.storage import StateStore

DONE_FRAME = b"data: [DONE]\n\n"


def sse_frame(content: str) -> str:
    """One ``data:`` frame carrying ``content`` at choices[0].delta.content."""
    payload = {"choices": [{"delta": {"content": content}}]}
    return f"data: {json.dumps(payload)}\n\n"


def sse_body(*contents: str, done: bool = True) -> bytes:
    body = "".join(sse_frame(content) for content in contents).encode("utf-8")
    return body + (DONE_FRAME if done else b"")


class ScriptedClient:
    """Generation client replaying queued responses, one per ``stream`` call.

    ``pause_after=n`` holds the stream after ``n`` chunks until ``resume`` is
    set, with ``paused`` set while waiting.
    """

    def __init__(self) -> None:
        self.responses: List[Dict[str, Any]] = []
        self.prompts: List[str] = []
        self.session_ids: List[Optional[str]] = []
        self.paused = asyncio.Event()
        self.resume = asyncio.Event()

    def respond(
        self,
        *contents: str,
        done: bool = True,
        error: Optional[Exception] = None,
        pause_after: Optional[int] = None,
    ) -> None:
        chunks = [sse_frame(content).encode("utf-8") for content in contents]
        if done:
            chunks.append(DONE_FRAME)
        self.responses.append({"chunks": chunks, "error": error, "pause_after": pause_after})

    def respond_raw(self, *chunks: bytes) -> None:
        self.responses.append({"chunks": list(chunks), "error": None, "pause_after": None})

    async def stream(self, prompt: str, session_id: Optional[str] = None):
        self.prompts.append(prompt)
        self.session_ids.append(session_id)
        response = self.responses.pop(0) if self.responses else {
            "chunks": [DONE_FRAME],
            "error": None,
            "pause_after": None,
        }
        for index, chunk in enumerate(response["chunks"]):
            if index == response["pause_after"]:
                self.paused.set()
                await self.resume.wait()
            yield chunk
        if response["error"] is not None:
            raise response["error"]


@pytest.fixture(autouse=True)
def test_data_dir(tmp_path):
    """Redirect every data path into the test's temporary directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    Config.set_test_mode(data_dir)
    yield data_dir
    Config.clear_test_mode()


@pytest.fixture
def logger():
    return ConsoleLogger(name="ndraft.test")


@pytest.fixture
def scripted_client():
    return ScriptedClient()


@pytest.fixture
def state_store(test_data_dir, logger):
    return StateStore(str(test_data_dir / "state.json"), logger=logger)


@pytest.fixture
def controller(state_store, scripted_client, logger):
    """Initialized controller wired to the scripted client."""
    app_controller = AppController(state_store=state_store, client=scripted_client, logger=logger)
    app_controller.init()
    return app_controller
