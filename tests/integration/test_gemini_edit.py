"""
Integration tests for Gemini image editing.

These tests call the real Gemini API. They are slow and cost money.
Run rarely and only when you need to verify the live API path.

To run:
  LENSEDIT_RUN_INTEGRATION_TESTS=1 GEMINI_API_KEY=... pytest -m integration --run-slow
"""

import asyncio
import io
import os

import pytest
from PIL import Image

from lensedit import (
    Config,
    GeminiClient,
    ImageBytes,
    SessionController,
    SessionPhase,
    decode_data_url,
    encode_image,
)


def _integration_enabled() -> bool:
    return os.getenv("LENSEDIT_RUN_INTEGRATION_TESTS", "").strip() == "1"


def _red_square_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (64, 64), color=(220, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.mark.integration
@pytest.mark.slow
@pytest.mark.expensive
class TestGeminiEdit:
    """Real Gemini edits (requires API key and opt-in env)."""

    @pytest.fixture(autouse=True)
    def _require_opt_in(self) -> None:
        if not _integration_enabled():
            pytest.skip(
                "Integration tests are disabled. "
                "Set LENSEDIT_RUN_INTEGRATION_TESTS=1 to run (slow, costs money)."
            )
        if not Config.from_env().gemini_api_key:
            pytest.skip("GEMINI_API_KEY not set. Set it in .env or environment.")

    def test_client_returns_decodable_image(self) -> None:
        part = asyncio.run(encode_image(ImageBytes(_red_square_png(), "image/png")))
        outcome = asyncio.run(
            GeminiClient(Config.from_env()).generate(part, "Make the square blue.")
        )
        assert hasattr(outcome, "result_image"), getattr(outcome, "message", outcome)
        data, mime_type = decode_data_url(outcome.result_image)
        assert mime_type.startswith("image/")
        image = Image.open(io.BytesIO(data))
        assert image.size[0] > 0

    def test_session_round_trip(self) -> None:
        with SessionController(client=GeminiClient(Config.from_env())) as session:
            session.select_image(ImageBytes(_red_square_png(), "image/png"))
            session.set_instruction("Turn this into a pencil sketch.")
            asyncio.run(session.submit())
            state = session.state
        assert state.phase in (SessionPhase.SUCCESS, SessionPhase.ERROR)
        if state.phase is SessionPhase.SUCCESS:
            assert state.result_image.startswith("data:image/")
        else:
            assert state.error_message
