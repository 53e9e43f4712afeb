"""Unit tests for the typed generateContent response view."""

import pytest

from lensedit.core.response import ImagePart, TextPart, first_candidate_parts
from lensedit.utils.exceptions import APIError


@pytest.mark.unit
class TestFirstCandidateParts:
    def test_parts_in_order(self):
        body = {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "Here is your edit"},
                            {"inlineData": {"data": "QQ==", "mimeType": "image/png"}},
                        ]
                    }
                }
            ]
        }
        assert first_candidate_parts(body) == [
            TextPart("Here is your edit"),
            ImagePart("QQ==", "image/png"),
        ]

    def test_only_first_candidate_read(self):
        body = {
            "candidates": [
                {"content": {"parts": [{"text": "first"}]}},
                {"content": {"parts": [{"inlineData": {"data": "QQ=="}}]}},
            ]
        }
        assert first_candidate_parts(body) == [TextPart("first")]

    def test_snake_case_inline_data_accepted(self):
        body = {"candidates": [{"content": {"parts": [{"inline_data": {"data": "QQ=="}}]}}]}
        assert first_candidate_parts(body) == [ImagePart("QQ==", None)]

    def test_empty_parts_dropped(self):
        body = {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"inlineData": {"data": "", "mimeType": "image/png"}},
                            {"text": ""},
                            {"thought": True},
                        ]
                    }
                }
            ]
        }
        assert first_candidate_parts(body) == []

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"candidates": None},
            {"candidates": []},
            {"candidates": [{}]},
            {"candidates": [{"content": None}]},
            {"candidates": [{"content": {"parts": []}}]},
        ],
    )
    def test_missing_levels_yield_no_parts(self, body):
        assert first_candidate_parts(body) == []

    @pytest.mark.parametrize("body", [[], "text", {"candidates": [{"content": "x"}]}])
    def test_malformed_raises_api_error(self, body):
        with pytest.raises(APIError):
            first_candidate_parts(body)
