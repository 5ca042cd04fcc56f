"""Tests for translator: model-reply parsing and the completion request."""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.config import Settings
from app.errors import ConfigurationError, LLMOutputInvalid
from app.services.translator import SYSTEM_PROMPT, PageSpecTranslator, parse_page_spec

_SETTINGS = Settings(netlify_auth_token="tok", openai_api_key="sk-test", openai_model="test-model")

_REPLY = json.dumps(
    {
        "websiteNiche": "cardiology",
        "doctorDetails": {
            "name": "Raj Patel",
            "specialization": ["Heart failure"],
            "achievements": [],
            "description": "Cardiologist.",
        },
        "pageLinks": ["about"],
        "images": [],
        "testimonialImages": [],
        "faqs": [{"question": "Q?", "answer": "A."}],
    }
)


def _fake_client(reply):
    create = AsyncMock(
        return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=reply))]
        )
    )
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


class TestParsePageSpec:
    def test_valid_reply(self):
        spec = parse_page_spec(_REPLY)
        assert spec.niche == "cardiology"
        assert spec.subject.name == "Raj Patel"
        assert spec.faqs[0].answer == "A."

    def test_prose_is_rejected_with_raw_text(self):
        raw = "Sure! Here is your JSON: {}"
        with pytest.raises(LLMOutputInvalid) as excinfo:
            parse_page_spec(raw)
        assert excinfo.value.raw == raw
        assert excinfo.value.to_payload()["raw"] == raw

    def test_code_fences_are_not_stripped(self):
        with pytest.raises(LLMOutputInvalid):
            parse_page_spec(f"```json\n{_REPLY}\n```")

    def test_json_array_is_rejected(self):
        with pytest.raises(LLMOutputInvalid):
            parse_page_spec("[1, 2, 3]")

    def test_missing_required_fields_are_rejected(self):
        with pytest.raises(LLMOutputInvalid) as excinfo:
            parse_page_spec(json.dumps({"websiteNiche": "law"}))
        assert excinfo.value.details


class TestPageSpecTranslator:
    def test_request_is_deterministic_with_fixed_system_prompt(self):
        client, create = _fake_client(_REPLY)
        translator = PageSpecTranslator(_SETTINGS, client=client)

        spec = asyncio.run(translator.translate("Dr Raj Patel, cardiologist in Leeds"))

        assert spec.subject.name == "Raj Patel"
        kwargs = create.call_args.kwargs
        assert kwargs["temperature"] == 0
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert "Dr Raj Patel, cardiologist in Leeds" in kwargs["messages"][1]["content"]

    def test_empty_reply_is_invalid(self):
        client, _ = _fake_client(None)
        translator = PageSpecTranslator(_SETTINGS, client=client)

        with pytest.raises(LLMOutputInvalid) as excinfo:
            asyncio.run(translator.translate("anything"))
        assert excinfo.value.raw == ""

    def test_missing_api_key(self):
        translator = PageSpecTranslator(Settings(netlify_auth_token="tok"))

        with pytest.raises(ConfigurationError):
            asyncio.run(translator.translate("anything"))
