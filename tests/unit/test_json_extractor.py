"""Tests for JSON extraction from model text."""

import json

import pytest
from hypothesis import given, strategies as st

from form_scanner.errors import MalformedReplyError, UnparsableReplyError
from form_scanner.models.form_models import FormExtractionReply, GeneratedValues
from form_scanner.services.json_extractor import extract_json_object, parse_model_reply

# Backticks inside strings would close a fence early
_UNFENCED_TEXT = st.text(alphabet=st.characters(exclude_characters="`"), max_size=8)


class TestExtractJsonObject:
    """Test extract_json_object() strategy order."""

    def test_json_fence(self):
        text = 'Sure!\n```json\n{"a": 1}\n```\nAnything else?'

        assert extract_json_object(text) == {"a": 1}

    def test_unlabelled_fence(self):
        text = 'Result:\n```\n{"b": 2}\n```'

        assert extract_json_object(text) == {"b": 2}

    def test_bare_object(self):
        assert extract_json_object('  {"c": [1, 2, 3]}  ') == {"c": [1, 2, 3]}

    def test_json_fence_wins_over_other_fence(self):
        text = '```text\n{"from": "plain"}\n```\n```json\n{"from": "json"}\n```'

        assert extract_json_object(text) == {"from": "json"}

    def test_invalid_json_fence_falls_through(self):
        text = '```json\n{not valid}\n```\n```\n{"ok": true}\n```'

        assert extract_json_object(text) == {"ok": True}

    def test_uppercase_label(self):
        assert extract_json_object('```JSON\n{"d": null}\n```') == {"d": None}

    def test_non_object_json_is_rejected(self):
        with pytest.raises(UnparsableReplyError):
            extract_json_object("[1, 2, 3]")

    def test_no_json(self):
        with pytest.raises(UnparsableReplyError) as exc_info:
            extract_json_object("I could not find any forms, sorry.")

        assert exc_info.value.raw_text == "I could not find any forms, sorry."

    def test_empty_text(self):
        with pytest.raises(UnparsableReplyError):
            extract_json_object("")

    @given(
        payload=st.dictionaries(
            st.text(alphabet="abcdefghij", min_size=1, max_size=8),
            st.one_of(st.integers(), st.booleans(), st.text(alphabet="xyz ", max_size=10)),
            max_size=5,
        ),
        prose=st.text(alphabet="abc .!?", max_size=40),
    )
    def test_fenced_object_is_recovered(self, payload, prose):
        """Property: an object in a json fence is found regardless of the prose around it."""
        text = f"{prose}\n```json\n{json.dumps(payload)}\n```\n{prose}"

        assert extract_json_object(text) == payload

    @given(
        payload=st.dictionaries(
            _UNFENCED_TEXT,
            st.recursive(
                st.none() | st.booleans() | st.integers() | _UNFENCED_TEXT,
                lambda children: st.lists(children, max_size=3)
                | st.dictionaries(_UNFENCED_TEXT, children, max_size=3),
                max_leaves=10,
            ),
            max_size=5,
        ),
        fenced=st.booleans(),
    )
    def test_reextracting_serialized_object_is_identity(self, payload, fenced):
        """Property: extract, serialize, extract again gives the same object."""
        body = json.dumps(payload)
        text = f"Here you go:\n```json\n{body}\n```" if fenced else body

        first = extract_json_object(text)
        second = extract_json_object(json.dumps(first))

        assert first == payload
        assert second == first


class TestParseModelReply:
    """Test parse_model_reply() schema validation."""

    def test_valid_extraction_reply(self, extraction_reply_text):
        reply = parse_model_reply(extraction_reply_text, FormExtractionReply)

        assert reply.summary.total_functional_forms == 1
        assert reply.forms[0].form_id == "contact-form"
        assert reply.forms[0].fields[0].validation == {"minLength": 2, "maxLength": 50}

    def test_schema_mismatch_is_malformed(self):
        with pytest.raises(MalformedReplyError, match="FormExtractionReply"):
            parse_model_reply('{"forms": []}', FormExtractionReply)

    def test_values_reply(self, values_reply_text):
        reply = parse_model_reply(values_reply_text, GeneratedValues)

        assert reply.values["email"] == "sarah.johnson@example.com"
        assert reply.metadata.all_validations_satisfied is True
