"""Locate and decode the JSON object embedded in free-form model text."""

import json
import re
from typing import Any, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

from form_scanner.errors import MalformedReplyError, UnparsableReplyError

ModelT = TypeVar("ModelT", bound=BaseModel)

_JSON_FENCE = re.compile(r"```json[ \t]*\r?\n(.*?)```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```[\w+-]*[ \t]*\r?\n(.*?)```", re.DOTALL)


def _candidates(text: str) -> Iterator[str]:
    """Candidate JSON strings, in strategy order: json fence, any fence, whole text."""
    for match in _JSON_FENCE.finditer(text):
        yield match.group(1)
    for match in _ANY_FENCE.finditer(text):
        yield match.group(1)
    yield text


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Return the first JSON object found in text.

    Tries a ```json fenced block, then any fenced block, then the whole text.
    Candidates that are not valid JSON, or are valid JSON but not an object,
    fall through to the next strategy.

    Raises:
        UnparsableReplyError: If no strategy yields a JSON object
    """
    for candidate in _candidates(text):
        try:
            parsed = json.loads(candidate.strip())
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise UnparsableReplyError(text)


def parse_model_reply(text: str, schema: type[ModelT]) -> ModelT:
    """
    Extract the JSON object in text and validate it against schema.

    Raises:
        UnparsableReplyError: If text holds no JSON object
        MalformedReplyError: If the object does not match schema
    """
    payload = extract_json_object(text)
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise MalformedReplyError(
            f"Model reply does not match {schema.__name__}: {e.error_count()} validation error(s)"
        ) from e
