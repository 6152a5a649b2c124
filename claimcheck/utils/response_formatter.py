"""Extraction of JSON payloads from model replies."""

import json
import logging
import re
from typing import Any, Dict, Optional

from .errors import MalformedModelResponse

logger = logging.getLogger(__name__)

# ```json ... ``` or bare ``` ... ```; the language tag is optional
_FENCED_BLOCK = re.compile(r"```[ \t]*([A-Za-z0-9_-]*)[ \t]*\r?\n?(.*?)```", re.DOTALL)


def find_fenced_block(text: str) -> Optional[str]:
    """
    Return the body of the first fenced code block in text.

    Args:
        text: Model reply

    Returns:
        Stripped block body, or None if the reply has no fenced block
    """
    match = _FENCED_BLOCK.search(text or "")
    if match is None:
        return None
    return match.group(2).strip()


def extract_fenced_json(response_text: str) -> Dict[str, Any]:
    """
    Parse the JSON object a model returned.

    The first fenced code block is used when one exists; otherwise the
    whole stripped reply is treated as candidate JSON.

    Args:
        response_text: Raw reply text from the model

    Returns:
        Parsed JSON object

    Raises:
        MalformedModelResponse: If the reply is empty, holds no parseable
            JSON candidate, or the JSON value is not an object
    """
    if not response_text or not response_text.strip():
        raise MalformedModelResponse.build("Model returned an empty response")

    block = find_fenced_block(response_text)
    candidate = block if block is not None else response_text.strip()
    source = "fenced block" if block is not None else "raw reply"

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.debug(f"Unparseable model reply: {response_text[:500]}")
        raise MalformedModelResponse.build(
            f"Model reply {source} is not valid JSON: {str(e)}",
            error=e,
            source=source
        ) from e

    if not isinstance(data, dict):
        raise MalformedModelResponse.build(
            f"Model reply {source} is a JSON {type(data).__name__}, expected an object",
            source=source
        )

    logger.debug(f"Extracted JSON object from {source} with {len(data)} keys")
    return data
