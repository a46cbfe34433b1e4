"""Agent output parsing.

A text-generation collaborator answers with a configuration JSON string, the literal
``null``, or prose wrapped around JSON. This module turns that answer into a raw
configuration mapping ready for the validator:
1. Very short answers and ``null`` mean "no resource" and yield None
2. Markdown code fences and thinking blocks are stripped
3. The first complete JSON object is extracted from surrounding prose
4. json_repair fixes common generation mistakes (trailing commas, single quotes, ...)"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from json_repair import repair_json
from loguru import logger

from .config import settings


class JSONParseError(ValueError):
    """Exception thrown when agent output cannot be turned into a JSON object, with the raw text attached."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class AgentOutputParser:
    """Parser for configuration JSON produced by a text-generation agent."""

    _THINKING_PATTERNS = [
        r"^\s*<thinking>.*?</thinking>\s*",
        r"^\s*<thought>.*?</thought>\s*",
    ]

    def __init__(self, min_length: Optional[int] = None, enable_json_repair: bool = True):
        self.min_length = settings.MIN_AGENT_RESPONSE_LENGTH if min_length is None else min_length
        self.enable_json_repair = enable_json_repair

    def parse(self, raw_text: Optional[str], context_name: str = "agent output") -> Optional[Dict[str, Any]]:
        """Return the JSON object in raw_text, or None when the agent declined to produce one.

        Raises:
            JSONParseError: the text is not recoverable JSON, or is JSON but not an object"""
        if raw_text is None:
            return None
        text = raw_text.strip()
        if not text or text.lower() == "null" or len(text) < self.min_length:
            logger.debug(f"{context_name}: no resource in response ({len(text)} chars)")
            return None

        cleaned = self._clean_response(text)
        if cleaned.lower() == "null":
            return None

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            if not self.enable_json_repair:
                raise JSONParseError(f"{context_name} is not valid JSON: {exc}", raw_text=raw_text) from exc
            data = self._attempt_json_repair(cleaned, context_name, raw_text)

        if data is None:
            return None
        if not isinstance(data, dict):
            raise JSONParseError(
                f"{context_name} must be a JSON object, got {type(data).__name__}", raw_text=raw_text
            )
        return data

    # ======== Internal Tools ========

    def _clean_response(self, raw: str) -> str:
        cleaned = raw.strip()
        for pattern in self._THINKING_PATTERNS:
            cleaned = re.sub(pattern, "", cleaned, flags=re.DOTALL | re.IGNORECASE)

        fenced_match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", cleaned)
        if fenced_match:
            cleaned = fenced_match.group(1).strip()
        else:
            if cleaned.startswith("```json"):
                cleaned = cleaned[7:]
            elif cleaned.startswith("```"):
                cleaned = cleaned[3:]
            if cleaned.endswith("```"):
                cleaned = cleaned[:-3]
            cleaned = cleaned.strip()

        return self._extract_first_json_object(cleaned)

    @staticmethod
    def _extract_first_json_object(text: str) -> str:
        """The first balanced {...} in text, or text unchanged when there is none."""
        start = text.find("{")
        if start == -1:
            return text

        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if escaped:
                escaped = False
                continue
            if ch == "\\":
                escaped = True
                continue
            if ch == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        return text[start:]

    def _attempt_json_repair(self, text: str, context_name: str, raw_text: str) -> Any:
        repaired = repair_json(text)
        if not repaired or not repaired.strip() or repaired.strip() == '""':
            raise JSONParseError(f"{context_name} could not be repaired into JSON", raw_text=raw_text)
        try:
            data = json.loads(repaired)
        except json.JSONDecodeError as exc:
            raise JSONParseError(f"{context_name} is still invalid after repair: {exc}", raw_text=raw_text) from exc
        logger.info(f"{context_name} JSON repaired with json_repair")
        return data


_default_parser = AgentOutputParser()


def parse_config_text(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse agent output into a raw configuration mapping (None when there is no resource)."""
    return _default_parser.parse(text)


__all__ = ["JSONParseError", "AgentOutputParser", "parse_config_text"]
