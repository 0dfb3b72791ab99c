"""
Range Edit Service - Ask an LLM to rewrite selected ranges
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol

from diffcommit_backend.models.edit import EditMode
from diffcommit_backend.models.selection import RangeInput, RangeResult

from .errors import NoSelectionError, RangeEditError
from .llm_service import LLMService

logger = logging.getLogger(__name__)

TASK_DESCRIPTIONS = {
    EditMode.SPELLING: "Correct ONLY spelling errors. Do not change grammar or sentence structure.",
    EditMode.GRAMMAR: "Correct spelling, punctuation, and grammatical errors. Maintain the original style.",
    EditMode.POLISH: (
        "Polish for flow, clarity, and professionalism. Fix spelling and grammar. "
        "Preserve all claims and opinions exactly as written."
    ),
    EditMode.PROMPT: "Expand into detailed, optimized instructions.",
    EditMode.EXECUTE: "Execute the instructions fully. Produce the requested output directly.",
}

SINGLE_RANGE_SYSTEM = "You are an expert editor. Return only the edited text, without commentary."

MULTI_RANGE_SYSTEM = (
    "You are an expert editor processing multiple text segments. "
    "Each segment has a unique ID. Process each segment independently and "
    "return results for all of them in the exact JSON format requested."
)


class RangeEditService(Protocol):
    """Computes replacement text for a batch of ranges"""

    async def edit_ranges(self, ranges: list[RangeInput], mode: EditMode) -> list[RangeResult]: ...


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any"""
    match = re.fullmatch(r"\s*```(?:json)?\s*([\s\S]*?)```\s*", text)
    return match.group(1).strip() if match else text.strip()


def parse_range_results(response: str) -> list[RangeResult]:
    """Parse a {"results": [{"id", "result"}]} answer, dropping invalid entries"""
    cleaned = strip_code_fences(response)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Try to find JSON object in response
        brace_start = cleaned.find("{")
        brace_end = cleaned.rfind("}") + 1
        if brace_start < 0 or brace_end <= brace_start:
            raise RangeEditError("Failed to parse AI response")
        try:
            data = json.loads(cleaned[brace_start:brace_end])
        except json.JSONDecodeError as e:
            raise RangeEditError(f"Failed to parse AI response: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise RangeEditError("Invalid response format from AI")

    return [
        RangeResult(id=item["id"], result=item["result"])
        for item in data["results"]
        if isinstance(item, dict) and isinstance(item.get("id"), str) and isinstance(item.get("result"), str)
    ]


class LLMRangeEditService:
    """Range edit service backed by the configured LLM provider"""

    def __init__(self, config: dict[str, Any], llm: LLMService | None = None):
        self.llm = llm or LLMService(config)
        self.max_range_chars = config.get("editing", {}).get("maxRangeChars", 2000)

    def build_single_prompt(self, text: str, mode: EditMode) -> str:
        return f"{TASK_DESCRIPTIONS[mode]}\n\nText:\n{text}"

    def build_multi_prompt(self, ranges: list[RangeInput], mode: EditMode) -> str:
        segments = [{"id": r.id, "text": r.text[: self.max_range_chars]} for r in ranges]
        return (
            f"Process the following text segments according to this task:\n"
            f"{TASK_DESCRIPTIONS[mode]}\n\n"
            f"Input segments (JSON):\n{json.dumps(segments, indent=2, ensure_ascii=False)}\n\n"
            'Return a JSON object of the form {"results": [{"id": "...", "result": "..."}]} '
            "using the exact same IDs as the input."
        )

    async def edit_ranges(self, ranges: list[RangeInput], mode: EditMode) -> list[RangeResult]:
        """Rewrite every range; the answer may cover only some of them"""
        if not ranges:
            raise NoSelectionError("No ranges provided")

        if len(ranges) == 1:
            only = ranges[0]
            text = await self.llm.generate_response(self.build_single_prompt(only.text, mode), SINGLE_RANGE_SYSTEM)
            return [RangeResult(id=only.id, result=text.strip())]

        response = await self.llm.generate_response(self.build_multi_prompt(ranges, mode), MULTI_RANGE_SYSTEM)
        results = parse_range_results(response)
        logger.info("[RangeEditService] %d of %d ranges returned by %s", len(results), len(ranges), self.llm.provider)
        return results
