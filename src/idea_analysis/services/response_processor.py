"""Turns a model's raw text answer into a validated ProcessedResult.

Parsing is layered:
1. Strict: locate the JSON object and validate it against ``LLMScorePayload``
2. Best effort: pull the four numeric fields out with regular expressions
3. Validation of bounds and the recommendation label
4. Fallback callback (usually the rule-based provider) if anything above failed
"""

import json
import logging
import re
from collections.abc import Callable

from pydantic import ValidationError

from idea_analysis.entities import GoalContext, RECOMMENDATIONS, ScoreBreakdown, determine_recommendation
from idea_analysis.errors import InvalidResponseError
from idea_analysis.models import LLMScorePayload
from idea_analysis.services.validator import ProcessedResult, ScoreValidationError, ScoreValidator

logger = logging.getLogger(__name__)

FallbackFunc = Callable[[str, GoalContext | None], ProcessedResult]

SCORE_FIELDS = ("mission_alignment", "anti_challenge", "strategic_fit", "final_score")
EXPLANATION_FIELDS = ("mission_alignment", "anti_challenge", "strategic_fit")

_NUMBER_PATTERNS = {
    name: re.compile(rf'"?{name}"?\s*:\s*"?(-?\d+(?:\.\d+)?)') for name in SCORE_FIELDS
}
_EXPLANATION_PATTERNS = {
    name: re.compile(rf'"{name}"\s*:\s*"((?:[^"\\]|\\.)*)"') for name in EXPLANATION_FIELDS
}
_RECOMMENDATION_PATTERN = re.compile(
    r'"?recommendation"?\s*:\s*"?(' + "|".join(sorted(RECOMMENDATIONS)) + r')', re.IGNORECASE
)
_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class ResponseProcessor:
    """Parses and validates model answers, with an optional local fallback.

    Example:
        ```python
        processor = ResponseProcessor(fallback=rule_based_fallback)
        processed = processor.process(raw_text, request.idea_text, request.context)
        if processed.used_fallback:
            ...
        ```
    """

    def __init__(
        self,
        fallback: FallbackFunc | None = None,
        validator: ScoreValidator | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            fallback: Called with (idea_text, context) when the answer is unusable.
            validator: Bounds checker. Defaults to ``ScoreValidator()``.
        """
        self._fallback = fallback
        self._validator = validator or ScoreValidator()

    @property
    def has_fallback(self) -> bool:
        return self._fallback is not None

    def process(self, raw_text: str, idea_text: str, context: GoalContext | None = None) -> ProcessedResult:
        """
        Parse, validate and, if needed, fall back.

        Args:
            raw_text: The model's answer.
            idea_text: Original idea, handed to the fallback.
            context: Original goal context, handed to the fallback.

        Returns:
            The processed result; ``used_fallback`` is True if the fallback produced it.

        Raises:
            InvalidResponseError: If the answer is unusable and no fallback is configured.
        """
        try:
            result = self._parse_structured(raw_text)
        except InvalidResponseError as structured_error:
            logger.debug("Structured parse failed (%s); trying regex extraction", structured_error)
            result = self._extract_with_regex(raw_text)
            if result is None:
                return self._use_fallback(idea_text, context, structured_error)

        try:
            self._validator.validate(result)
        except ScoreValidationError as e:
            logger.warning("Model answer failed validation: %s", e)
            return self._use_fallback(idea_text, context, e)

        return result

    def _use_fallback(self, idea_text: str, context: GoalContext | None, cause: Exception) -> ProcessedResult:
        if self._fallback is None:
            raise InvalidResponseError(f"could not process model response: {cause}") from cause

        logger.warning("Using fallback analysis after unusable model response: %s", cause)
        result = self._fallback(idea_text, context)
        return ProcessedResult(
            scores=result.scores,
            final_score=result.final_score,
            recommendation=result.recommendation,
            explanations=dict(result.explanations or {}),
            provider=result.provider,
            used_fallback=True,
        )

    def _parse_structured(self, raw_text: str) -> ProcessedResult:
        candidate = extract_json(raw_text)
        if not candidate:
            raise InvalidResponseError("no JSON object found in response")

        try:
            payload = LLMScorePayload.model_validate_json(candidate)
        except ValidationError as e:
            raise InvalidResponseError(f"malformed JSON payload: {e.error_count()} error(s)") from e

        return ProcessedResult(
            scores=ScoreBreakdown(
                mission_alignment=payload.scores.mission_alignment,
                anti_challenge=payload.scores.anti_challenge,
                strategic_fit=payload.scores.strategic_fit,
            ),
            final_score=payload.final_score,
            recommendation=payload.recommendation.strip().upper(),
            explanations=dict(payload.explanations or {}),
        )

    def _extract_with_regex(self, raw_text: str) -> ProcessedResult | None:
        values: dict[str, float] = {}
        for name, pattern in _NUMBER_PATTERNS.items():
            match = pattern.search(raw_text)
            if match is None:
                return None
            values[name] = float(match.group(1))

        explanations: dict[str, str] = {}
        for name, pattern in _EXPLANATION_PATTERNS.items():
            match = pattern.search(raw_text)
            if match is not None:
                explanations[name] = _unescape(match.group(1))

        label_match = _RECOMMENDATION_PATTERN.search(raw_text)
        if label_match is not None:
            recommendation = label_match.group(1).upper()
        else:
            recommendation = determine_recommendation(values["final_score"])

        return ProcessedResult(
            scores=ScoreBreakdown(
                mission_alignment=values["mission_alignment"],
                anti_challenge=values["anti_challenge"],
                strategic_fit=values["strategic_fit"],
            ),
            final_score=values["final_score"],
            recommendation=recommendation,
            explanations=explanations,
            provider="extracted",
        )


def extract_json(text: str) -> str:
    """
    Locate a JSON object in text a model may have wrapped in prose.

    A fenced code block wins; otherwise the first balanced ``{...}`` span is
    returned. Braces inside JSON strings are respected.

    Args:
        text: Raw model output.

    Returns:
        The candidate JSON text, or an empty string if there is none.
    """
    fenced = _FENCED_JSON.search(text)
    if fenced is not None and "{" in fenced.group(1):
        text = fenced.group(1)

    start = text.find("{")
    if start == -1:
        return ""

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return ""


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value
