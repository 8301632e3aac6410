"""
Task classification for descriptions the phrase table does not know.

GeminiClassifier asks the Gemini generateContent API for a JSON verdict
({taskType, category, confidence, reasoning}). Without an API key, or
when the call or the response fails in any way, a small set of local
regex patterns decides instead, so classification never raises.
"""

import json
import logging
import math
import re

import httpx

from routeopt.core.discovery.models import DEFAULT_CATEGORY, Classification
from routeopt.core.exceptions import ClassificationError

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_CONFIDENCE = 0.65
GENERIC_TASK_TYPE = "general-task"

PROMPT_TEMPLATE = """Classify this SOUL routing task description into a task type.

Description: "{description}"

Rules:
- Return strict JSON only (no markdown).
- taskType must be kebab-case.
- category must be one of: Daily Conversation, Action Tasks, Escalation.
- confidence must be between 0 and 1.
- Prefer "sub-agent-coordination" when coordination between agents is implied.

JSON schema:
{{"taskType":"string","category":"string","confidence":0.0,"reasoning":"string"}}"""

# (pattern, task type, confidence); first match wins
LOCAL_PATTERNS: list[tuple[re.Pattern[str], str, float]] = [
    (re.compile(r"sub.?agent|multi.?agent|agent.?coordination", re.I), "sub-agent-coordination", 0.9),
    (re.compile(r"coordination|orchestration", re.I), "coordination", 0.8),
    (re.compile(r"review|audit|inspection", re.I), "review-analysis", 0.8),
    (re.compile(r"translation|language", re.I), "translation", 0.8),
    (re.compile(r"creative|writing|story", re.I), "creative-writing", 0.8),
    (re.compile(r"data.?extract|scraping", re.I), "data-extraction", 0.8),
    (re.compile(r"automation|workflow", re.I), "automation", 0.8),
]

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.I)


def sanitize_task_type(value: str | None) -> str:
    """
    Kebab-case task type id.

    Example:
        >>> sanitize_task_type("Code Review!")
        'code-review'
    """
    text = str(value or "").lower()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-")
    return text or GENERIC_TASK_TYPE


def clamp_confidence(value: object, fallback: float = DEFAULT_CONFIDENCE) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if math.isnan(number):
        return fallback
    return max(0.0, min(1.0, number))


def parse_classification_json(text: str) -> dict:
    """
    Parse the model's JSON verdict, bare or inside a ``` fence.

    Raises:
        ClassificationError: If no JSON object can be read
    """
    candidates = [text]
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1))
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise ClassificationError("Unable to parse classifier JSON response")


def classify_with_local_patterns(description: str, source: str = "pattern-match") -> Classification:
    for pattern, task_type, confidence in LOCAL_PATTERNS:
        if pattern.search(description):
            return Classification(
                task_type=task_type,
                confidence=confidence,
                category=DEFAULT_CATEGORY,
                source=source,
                reasoning=f"Matched fallback pattern: {pattern.pattern}",
            )
    return Classification(
        task_type=GENERIC_TASK_TYPE,
        confidence=0.3,
        category=DEFAULT_CATEGORY,
        source=source,
        reasoning="No specific pattern matched, using generic task type",
    )


class GeminiClassifier:
    """
    Classifies task descriptions with Gemini.

    Example:
        >>> classifier = GeminiClassifier(api_key=None)
        >>> classifier.classify("Sub-agent coordination").task_type
        'sub-agent-coordination'
    """

    def __init__(self, api_key: str | None, model: str = DEFAULT_MODEL, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{API_BASE}/{self.model}:generateContent"

    def _request(self, description: str) -> Classification:
        response = httpx.post(
            self.endpoint,
            params={"key": self.api_key},
            json={
                "contents": [
                    {"role": "user", "parts": [{"text": PROMPT_TEMPLATE.format(description=description)}]}
                ],
                "generationConfig": {"temperature": 0.1, "responseMimeType": "application/json"},
            },
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise ClassificationError(
                f"Gemini API HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            output = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassificationError("Gemini response missing output text") from e

        parsed = parse_classification_json(output)
        return Classification(
            task_type=sanitize_task_type(parsed.get("taskType")),
            confidence=clamp_confidence(parsed.get("confidence")),
            category=parsed.get("category") or DEFAULT_CATEGORY,
            source=f"gemini:{self.model}",
            reasoning=parsed.get("reasoning") or f"Classified by {self.model}",
        )

    def classify(self, description: str) -> Classification:
        if not self.api_key:
            return classify_with_local_patterns(description, "missing-api-key")
        try:
            return self._request(description)
        except (httpx.HTTPError, ClassificationError) as e:
            logger.warning(f'Gemini classification failed for "{description}": {e}')
            return classify_with_local_patterns(description, "gemini-fallback")
