"""
Quiz Parser
Parses LLM-generated quiz JSON objects into plain dictionaries with canonical keys
"""
import json
import re
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class QuizParseError(Exception):
    """Base exception for quiz parsing errors"""
    pass


class InvalidJSONError(QuizParseError):
    """Raised when JSON cannot be parsed even after cleanup"""
    pass


class ValidationError(QuizParseError):
    """Raised when quiz structure validation fails"""
    pass


# Keys written by older quiz files and by prompts in German
KEY_ALIASES = {
    "Thema": "topic",
    "Fragen": "questions",
    "PoolConfig": "poolConfig",
    "Frage": "text",
    "Typ": "type",
    "Antworten": "answers",
    "Antwort": "text",
    "Richtig": "correct",
    "Kommentar": "comment",
}


def _strip_markdown(text: str) -> str:
    """
    Remove markdown code block formatting

    Args:
        text: Raw text possibly containing markdown

    Returns:
        Text with markdown code blocks removed
    """
    pattern = r"```(?:json)?\s*([\s\S]*?)\s*```"
    match = re.search(pattern, text)
    if match:
        return match.group(1).strip()

    return text.replace("```", "").strip()


def _extract_json_object(text: str) -> str:
    """
    Extract a JSON object from text by finding the outermost braces

    Raises:
        InvalidJSONError: If no valid object braces found
    """
    first_brace = text.find("{")
    last_brace = text.rfind("}")

    if first_brace == -1 or last_brace == -1 or first_brace >= last_brace:
        raise InvalidJSONError("No JSON object found in response")

    return text[first_brace:last_brace + 1]


def _fix_trailing_commas(text: str) -> str:
    return re.sub(r",\s*([}\]])", r"\1", text)


def _canonical_question(question: Any) -> Any:
    if not isinstance(question, dict):
        return question

    result = {KEY_ALIASES.get(k, k): v for k, v in question.items()}
    answers = result.get("answers")
    if isinstance(answers, list):
        result["answers"] = [
            {KEY_ALIASES.get(k, k): v for k, v in a.items()} if isinstance(a, dict) else a
            for a in answers
        ]
    return result


def canonicalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map German quiz keys to their English equivalents, recursively"""
    result = {KEY_ALIASES.get(k, k): v for k, v in data.items()}
    questions = result.get("questions")
    if isinstance(questions, list):
        result["questions"] = [_canonical_question(q) for q in questions]
    return result


def parse_quiz_object(raw_response: str) -> Dict[str, Any]:
    """
    Parse and shape-check a quiz JSON object from an LLM response

    Attempts direct JSON parsing first, then strips markdown fences and
    trailing commas if that fails.

    Args:
        raw_response: Raw string response from LLM

    Returns:
        Quiz dictionary with canonical keys: topic, questions[, poolConfig]

    Raises:
        InvalidJSONError: If JSON cannot be parsed after cleanup
        ValidationError: If topic is missing or questions is not a list
    """
    if not raw_response or not raw_response.strip():
        raise InvalidJSONError("Empty response received")

    logger.debug(f"Parsing quiz response ({len(raw_response)} chars)")

    try:
        data = json.loads(raw_response.strip())
    except json.JSONDecodeError as e:
        logger.debug(f"Direct parse failed: {e}. Attempting cleanup...")
        try:
            cleaned = _fix_trailing_commas(_extract_json_object(_strip_markdown(raw_response)))
            data = json.loads(cleaned)
        except json.JSONDecodeError as e2:
            logger.error(f"JSON parse failed after cleanup: {e2}")
            raise InvalidJSONError(f"Failed to parse JSON: {e2}. Original error: {e}")

    if not isinstance(data, dict):
        raise ValidationError(f"Expected a JSON object, got {type(data).__name__}")

    data = canonicalize_keys(data)

    if not data.get("topic") or not isinstance(data.get("questions"), list):
        raise ValidationError("Ungültiges Quiz-Format")

    for idx, question in enumerate(data["questions"]):
        if not isinstance(question, dict):
            raise ValidationError(
                f"Question {idx + 1}: Expected object, got {type(question).__name__}"
            )
        if not isinstance(question.get("answers"), list):
            raise ValidationError(f"Question {idx + 1}: 'answers' must be a list")
        if not all(isinstance(a, dict) for a in question["answers"]):
            raise ValidationError(f"Question {idx + 1}: every answer must be an object")

    logger.info(f"✅ Parsed quiz '{data['topic']}' with {len(data['questions'])} questions")

    return data
