"""
Quiz Generator Service
Generates quiz documents from source text via an external LLM and normalizes the result
FILE: quiz_trainer/services/quiz_generator.py
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from quiz_trainer.core.config import Settings
from quiz_trainer.core.errors import MissingInputError, UpstreamError
from quiz_trainer.models.generation import GenerationConfig
from quiz_trainer.models.quiz import QuizDocument
from quiz_trainer.services.llm_client import LLMClientError, generate_json
from quiz_trainer.utils.quiz_parser import QuizParseError, parse_quiz_object
from quiz_trainer.utils.quiz_prompt import (
    build_quiz_prompt,
    get_system_instruction,
    load_template,
)

logger = logging.getLogger(__name__)

CORRECT_PLACEHOLDER_COMMENT = "Dies ist die richtige Antwort."

# (prompt, system) -> raw JSON text
CompletionFunc = Callable[[str, str], Awaitable[str]]


def normalize_generated_quiz(data: Dict[str, Any], config: GenerationConfig) -> Dict[str, Any]:
    """
    Bring a parsed LLM quiz in line with the requested configuration

    Steps, in order:
        1. Truncate questions to the generation count (never pad)
        2. Truncate each answer list to answersPerQuestion
        3. Force every question type from allowMultipleAnswers
        4. Mark the first answer correct if none is
        5. For SingleAnswer, keep only the first correct answer
        6. Attach poolConfig when a pool size was requested

    Args:
        data: Parsed quiz dictionary with canonical keys
        config: Generation configuration

    Returns:
        The same dictionary, modified in place
    """
    target = config.generation_count
    questions = data["questions"]

    if len(questions) > target:
        logger.info(f"✂️ Truncating {len(questions)} generated questions to {target}")
        questions = questions[:target]
    elif len(questions) < target:
        logger.warning(f"⚠️ Generator returned {len(questions)} of {target} requested questions")

    question_type = "MultipleAnswer" if config.allowMultipleAnswers else "SingleAnswer"

    for question in questions:
        answers = question.get("answers") or []
        if len(answers) > config.answersPerQuestion:
            answers = answers[:config.answersPerQuestion]
        question["answers"] = answers

        question["type"] = question_type

        if answers and not any(a.get("correct") for a in answers):
            answers[0]["correct"] = True
            answers[0]["comment"] = CORRECT_PLACEHOLDER_COMMENT

        if question_type == "SingleAnswer":
            found_first = False
            for answer in answers:
                if answer.get("correct"):
                    if found_first:
                        answer["correct"] = False
                    else:
                        found_first = True

    data["questions"] = questions

    if config.poolSize and config.poolSize > 0:
        questions_per_game = config.questionCount
        if questions_per_game > len(questions):
            logger.warning(
                f"⚠️ Only {len(questions)} questions generated; "
                f"limiting questionsPerGame from {questions_per_game}"
            )
            questions_per_game = len(questions)
        data["poolConfig"] = {
            "poolSize": config.poolSize,
            "questionsPerGame": questions_per_game
        }

    return data


class QuizGenerator:
    """Builds the prompt, calls the LLM, and validates the generated quiz"""

    def __init__(
        self,
        settings: Settings,
        completion: Optional[CompletionFunc] = None
    ):
        """
        Initialize quiz generator

        Args:
            settings: Application settings
            completion: Optional replacement for the LLM call (prompt, system) -> text
        """
        self.settings = settings
        self.template = load_template(settings.prompt_template_path)
        self._completion = completion

    async def _complete(self, prompt: str, system: str) -> str:
        if self._completion is not None:
            return await self._completion(prompt, system)
        return await generate_json(prompt, system, self.settings)

    async def generate(self, source_text: Optional[str], config: GenerationConfig) -> QuizDocument:
        """
        Generate a quiz from source text

        Args:
            source_text: Material the questions are drawn from
            config: Generation configuration

        Returns:
            Validated QuizDocument

        Raises:
            MissingInputError: If no source text was supplied
            UpstreamError: If the LLM call fails or returns unusable data
        """
        if not source_text or not source_text.strip():
            raise MissingInputError("Kein Inhalt bereitgestellt")

        target = config.generation_count
        logger.info(
            f"🎯 Generating quiz '{config.quizTitle}' - "
            f"{target} questions, {config.answersPerQuestion} answers each"
        )

        prompt = build_quiz_prompt(
            template=self.template,
            content=source_text,
            target_audience=config.targetAudience,
            question_count=target,
            answers_per_question=config.answersPerQuestion,
            allow_multiple_answers=config.allowMultipleAnswers,
            quiz_title=config.quizTitle
        )

        try:
            raw_response = await self._complete(prompt, get_system_instruction())
        except LLMClientError as e:
            raise UpstreamError(f"LLM request failed: {e}")
        except ValueError as e:
            raise UpstreamError(f"LLM configuration error: {e}")

        try:
            data = parse_quiz_object(raw_response)
        except QuizParseError as e:
            logger.error(f"❌ Failed to parse quiz: {e}")
            logger.debug(f"Raw response: {raw_response[:500]}...")
            raise UpstreamError(f"Failed to parse quiz response: {e}")

        data = normalize_generated_quiz(data, config)

        try:
            quiz = QuizDocument.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ Generated quiz failed validation: {e}")
            raise UpstreamError("Generated quiz is incomplete")

        logger.info(f"✅ Generated quiz '{quiz.topic}' with {len(quiz.questions)} questions")
        return quiz
