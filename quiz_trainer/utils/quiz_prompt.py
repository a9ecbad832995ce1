"""
Quiz Prompt Builder
Constructs the quiz generation prompt from a placeholder template
"""
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = (
    "Du bist ein Experte für die Erstellung von Lernquizzes. "
    "Antworte NUR mit validem JSON, ohne zusätzlichen Text."
)

SINGLE_ANSWER_LABEL = "SingleAnswer (nur eine richtige Antwort)"
MULTIPLE_ANSWER_LABEL = "MultipleAnswer (Mehrfachauswahl möglich)"

EXAMPLE_SCHEMA = """{
  "topic": "{{QUIZ_TITLE}}",
  "questions": [
    {
      "text": "Welche Organelle ist für die Energiegewinnung zuständig?",
      "type": "SingleAnswer",
      "answers": [
        {"text": "Mitochondrium", "correct": true, "comment": "Richtig, hier findet die Zellatmung statt."},
        {"text": "Ribosom", "correct": false, "comment": "Ribosomen synthetisieren Proteine."}
      ]
    }
  ]
}"""

DEFAULT_TEMPLATE = """Erstelle ein Lernquiz mit dem Titel "{{QUIZ_TITLE}}" für folgende Zielgruppe: {{TARGET_AUDIENCE}}.

ANFORDERUNGEN:
- Erstelle genau {{QUESTION_COUNT}} Fragen auf Basis des Inhalts unten
- Jede Frage hat genau {{ANSWERS_PER_QUESTION}} Antworten
- Fragetyp: {{ANSWER_TYPE}}
- Jede Antwort hat einen kurzen, lehrreichen Kommentar, der erklärt, warum sie richtig oder falsch ist
- Die Fragen müssen sich direkt aus dem Inhalt beantworten lassen

AUSGABEFORMAT (ein einziges JSON-Objekt, keine Markdown-Codeblöcke):
""" + EXAMPLE_SCHEMA + """

INHALT:
{{CONTENT}}
"""


def load_template(template_path: Optional[str] = None) -> str:
    """
    Load the prompt template

    Args:
        template_path: Optional path to a custom template file

    Returns:
        Template text with {{PLACEHOLDER}} markers
    """
    if not template_path:
        return DEFAULT_TEMPLATE

    path = Path(template_path)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"⚠️ Could not read prompt template {path}: {e}. Using built-in template")
        return DEFAULT_TEMPLATE


def build_quiz_prompt(
    template: str,
    content: str,
    target_audience: str,
    question_count: int,
    answers_per_question: int,
    allow_multiple_answers: bool,
    quiz_title: str
) -> str:
    """
    Substitute generation parameters into the template

    The content placeholder is filled last so placeholder-like text inside
    the source material is left untouched.

    Args:
        template: Template text
        content: Source material
        target_audience: Who the quiz is for
        question_count: Number of questions to request
        answers_per_question: Answers per question
        allow_multiple_answers: MultipleAnswer vs SingleAnswer questions
        quiz_title: Title of the quiz

    Returns:
        Complete prompt string
    """
    answer_type = MULTIPLE_ANSWER_LABEL if allow_multiple_answers else SINGLE_ANSWER_LABEL

    prompt = (
        template
        .replace("{{TARGET_AUDIENCE}}", target_audience)
        .replace("{{QUESTION_COUNT}}", str(question_count))
        .replace("{{ANSWERS_PER_QUESTION}}", str(answers_per_question))
        .replace("{{ANSWER_TYPE}}", answer_type)
        .replace("{{QUIZ_TITLE}}", quiz_title)
    )

    return prompt.replace("{{CONTENT}}", content)


def get_system_instruction() -> str:
    """
    Get the system instruction for quiz generation

    Returns:
        System instruction string
    """
    return SYSTEM_INSTRUCTION
