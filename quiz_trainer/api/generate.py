"""
Generation API Routes
Quiz generation from text/file content and URL scraping for source material
FILE: quiz_trainer/api/generate.py
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError

from quiz_trainer.api.dependencies import get_quiz_generator
from quiz_trainer.core.config import Settings, get_settings
from quiz_trainer.core.errors import InvalidInputError, MissingInputError, UpstreamError
from quiz_trainer.models.generation import GenerationConfig, ScrapeRequest, ScrapeResponse
from quiz_trainer.models.quiz import QuizDocument
from quiz_trainer.services.content_extractor import extract_upload_text, fetch_url_text
from quiz_trainer.services.quiz_generator import QuizGenerator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


def parse_generation_config(raw: Optional[str]) -> GenerationConfig:
    """Parse the multipart `config` field (a JSON string)"""
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Konfiguration fehlt"
        )

    try:
        return GenerationConfig.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"⚠️ Invalid generation config: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ungültige Konfiguration"
        )


@router.post(
    "/generate-quiz",
    response_model=QuizDocument,
    responses={
        400: {"description": "Missing content or invalid configuration"},
        413: {"description": "Uploaded file too large"},
        500: {"description": "Generation failed"}
    },
    summary="Generate a quiz from content",
    description="""
    Generate a quiz with the configured LLM.

    **Form fields:**
    - `file`: optional text or PDF upload
    - `content`: optional raw text (used when no file is sent)
    - `config`: JSON string with targetAudience, questionCount,
      answersPerQuestion, allowMultipleAnswers, quizTitle, poolSize

    When `poolSize > 0`, `poolSize` questions are generated and each game
    draws `questionCount` of them.
    """
)
async def generate_quiz(
    file: Optional[UploadFile] = File(None),
    content: Optional[str] = Form(None),
    config: Optional[str] = Form(None),
    generator: QuizGenerator = Depends(get_quiz_generator),
    settings: Settings = Depends(get_settings)
) -> QuizDocument:
    generation_config = parse_generation_config(config)

    try:
        if file is not None and file.filename:
            data = await file.read()
            if len(data) > settings.max_upload_size:
                logger.warning(f"File too large: {len(data)} bytes")
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"Datei zu groß. Maximal {settings.max_upload_size / (1024*1024):.1f}MB"
                )
            source_text = extract_upload_text(file.filename, data)
        else:
            source_text = content

        return await generator.generate(source_text, generation_config)

    except (MissingInputError, InvalidInputError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except UpstreamError as e:
        logger.error(f"❌ Quiz generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler bei der Quiz-Generierung"
        )


@router.post(
    "/scrape",
    response_model=ScrapeResponse,
    summary="Fetch a web page as plain text",
    description="Scripts, styles and tags are removed; the text is truncated to 10,000 characters."
)
async def scrape_url(
    request: ScrapeRequest,
    settings: Settings = Depends(get_settings)
) -> ScrapeResponse:
    try:
        text = await fetch_url_text(
            request.url,
            max_length=settings.scrape_max_length,
            timeout=settings.scrape_timeout
        )
        return ScrapeResponse(content=text)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Fehler beim Abrufen der URL: {e}"
        )
