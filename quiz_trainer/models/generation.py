"""
Generation Models
Configuration for LLM quiz generation and URL scraping payloads
"""
from typing import Optional

from pydantic import BaseModel, Field


class GenerationConfig(BaseModel):
    """Parameters for generating a quiz from source content"""
    targetAudience: str = Field(
        default="Allgemein",
        description="Who the quiz is written for"
    )
    questionCount: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Questions per game"
    )
    answersPerQuestion: int = Field(
        default=4,
        ge=2,
        le=10,
        description="Answer options per question"
    )
    allowMultipleAnswers: bool = Field(
        default=False,
        description="Generate MultipleAnswer instead of SingleAnswer questions"
    )
    quizTitle: str = Field(
        default="Quiz",
        description="Title of the generated quiz"
    )
    poolSize: Optional[int] = Field(
        default=None,
        ge=0,
        le=500,
        description="When > 0, generate this many questions and sample questionCount per game"
    )

    @property
    def generation_count(self) -> int:
        """How many questions to ask the generator for"""
        if self.poolSize and self.poolSize > 0:
            return self.poolSize
        return self.questionCount

    class Config:
        json_schema_extra = {
            "example": {
                "targetAudience": "Schüler der 7. Klasse",
                "questionCount": 10,
                "answersPerQuestion": 4,
                "allowMultipleAnswers": False,
                "quizTitle": "Bruchrechnung",
                "poolSize": 30
            }
        }


class ScrapeRequest(BaseModel):
    url: Optional[str] = Field(None, description="Absolute http(s) URL to fetch")


class ScrapeResponse(BaseModel):
    content: str = Field(..., description="Plain text extracted from the page")
