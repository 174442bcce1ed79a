"""Structured output expected from cover letter generation."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

from .resume import ContractModel, NonEmpty, TextList

Tone = Literal["formal", "conversational", "enthusiastic"]


class CoverLetterMetadata(ContractModel):
    highlighted_experiences: TextList = Field(default_factory=list)
    tone: Tone | None = None


class GeneratedCoverLetter(ContractModel):
    """A cover letter addressed to one company.

    The opening, at least one body paragraph, the closing and the signature
    must all be present.
    """

    recipient_name: str | None = None
    recipient_title: str | None = None
    company_name: NonEmpty
    company_address: str | None = None
    date: str | None = None
    opening: NonEmpty
    body: Annotated[list[NonEmpty], Field(min_length=1)]
    closing: NonEmpty
    signature: NonEmpty
    metadata: CoverLetterMetadata | None = None


COVER_LETTER_SHAPE = """{
  "recipientName": "string | null",
  "recipientTitle": "string | null",
  "companyName": "string",
  "companyAddress": "string | null",
  "date": "string | null",
  "opening": "string",
  "body": ["string (one entry per paragraph, at least one)"],
  "closing": "string",
  "signature": "string",
  "metadata": {"highlightedExperiences": ["string"], "tone": "formal|conversational|enthusiastic"}
}"""

__all__ = ["COVER_LETTER_SHAPE", "CoverLetterMetadata", "GeneratedCoverLetter", "Tone"]
