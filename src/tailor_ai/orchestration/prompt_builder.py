"""Prompt producers for the structured resume workflows."""

from __future__ import annotations

import json

from tailor_ai.schemas import COVER_LETTER_SHAPE, JOB_POSTING_FIELDS, RESUME_SHAPE

_JOB_EXTRACTION_TEMPLATE = """You extract structured data from job postings.

Read the job posting below and return ONLY a JSON object with these keys:
{fields}

Rules:
- Use null for any text field the posting does not mention.
- Use an empty list for any list field the posting does not mention.
- Copy facts from the posting; do not invent details.
- Do not wrap the JSON in markdown and do not add commentary.

Job posting:
<<<
{posting}
>>>
"""

_RESUME_REFINEMENT_TEMPLATE = """You tailor resumes to job postings.

Rewrite the resume below so it targets the job posting. Return ONLY a JSON
object of this shape:
{shape}

Rules:
- Keep every employer, title, date, degree and certification from the resume.
- Reorder and reword highlights to match the posting's requirements.
- Never invent experience, skills or credentials.
- List the posting keywords you addressed in refinementMetadata.targetedKeywords.
- Do not wrap the JSON in markdown and do not add commentary.

Resume (JSON):
<<<
{resume}
>>>

Job posting:
<<<
{posting}
>>>
"""

_COVER_LETTER_TEMPLATE = """You write cover letters.

Write a cover letter connecting the candidate's resume to the job posting.
Return ONLY a JSON object of this shape:
{shape}

Rules:
- Keep the tone {tone}.
- Use at most {max_paragraphs} body paragraphs, one string per paragraph.
- Mention only experience that appears in the resume.
- Sign with the candidate's name.
- Do not wrap the JSON in markdown and do not add commentary.

Resume (JSON):
<<<
{resume}
>>>

Job posting:
<<<
{posting}
>>>
"""


def _resume_json(resume: str | dict) -> str:
    if isinstance(resume, str):
        return resume.strip()
    return json.dumps(resume, indent=2, ensure_ascii=False)


def build_job_extraction_prompt(posting: str) -> str:
    """Wrap raw posting text in extraction instructions."""

    fields = json.dumps(JOB_POSTING_FIELDS, indent=2)
    return _JOB_EXTRACTION_TEMPLATE.format(fields=fields, posting=posting.strip())


def build_resume_refinement_prompt(resume: str | dict, posting: str) -> str:
    """Ask for the resume rewritten against ``posting``."""

    return _RESUME_REFINEMENT_TEMPLATE.format(
        shape=RESUME_SHAPE,
        resume=_resume_json(resume),
        posting=posting.strip(),
    )


def build_cover_letter_prompt(
    resume: str | dict,
    posting: str,
    *,
    tone: str = "formal",
    max_paragraphs: int = 3,
) -> str:
    return _COVER_LETTER_TEMPLATE.format(
        tone=tone,
        shape=COVER_LETTER_SHAPE,
        max_paragraphs=max_paragraphs,
        resume=_resume_json(resume),
        posting=posting.strip(),
    )


__all__ = [
    "build_cover_letter_prompt",
    "build_job_extraction_prompt",
    "build_resume_refinement_prompt",
]
