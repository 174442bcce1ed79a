"""Structured output expected from resume refinement."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _none_to_empty(value: object) -> object:
    return [] if value is None else value


# Backends send null for lists they have nothing to put in.
TextList = Annotated[list[str], BeforeValidator(_none_to_empty)]
NonEmpty = Annotated[str, Field(min_length=1)]

ContactType = Literal[
    "email",
    "phone",
    "linkedin",
    "github",
    "twitter",
    "instagram",
    "website",
    "portfolio",
    "other",
]
SkillLevel = Literal["beginner", "intermediate", "advanced", "expert"]


class ContractModel(BaseModel):
    """Base for AI output models: camelCase on the wire, unknown keys dropped."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Contact(ContractModel):
    type: ContactType
    value: NonEmpty
    label: str | None = None


class PersonalInfo(ContractModel):
    name: NonEmpty
    location: str | None = None
    summary: str | None = None
    contacts: Annotated[list[Contact], BeforeValidator(_none_to_empty)] = Field(
        default_factory=list
    )


class WorkExperience(ContractModel):
    company: NonEmpty
    title: NonEmpty
    start_date: NonEmpty
    end_date: str | None = None
    location: str | None = None
    highlights: TextList = Field(default_factory=list)


class Education(ContractModel):
    institution: NonEmpty
    degree: NonEmpty
    field: str | None = None
    graduation_date: str | None = None
    gpa: str | None = None
    highlights: TextList = Field(default_factory=list)


class Skill(ContractModel):
    name: NonEmpty
    level: SkillLevel | None = None
    category: str | None = None


class Project(ContractModel):
    name: NonEmpty
    description: str | None = None
    technologies: TextList = Field(default_factory=list)
    url: str | None = None
    highlights: TextList = Field(default_factory=list)


class Certification(ContractModel):
    name: NonEmpty
    issuer: NonEmpty
    date: str | None = None
    url: str | None = None


class RefinementMetadata(ContractModel):
    targeted_keywords: TextList = Field(default_factory=list)
    changes_summary: str | None = None
    confidence_score: float | None = Field(default=None, ge=0, le=1)


class RefinedResume(ContractModel):
    """A resume rewritten for one job posting.

    Only ``personalInfo.name`` is mandatory; every section defaults to empty so
    a sparse resume stays valid.
    """

    personal_info: PersonalInfo
    work_experience: list[WorkExperience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    refinement_metadata: RefinementMetadata | None = None


RESUME_SHAPE = """{
  "personalInfo": {"name": "string", "location": "string | null", "summary": "string | null",
                   "contacts": [{"type": "email|phone|linkedin|github|twitter|instagram|website|portfolio|other",
                                 "value": "string", "label": "string | null"}]},
  "workExperience": [{"company": "string", "title": "string", "startDate": "string",
                      "endDate": "string | null", "location": "string | null", "highlights": ["string"]}],
  "education": [{"institution": "string", "degree": "string", "field": "string | null",
                 "graduationDate": "string | null", "gpa": "string | null", "highlights": ["string"]}],
  "skills": [{"name": "string", "level": "beginner|intermediate|advanced|expert|null", "category": "string | null"}],
  "projects": [{"name": "string", "description": "string | null", "technologies": ["string"],
                "url": "string | null", "highlights": ["string"]}],
  "certifications": [{"name": "string", "issuer": "string", "date": "string | null", "url": "string | null"}],
  "refinementMetadata": {"targetedKeywords": ["string"], "changesSummary": "string",
                         "confidenceScore": "number between 0 and 1"}
}"""

__all__ = [
    "Certification",
    "Contact",
    "ContractModel",
    "Education",
    "PersonalInfo",
    "Project",
    "RESUME_SHAPE",
    "RefinedResume",
    "RefinementMetadata",
    "Skill",
    "WorkExperience",
]
