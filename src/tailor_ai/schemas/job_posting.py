"""Structured output expected from job posting extraction."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractedJobPosting(BaseModel):
    """Fields pulled out of a free-form job posting.

    Text fields are optional; list fields default to empty. Backends answer
    in camelCase, so every field also accepts its camelCase alias.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    company_name: str | None = Field(default=None, alias="companyName")
    company_description: str | None = Field(default=None, alias="companyDescription")
    job_title: str | None = Field(default=None, alias="jobTitle")
    location: str | None = None
    employment_type: str | None = Field(default=None, alias="employmentType")
    salary_range: str | None = Field(default=None, alias="salaryRange")
    team_info: str | None = Field(default=None, alias="teamInfo")
    application_deadline: str | None = Field(default=None, alias="applicationDeadline")
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    qualifications: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    required_skills: list[str] = Field(default_factory=list, alias="requiredSkills")
    preferred_skills: list[str] = Field(default_factory=list, alias="preferredSkills")

    @field_validator(
        "requirements",
        "responsibilities",
        "qualifications",
        "benefits",
        "required_skills",
        "preferred_skills",
        mode="before",
    )
    @classmethod
    def _null_list_to_empty(cls, value: object) -> object:
        return [] if value is None else value


# Keys and types advertised to the model in extraction prompts.
JOB_POSTING_FIELDS: dict[str, str] = {
    "companyName": "string | null",
    "companyDescription": "string | null",
    "jobTitle": "string | null",
    "location": "string | null",
    "employmentType": "string | null",
    "salaryRange": "string | null",
    "teamInfo": "string | null",
    "applicationDeadline": "string | null",
    "requirements": "string[]",
    "responsibilities": "string[]",
    "qualifications": "string[]",
    "benefits": "string[]",
    "requiredSkills": "string[]",
    "preferredSkills": "string[]",
}

__all__ = ["ExtractedJobPosting", "JOB_POSTING_FIELDS"]
