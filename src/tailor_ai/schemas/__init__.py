"""Output contracts for structured AI workflows."""

from .cover_letter import COVER_LETTER_SHAPE, CoverLetterMetadata, GeneratedCoverLetter
from .job_posting import JOB_POSTING_FIELDS, ExtractedJobPosting
from .resume import RESUME_SHAPE, RefinedResume, RefinementMetadata

__all__ = [
    "COVER_LETTER_SHAPE",
    "CoverLetterMetadata",
    "ExtractedJobPosting",
    "GeneratedCoverLetter",
    "JOB_POSTING_FIELDS",
    "RESUME_SHAPE",
    "RefinedResume",
    "RefinementMetadata",
]
