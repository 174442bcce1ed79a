"""Orchestration layer public exports."""

from .contracts import ModelContract, ShapeContract, format_validation_errors
from .exceptions import ProcessorError, ShapeValidationError, map_provider_error
from .processor import ProcessingOrchestrator, ProcessorSettings
from .prompt_builder import (
    build_cover_letter_prompt,
    build_job_extraction_prompt,
    build_resume_refinement_prompt,
)

__all__ = [
    "ModelContract",
    "ProcessingOrchestrator",
    "ProcessorError",
    "ProcessorSettings",
    "ShapeContract",
    "ShapeValidationError",
    "build_cover_letter_prompt",
    "build_job_extraction_prompt",
    "build_resume_refinement_prompt",
    "format_validation_errors",
    "map_provider_error",
]
