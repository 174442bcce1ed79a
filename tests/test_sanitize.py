from __future__ import annotations

from pydantic import BaseModel, Field

from tailor_ai.utils.sanitize import (
    AI_RESPONSE_OPTIONS,
    SanitizeOptions,
    sanitize_ai_response,
    sanitize_text,
    sanitize_value,
    strip_markdown,
)


class Experience(BaseModel):
    job_title: str = Field(alias="jobTitle")
    bullets: list[str]


def test_invisible_characters_are_removed() -> None:
    raw = "Py\u200bthon\u00a0developer\x07\ufeff"

    assert sanitize_text(raw) == "Python developer"


def test_line_endings_and_blank_lines_are_normalized() -> None:
    raw = "first\r\nsecond\r\n\r\n\r\n\r\nthird"

    assert sanitize_text(raw) == "first\nsecond\n\nthird"


def test_repeated_spaces_collapse_but_indentation_survives() -> None:
    assert sanitize_text("a    b") == "a b"
    assert sanitize_text("line\n    indented", SanitizeOptions(trim=False)) == "line\n    indented"


def test_markdown_is_stripped_for_ai_responses() -> None:
    raw = "## Summary\n**Led** a _small_ team, see [site](https://example.com) and `code`."

    assert sanitize_text(raw, AI_RESPONSE_OPTIONS) == "Summary\nLed a small team, see site and code."


def test_snake_case_identifiers_keep_underscores() -> None:
    assert strip_markdown("use snake_case_names") == "use snake_case_names"


def test_nested_structures_are_sanitized() -> None:
    value = {"items": ["  one  ", ("**two**",)], "count": 3, "none": None}

    assert sanitize_ai_response(value) == {"items": ["one", ("two",)], "count": 3, "none": None}


def test_models_are_rebuilt_after_cleaning() -> None:
    original = Experience(jobTitle="  **Engineer** ", bullets=["Built\u200b APIs"])

    cleaned = sanitize_value(original, AI_RESPONSE_OPTIONS)

    assert isinstance(cleaned, Experience)
    assert cleaned.job_title == "Engineer"
    assert cleaned.bullets == ["Built APIs"]
    assert original.job_title == "  **Engineer** "
