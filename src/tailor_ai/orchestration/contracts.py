"""Shape contracts used to validate parsed backend output."""

from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import ShapeValidationError

T_co = TypeVar("T_co", covariant=True)
ModelT = TypeVar("ModelT", bound=BaseModel)


class ShapeContract(Protocol[T_co]):
    """Accepts or rejects a parsed value.

    Implementations return the (possibly coerced) value or raise
    :class:`ShapeValidationError` listing each mismatch.
    """

    def validate(self, data: Any) -> T_co: ...


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Render pydantic errors as ``"path.to.field: message"`` lines."""

    lines: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        lines.append(f"{location}: {error['msg']}" if location else error["msg"])
    return lines


class ModelContract(Generic[ModelT]):
    """Shape contract backed by a pydantic model."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def validate(self, data: Any) -> ModelT:
        try:
            return self.model.model_validate(data)
        except ValidationError as exc:
            raise ShapeValidationError(format_validation_errors(exc)) from exc

    def __repr__(self) -> str:
        return f"ModelContract({self.model.__name__})"


__all__ = ["ModelContract", "ShapeContract", "format_validation_errors"]
