"""Abstract base class for all reviewguard field validators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from reviewguard.models import ValidationOptions, ValidationResult


class BaseFieldValidator(ABC):
    """Every field validator must subclass this and implement ``validate``.

    ``defaults`` holds the validator's own option defaults; a
    :class:`ValidationOptions` passed per call overrides them field by field.
    """

    name: str = "base"
    defaults: dict[str, Any] = {}

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config: dict[str, Any] = config or {}

    @abstractmethod
    def validate(
        self, value: Any, options: ValidationOptions | None = None,
    ) -> ValidationResult:
        """Run the validator against *value* and return a result."""

    def option(self, options: ValidationOptions | None, name: str) -> Any:
        default = self.defaults.get(name)
        if options is None:
            return default
        return options.pick(name, default)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
