from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AppError(Exception):
    """
    Назначение:
        Ошибка уровня CLI (входные файлы команды), попадает в context.error отчёта.
    """

    category: str
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @classmethod
    def missing_input(cls, optionName: str, path: str | None) -> "AppError":
        return cls(
            category="input",
            code="INPUT_FILE_MISSING",
            message=f"{optionName} is missing or not accessible",
            details={"option": optionName, "path": path},
        )

    @classmethod
    def bad_source(cls, code: str, exc: Exception, path: str | None) -> "AppError":
        return cls(category="input", code=code, message=str(exc), details={"path": path})

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "code": self.code, "message": self.message, "details": dict(self.details)}
