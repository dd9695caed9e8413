from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from .sfc import SFCParseError, compile_extension

VERSION_RE = re.compile(r"^\d+(\.\d+){0,2}(-[0-9A-Za-z.-]+)?$")

TYPE_PAGE = "page"
TYPE_WIDGET = "widget"
EXTENSION_TYPES = {TYPE_PAGE, TYPE_WIDGET}


@dataclass
class ExtensionValidationIssue:
    code: str
    message: str
    hint: Optional[str] = None
    field: Optional[str] = None
    line: Optional[int] = None


@dataclass
class ExtensionValidationResult:
    errors: list[ExtensionValidationIssue]
    descriptor: Optional[dict] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def summary(self, *, detailed: bool = False) -> str:
        parts: list[str] = []
        for issue in self.errors:
            message = f"Line {issue.line}: {issue.message}" if issue.line else issue.message
            if detailed and issue.hint:
                parts.append(f"{message} ({issue.hint})")
            else:
                parts.append(message)
        return "; ".join(parts)

    def errors_by_field(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for issue in self.errors:
            message = f"Line {issue.line}: {issue.message}" if issue.line else issue.message
            grouped.setdefault(issue.field or "__all__", []).append(message)
        return grouped


class ExtensionCompileError(Exception):
    """Raised when an extension cannot be saved because its source does not compile."""

    def __init__(self, result: ExtensionValidationResult):
        self.result = result
        super().__init__(result.summary())


def compile_source(code: str, *, extension_id: str = "") -> ExtensionValidationResult:
    try:
        descriptor = compile_extension(code, extension_id=extension_id)
    except SFCParseError as exc:
        return ExtensionValidationResult(
            errors=[
                ExtensionValidationIssue(
                    code="invalid_source",
                    field="code",
                    message=exc.message,
                    line=exc.line,
                    hint="Extensions must be Vue single-file components.",
                )
            ]
        )
    return ExtensionValidationResult(errors=[], descriptor=descriptor, warnings=descriptor["warnings"])


def validate_extension(
    *,
    name: str,
    type: str,
    version: str,
    code: str,
    has_menu: bool,
    extension_id: str = "",
) -> ExtensionValidationResult:
    errors: list[ExtensionValidationIssue] = []

    if not (name or "").strip():
        errors.append(
            ExtensionValidationIssue(code="missing_name", field="name", message="Extensions need a name.")
        )

    if type not in EXTENSION_TYPES:
        errors.append(
            ExtensionValidationIssue(
                code="invalid_type",
                field="type",
                message=f"Unknown extension type '{type}'.",
                hint="Use 'page' or 'widget'.",
            )
        )
    elif type == TYPE_WIDGET and has_menu:
        errors.append(
            ExtensionValidationIssue(
                code="widget_with_menu",
                field="menu",
                message="Widget extensions cannot be linked to a menu.",
                hint="Embed widgets by id instead, or change the type to Page.",
            )
        )

    if version and not VERSION_RE.match(version):
        errors.append(
            ExtensionValidationIssue(
                code="invalid_version",
                field="version",
                message=f"'{version}' is not a valid version.",
                hint="Use a dotted version such as 1.0.0.",
            )
        )

    compiled = compile_source(code, extension_id=extension_id)
    errors.extend(compiled.errors)

    return ExtensionValidationResult(errors=errors, descriptor=compiled.descriptor, warnings=compiled.warnings)
