"""
Preflight Validator
====================
Checks a ``DocumentDefinition`` against what the encoder can actually show,
without building it. Nothing here changes the build: content that overflows
the page is still truncated silently, and text the built-in face cannot show
is still replaced – the validator only tells you in advance.

Example::

    from pdf_docgen.validator.preflight import DocumentValidator

    result = DocumentValidator().validate(definition)
    for issue in result.issues:
        print(f"[{issue.severity.value}] {issue.rule_id}: {issue.message}")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlparse
from urllib.request import url2pathname

from ..layout.flatten import flatten
from ..models.document import DocumentDefinition
from ..models.settings import DEFAULT_SETTINGS, RenderSettings
from ..pdf.content import TEXT_ENCODING


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass
class ValidationIssue:
    rule_id: str
    severity: Severity
    message: str
    field: str | None = None


@dataclass
class ValidationResult:
    """Result of a preflight run."""
    passed: bool
    line_count: int
    line_budget: int
    issues: list[ValidationIssue] = field(default_factory=list)
    rule_count: int = 0

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def dropped_lines(self) -> int:
        return max(0, self.line_count - self.line_budget)

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return (
            f"[{status}] {self.line_count}/{self.line_budget} lines "
            f"– {len(self.errors)} error(s), {len(self.warnings)} warning(s)"
        )


def line_budget(settings: RenderSettings | None = None) -> int:
    """Number of text lines one page holds."""
    return (settings or DEFAULT_SETTINGS).line_budget()


# ---------------------------------------------------------------------------
# Document Validator
# ---------------------------------------------------------------------------


class DocumentValidator:
    """
    Preflight rules for a document definition.

    Rules implemented:
    - DOC-001  Content produces no drawable lines
    - DOC-002  More lines than the page holds (the rest is dropped)
    - DOC-003  Line contains characters the built-in face cannot show
    - DOC-004  Local image reference does not exist
    - DOC-005  Image reference is fetched over plain http://
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        self.settings = settings or DEFAULT_SETTINGS

    def validate(self, doc: DocumentDefinition) -> ValidationResult:
        issues: list[ValidationIssue] = []
        rules_run = 0

        def add(rule_id: str, sev: Severity, msg: str, fld: str | None = None) -> None:
            issues.append(ValidationIssue(rule_id, sev, msg, fld))

        lines = [line for line in flatten(doc.content) if line]
        budget = self.settings.line_budget()

        # DOC-001 Empty content
        rules_run += 1
        if not lines:
            add("DOC-001", Severity.INFO, "Content produces no text lines; the page shows images only", "content")

        # DOC-002 Overflow
        rules_run += 1
        if len(lines) > budget:
            add(
                "DOC-002",
                Severity.WARNING,
                f"{len(lines)} lines exceed the page budget of {budget}; "
                f"the last {len(lines) - budget} will not be drawn",
                "content",
            )

        # DOC-003 Characters outside the font encoding
        rules_run += 1
        for number, line in enumerate(lines[:budget], 1):
            unsupported = sorted({ch for ch in line if not _encodable(ch)})
            if unsupported:
                add(
                    "DOC-003",
                    Severity.WARNING,
                    f"Line {number} contains characters shown as '?': {''.join(unsupported)!r}",
                    "content",
                )

        # DOC-004 / DOC-005 Image references
        rules_run += 2
        for slot, reference in (("header", doc.header_image), ("footer", doc.footer_image)):
            if not reference:
                continue
            ref = reference.strip()
            if ref.startswith("file://") and not os.path.isfile(url2pathname(urlparse(ref).path)):
                add("DOC-004", Severity.ERROR, f"{slot} image file not found: {ref}", f"{slot}.image")
            elif _looks_like_path(ref) and not os.path.isfile(ref):
                add("DOC-004", Severity.ERROR, f"{slot} image file not found: {ref}", f"{slot}.image")
            elif ref.startswith("http://"):
                add(
                    "DOC-005",
                    Severity.WARNING,
                    f"{slot} image is fetched over unencrypted http://",
                    f"{slot}.image",
                )

        passed = not any(i.severity == Severity.ERROR for i in issues)
        return ValidationResult(
            passed=passed,
            line_count=len(lines),
            line_budget=budget,
            issues=issues,
            rule_count=rules_run,
        )


def _encodable(ch: str) -> bool:
    try:
        ch.encode(TEXT_ENCODING)
    except UnicodeEncodeError:
        return False
    return True


def _looks_like_path(ref: str) -> bool:
    """A reference that names an image file rather than carrying base64 data."""
    if ref.startswith(("data:", "http://", "https://", "file://")):
        return False
    return os.path.splitext(ref)[1].lower() in {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}
