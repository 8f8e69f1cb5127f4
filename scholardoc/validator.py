import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .config import FORBIDDEN_CHARS, ProjectLayout, guess_word_limit
from .normalizer import count_characters, count_han, strip_markdown

_TITLE = re.compile(r"^#[ \t]+\S", re.MULTILINE)

CHINESE_RATIO_THRESHOLD = 0.7


@dataclass(frozen=True)
class ValidationResult:
    # Outcome of validating one document
    file: str
    valid: bool
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    word_count: Optional[int] = None
    word_limit: Optional[int] = None
    checks: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "valid": self.valid,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "word_count": self.word_count,
            "word_limit": self.word_limit,
            "checks": dict(self.checks),
        }


def validate_word_count(word_count: int, limit: Optional[int]) -> bool:
    # No known limit means nothing to exceed
    return limit is None or word_count <= limit


def validate_has_title(content: str) -> bool:
    return bool(_TITLE.search(content))


def validate_chinese_content(text: str) -> bool:
    total = len(re.sub(r"\s", "", text))
    if total == 0:
        return True
    return count_han(text) / total > CHINESE_RATIO_THRESHOLD


def validate_special_characters(text: str) -> bool:
    return not any(char in text for char in FORBIDDEN_CHARS)


class DocumentValidator:
    """Checks word count and formatting rules of application documents.

    Missing or unreadable files never raise; they produce an invalid result
    instead.
    """

    def __init__(self):
        self.results: List[ValidationResult] = []

    def validate_file(self, file_path, word_limit: Optional[int] = None) -> ValidationResult:
        path = Path(file_path)
        if not path.exists():
            logger.debug(f"Validation skipped, file missing: {path}")
            return ValidationResult(
                file=str(path),
                valid=False,
                message=f"File does not exist: {path}",
                word_limit=word_limit,
            )

        try:
            content = path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Cannot read {path}: {e}")
            return ValidationResult(
                file=str(path),
                valid=False,
                message=f"Cannot read file: {path} ({e})",
                word_limit=word_limit,
            )

        text = strip_markdown(content)
        word_count = count_characters(text)
        limit = word_limit if word_limit is not None else guess_word_limit(path.name)

        checks = {
            "word_count_valid": validate_word_count(word_count, limit),
            "has_title": validate_has_title(content),
            "chinese_majority": validate_chinese_content(text),
            "no_forbidden_chars": validate_special_characters(text),
        }

        return ValidationResult(
            file=str(path),
            valid=all(checks.values()),
            message="\n".join(self._build_messages(checks, word_count, limit)),
            word_count=word_count,
            word_limit=limit,
            checks=checks,
        )

    def validate_all(self, file_paths: Iterable) -> List[ValidationResult]:
        self.results = [self.validate_file(p) for p in file_paths]
        return self.results

    def validate_project(self, layout: Optional[ProjectLayout] = None) -> List[ValidationResult]:
        layout = layout or ProjectLayout()
        return self.validate_all(layout.documents)

    @property
    def all_valid(self) -> bool:
        return bool(self.results) and all(r.valid for r in self.results)

    def summary(self) -> str:
        if not self.results:
            return "No documents validated yet"

        total = len(self.results)
        passed = sum(1 for r in self.results if r.valid)

        lines = [
            "Validation Summary",
            "=" * 50,
            f"Total: {total} files",
            f"Passed: {passed}",
            f"Failed: {total - passed}",
            f"Pass rate: {round(passed * 100.0 / total, 2)}%",
            "",
        ]
        for result in self.results:
            status = "✓" if result.valid else "✗"
            lines.append(f"{status} {Path(result.file).name}")
            if result.message:
                lines.extend(f"   {line}" for line in result.message.splitlines())

        return "\n".join(lines) + "\n"

    @staticmethod
    def _build_messages(checks: Dict[str, bool], word_count: int, limit: Optional[int]) -> List[str]:
        messages = []

        if limit is None:
            messages.append(f"Word count: {word_count}")
        elif checks["word_count_valid"]:
            messages.append(f"Word count: {word_count}/{limit} ✓")
        else:
            messages.append(
                f"Word count: {word_count}/{limit} exceeds limit by {word_count - limit} characters ✗"
            )

        if not checks["has_title"]:
            messages.append("Format error: missing title")
        if not checks["chinese_majority"]:
            messages.append("Content warning: low Chinese character ratio")
        if not checks["no_forbidden_chars"]:
            messages.append("Forbidden characters found")

        return messages
