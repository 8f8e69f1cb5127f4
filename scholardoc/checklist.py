import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .config import VIDEO_PATTERNS, WORD_LIMITS, ProjectLayout
from .normalizer import count_characters, strip_markdown

DEFAULT_CATEGORY = "General"

_CATEGORY = re.compile(r"^###[ \t]+(.+)")
_CHECKBOX = re.compile(r"^-[ \t]+\[([ xX])\][ \t]+(.+)")

_WORD_COUNT_ITEM = re.compile(r"(\d+)\s*字短答")
_MERGED_PDF_ITEM = re.compile(r"PDF.*合併")
_VIDEO_ITEM = re.compile(r"影片.*錄製")
_DOCUMENT_ITEMS = ("自傳", "短期學習計畫", "未來工作應用")


class Status(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"


@dataclass
class ChecklistEntry:
    # One checkbox line as written in the checklist document
    category: str
    description: str
    checked: bool
    raw_line: str


@dataclass
class ChecklistItem:
    category: str
    description: str
    checked: bool
    status: Status
    validation_message: Optional[str] = None
    source: str = "checkbox"  # "filesystem" when a file check decided the status

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "description": self.description,
            "checked": self.checked,
            "status": self.status.value,
            "validation_message": self.validation_message,
            "source": self.source,
        }


def parse_checklist_lines(lines: Iterable[str]) -> List[ChecklistEntry]:
    """Extract checkbox items, each tagged with the nearest ``###`` heading above it."""
    entries = []
    category = DEFAULT_CATEGORY

    for line in lines:
        heading = _CATEGORY.match(line)
        if heading:
            category = heading.group(1).strip()
            continue

        box = _CHECKBOX.match(line)
        if box:
            entries.append(ChecklistEntry(
                category=category,
                description=box.group(2).strip(),
                checked=box.group(1) in ("x", "X"),
                raw_line=line.strip(),
            ))

    return entries


class ChecklistValidator:
    """Parses the applicant checklist and re-checks items against the filesystem.

    Items naming a known artifact (word-count answer, documents, merged PDF,
    video) take their status from the filesystem check, whatever the checkbox
    says. Other items keep the checkbox state.
    """

    def __init__(self, readme_path=None, layout: Optional[ProjectLayout] = None):
        self.layout = layout or ProjectLayout()
        self.readme_path = Path(readme_path) if readme_path else self.layout.find_checklist()
        self.entries: List[ChecklistEntry] = []
        self.items: List[ChecklistItem] = []

    def parse_checklist(self) -> List[ChecklistEntry]:
        if not self.readme_path.exists():
            raise FileNotFoundError(f"Checklist document not found: {self.readme_path}")

        try:
            content = self.readme_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"Checklist document is not valid UTF-8: {self.readme_path}") from e

        self.entries = parse_checklist_lines(content.splitlines())
        return self.entries

    def validate(self) -> List[ChecklistItem]:
        if not self.entries:
            self.parse_checklist()

        self.items = [self.validate_item(entry) for entry in self.entries]
        return self.items

    def validate_item(self, entry: ChecklistEntry) -> ChecklistItem:
        item = ChecklistItem(
            category=entry.category,
            description=entry.description,
            checked=entry.checked,
            status=Status.COMPLETED if entry.checked else Status.PENDING,
        )

        override = self._check_filesystem(entry.description)
        if override is not None:
            item.status, item.validation_message = override
            item.source = "filesystem"
            if item.status == Status.PENDING and entry.checked:
                logger.debug(f"Checked item not confirmed by filesystem: {entry.description}")

        return item

    def _check_filesystem(self, description: str):
        word_count = _WORD_COUNT_ITEM.search(description)
        if word_count:
            return self._check_word_count(int(word_count.group(1)))

        for name in _DOCUMENT_ITEMS:
            if name in description:
                return self._check_file_exists(f"{name}.md")

        if _MERGED_PDF_ITEM.search(description):
            return self._check_merged_pdf()

        if _VIDEO_ITEM.search(description):
            return self._check_video()

        return None

    def _check_file_exists(self, filename: str):
        exists = any((d / filename).exists() for d in self.layout.candidate_dirs)
        if exists:
            return Status.COMPLETED, "File exists"
        return Status.PENDING, "File not found"

    def _check_word_count(self, limit: int):
        # The limited document is the one whose limit matches the item's number
        names = [name for name, value in WORD_LIMITS.items() if value == limit and f"{limit}字" in name]
        if not names:
            return Status.PENDING, f"No document with a {limit} character limit"

        matches = sorted(self.layout.applicant_dir.glob(f"**/{names[0]}.md"))
        if not matches:
            return Status.PENDING, "File does not exist"

        try:
            content = matches[0].read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Cannot read {matches[0]}: {e}")
            return Status.PENDING, "Cannot read file"

        word_count = count_characters(strip_markdown(content))
        status = Status.COMPLETED if word_count <= limit else Status.PENDING
        return status, f"Word count: {word_count}/{limit}"

    def _check_merged_pdf(self):
        # Imported here so checklist parsing does not need the PDF stack
        from .merger import inspect_pdf

        merged = self.layout.merged_pdf
        if not merged.exists():
            return Status.PENDING, "Merged PDF not generated yet"

        try:
            info = inspect_pdf(merged)
        except RuntimeError as e:
            return Status.PENDING, str(e)

        if info.page_count == 0:
            return Status.PENDING, "Merged PDF has no pages"
        return Status.COMPLETED, f"Merged PDF generated ({info.page_count} pages)"

    def _check_video(self):
        video_dir = self.layout.video_dir
        videos = [p for pattern in VIDEO_PATTERNS for p in video_dir.glob(pattern)]
        if videos:
            return Status.COMPLETED, "Video file found"
        return Status.PENDING, "Video not recorded yet"

    def pending_items(self) -> List[ChecklistItem]:
        return [i for i in self.items if i.status == Status.PENDING]

    def completed_items(self) -> List[ChecklistItem]:
        return [i for i in self.items if i.status == Status.COMPLETED]

    def completion_percentage(self) -> float:
        if not self.items:
            return 0
        return round(len(self.completed_items()) * 100.0 / len(self.items), 2)

    def generate_report(self) -> str:
        if not self.items:
            self.validate()

        total = len(self.items)
        completed = len(self.completed_items())

        lines = [
            "Checklist Report",
            "=" * 50,
            "",
            f"Total items: {total}",
            f"Completed: {completed}",
            f"Pending: {total - completed}",
            f"Completion: {self.completion_percentage()}%",
            "",
        ]

        # Repeated headings merge into the first section with that name
        by_category: Dict[str, List[ChecklistItem]] = {}
        for item in self.items:
            by_category.setdefault(item.category, []).append(item)

        for category, items in by_category.items():
            lines.append(f"### {category}")
            for item in items:
                icon = "✓" if item.status == Status.COMPLETED else "☐"
                lines.append(f"{icon} {item.description}")
                if item.validation_message:
                    lines.append(f"   {item.validation_message}")
            lines.append("")

        return "\n".join(lines)
