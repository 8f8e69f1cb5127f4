from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from .analyzer import AnalysisResult, ContentAnalyzer
from .checklist import ChecklistItem, ChecklistValidator, Status
from .config import ProjectLayout
from .validator import DocumentValidator, ValidationResult

READABILITY_THRESHOLD = 70

REPORT_FILES = {
    "markdown": "report.md",
    "json": "report.json",
    "html": "report.html",
}


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class Recommendation:
    kind: str  # validation, readability, errors or checklist
    priority: Priority
    message: str
    file: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "priority": self.priority.value,
            "message": self.message,
            "file": self.file,
        }


@dataclass
class ChecklistSummary:
    summary: str = ""
    completion: float = 0
    items: List[ChecklistItem] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def pending(self) -> List[ChecklistItem]:
        return [i for i in self.items if i.status == Status.PENDING]

    @property
    def completed(self) -> List[ChecklistItem]:
        return [i for i in self.items if i.status == Status.COMPLETED]


@dataclass
class Report:
    """Aggregated results of one run. Renderers only read from it."""
    timestamp: datetime
    validations: List[ValidationResult]
    validation_summary: str
    analyses: Dict[str, AnalysisResult]
    analysis_summary: str
    checklist: ChecklistSummary
    recommendations: List[Recommendation]

    @property
    def passed(self) -> int:
        return sum(1 for r in self.validations if r.valid)

    @property
    def has_errors(self) -> bool:
        return any(not r.valid for r in self.validations)

    def recommendations_by_priority(self) -> Dict[Priority, List[Recommendation]]:
        grouped: Dict[Priority, List[Recommendation]] = {}
        for priority in Priority:
            recs = [r for r in self.recommendations if r.priority == priority]
            if recs:
                grouped[priority] = recs
        return grouped

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "validation": {
                "summary": self.validation_summary,
                "total": len(self.validations),
                "passed": self.passed,
                "results": [r.to_dict() for r in self.validations],
            },
            "analysis": {
                "summary": self.analysis_summary,
                "results": {f: a.to_dict() for f, a in self.analyses.items()},
            },
            "checklist": {
                "source": self.checklist.source,
                "summary": self.checklist.summary,
                "completion": self.checklist.completion,
                "pending": [i.to_dict() for i in self.checklist.pending],
                "completed": [i.to_dict() for i in self.checklist.completed],
            },
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


def build_recommendations(
    validations: List[ValidationResult],
    analyses: Dict[str, AnalysisResult],
    pending: List[ChecklistItem],
) -> List[Recommendation]:
    recommendations = []

    for result in validations:
        if not result.valid:
            recommendations.append(Recommendation(
                kind="validation",
                priority=Priority.HIGH,
                message=result.message,
                file=Path(result.file).name,
            ))

    for file, analysis in analyses.items():
        if analysis.readability.score < READABILITY_THRESHOLD:
            recommendations.append(Recommendation(
                kind="readability",
                priority=Priority.MEDIUM,
                message=analysis.readability.recommendation,
                file=Path(file).name,
            ))
        if analysis.common_errors.has_errors:
            recommendations.append(Recommendation(
                kind="errors",
                priority=Priority.HIGH,
                message=f"Found {analysis.common_errors.count} common errors: "
                        + ", ".join(analysis.common_errors.errors),
                file=Path(file).name,
            ))

    for item in pending:
        recommendations.append(Recommendation(
            kind="checklist",
            priority=Priority.MEDIUM,
            message=f"Pending: {item.description}",
        ))

    return recommendations


class ReportGenerator:
    # Runs validation, analysis and the checklist, then renders the report.

    def __init__(self, layout: Optional[ProjectLayout] = None, readme_path=None):
        self.layout = layout or ProjectLayout()
        self.readme_path = readme_path
        self.report: Optional[Report] = None

    def generate_full_report(self) -> Report:
        validator = DocumentValidator()
        validator.validate_project(self.layout)

        analyzer = ContentAnalyzer()
        analyzer.analyze_project(self.layout)

        checklist = self._run_checklist()

        self.report = Report(
            timestamp=datetime.now(),
            validations=validator.results,
            validation_summary=validator.summary(),
            analyses=analyzer.analysis_results,
            analysis_summary=analyzer.summary(),
            checklist=checklist,
            recommendations=build_recommendations(
                validator.results, analyzer.analysis_results, checklist.pending
            ),
        )
        return self.report

    def _run_checklist(self) -> ChecklistSummary:
        checklist = ChecklistValidator(self.readme_path, self.layout)
        try:
            checklist.validate()
        except FileNotFoundError as e:
            logger.warning(f"{e}; checklist section left empty")
            return ChecklistSummary(summary="Checklist document not found")
        except ValueError as e:
            logger.warning(f"{e}; checklist section left empty")
            return ChecklistSummary(summary="Checklist document unreadable")

        return ChecklistSummary(
            summary=checklist.generate_report(),
            completion=checklist.completion_percentage(),
            items=list(checklist.items),
            source=str(checklist.readme_path),
        )

    def generate_report(self, fmt: str, output_path=None):
        # Imported here to avoid a cycle: renderers import Report from this module
        from .renderers import get_renderer

        if self.report is None:
            self.generate_full_report()

        renderer = get_renderer(fmt)
        path = Path(output_path) if output_path else self.layout.reports_dir / REPORT_FILES[renderer.format]
        return renderer.write(self.report, path)

    def generate_all_reports(self, output_dir=None) -> dict:
        output_dir = Path(output_dir) if output_dir else self.layout.reports_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        if self.report is None:
            self.generate_full_report()

        return {
            fmt: self.generate_report(fmt, output_dir / filename)
            for fmt, filename in REPORT_FILES.items()
        }

    def validation_summary(self) -> dict:
        if self.report is None:
            self.generate_full_report()

        return {
            "total_files": len(self.report.validations),
            "passed": self.report.passed,
            "checklist_completion": self.report.checklist.completion,
            "has_errors": self.report.has_errors,
        }
