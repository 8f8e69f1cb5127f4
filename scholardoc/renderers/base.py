"""Base report renderer class"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..report import Priority, Report

PRIORITY_LABELS = {
    Priority.HIGH: "High priority",
    Priority.MEDIUM: "Medium priority",
    Priority.LOW: "Low priority",
}

REPORT_TITLE = "Scholarship Application Document Report"


@dataclass
class RenderedReport:
    format: str
    output_path: str
    file_size: int


class ReportRenderer(ABC):
    """Abstract base class for report renderers.

    Renderers are pure projections of a Report; they never modify it.
    """

    format: str = ""
    extension: str = ""

    @abstractmethod
    def render(self, report: Report) -> str:
        """Render the report to text.

        Args:
            report: Aggregated run results

        Returns:
            The rendered document
        """
        pass

    def write(self, report: Report, output_path) -> RenderedReport:
        """Render and write the report, creating parent directories."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(report), encoding="utf-8")

        return RenderedReport(
            format=self.format,
            output_path=str(path),
            file_size=path.stat().st_size,
        )
