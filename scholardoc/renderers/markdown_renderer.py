from .base import PRIORITY_LABELS, REPORT_TITLE, ReportRenderer
from ..report import Report


class MarkdownRenderer(ReportRenderer):
    format = "markdown"
    extension = ".md"

    def render(self, report: Report) -> str:
        lines = [
            f"# {REPORT_TITLE}",
            "",
            f"Generated: {report.timestamp:%Y-%m-%d %H:%M:%S}",
            "",
            "---",
            "",
            "## 1. Document Validation",
            "",
            "```",
            report.validation_summary.rstrip(),
            "```",
            "",
            "## 2. Content Analysis",
            "",
            "```",
            report.analysis_summary.rstrip(),
            "```",
            "",
            "## 3. Checklist",
            "",
            f"Completion: {report.checklist.completion}%",
            "",
            "```",
            report.checklist.summary.rstrip(),
            "```",
            "",
            "## 4. Recommendations",
            "",
        ]

        if not report.recommendations:
            lines.append("✓ All checks passed, no recommendations.")
        else:
            for priority, recs in report.recommendations_by_priority().items():
                lines.extend([f"### {PRIORITY_LABELS[priority]}", ""])
                for idx, rec in enumerate(recs, start=1):
                    message = rec.message.replace("\n", "; ")
                    lines.append(f"{idx}. **{rec.file or 'General'}**: {message}")
                lines.append("")

        return "\n".join(lines).rstrip() + "\n"
