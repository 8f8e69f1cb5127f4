from html import escape
from pathlib import Path

from .base import PRIORITY_LABELS, REPORT_TITLE, ReportRenderer
from ..report import Report

STYLE = """
    body {
      font-family: "Microsoft JhengHei", "Noto Sans TC", Arial, sans-serif;
      max-width: 1200px;
      margin: 0 auto;
      padding: 20px;
      line-height: 1.6;
    }
    h1 { color: #2c3e50; border-bottom: 3px solid #3498db; padding-bottom: 10px; }
    h2 { color: #34495e; margin-top: 30px; }
    .summary { background: #ecf0f1; padding: 15px; border-radius: 5px; margin: 20px 0; }
    .success { color: #27ae60; }
    .warning { color: #f39c12; }
    .error { color: #e74c3c; }
    table { width: 100%; border-collapse: collapse; margin: 20px 0; }
    th, td { padding: 12px; text-align: left; border-bottom: 1px solid #ddd; vertical-align: top; }
    th { background-color: #3498db; color: white; }
    pre { background: #f8f9fa; padding: 10px; white-space: pre-wrap; }
    .recommendation { border-left: 4px solid #ffc107; background: #fff3cd; padding: 10px; margin: 10px 0; }
    .recommendation.high { border-left-color: #e74c3c; background: #fdecea; }
"""

PAGE = """<!DOCTYPE html>
<html lang="zh-TW">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>{style}</style>
</head>
<body>
  <h1>{title}</h1>
  <p>Generated: {timestamp}</p>

  <div class="summary">
    <h2>Summary</h2>
    <p>Checklist completion: <strong>{completion}%</strong></p>
    <p>Document validation: {passed}/{total} passed</p>
  </div>

  <h2>Document Validation</h2>
  {validation_table}

  <h2>Content Analysis</h2>
  {analysis_table}

  <h2>Checklist</h2>
  <pre>{checklist}</pre>

  <h2>Recommendations</h2>
  {recommendations}
</body>
</html>
"""


class HTMLRenderer(ReportRenderer):
    format = "html"
    extension = ".html"

    def render(self, report: Report) -> str:
        return PAGE.format(
            title=escape(REPORT_TITLE),
            style=STYLE,
            timestamp=f"{report.timestamp:%Y-%m-%d %H:%M:%S}",
            completion=report.checklist.completion,
            passed=report.passed,
            total=len(report.validations),
            validation_table=self._validation_table(report),
            analysis_table=self._analysis_table(report),
            checklist=escape(report.checklist.summary),
            recommendations=self._recommendations(report),
        )

    @staticmethod
    def _validation_table(report: Report) -> str:
        rows = ["<table>", "<tr><th>File</th><th>Status</th><th>Message</th></tr>"]
        for result in report.validations:
            css = "success" if result.valid else "error"
            status = "✓ Passed" if result.valid else "✗ Failed"
            message = escape(result.message).replace("\n", "<br>")
            rows.append(
                f"<tr><td>{escape(Path(result.file).name)}</td>"
                f"<td class='{css}'>{status}</td><td>{message}</td></tr>"
            )
        rows.append("</table>")
        return "\n  ".join(rows)

    @staticmethod
    def _analysis_table(report: Report) -> str:
        if not report.analyses:
            return "<p>No documents analyzed.</p>"

        rows = [
            "<table>",
            "<tr><th>File</th><th>Readability</th><th>Structure</th>"
            "<th>SDGs</th><th>Common errors</th></tr>",
        ]
        for file, analysis in report.analyses.items():
            css = "success" if analysis.readability.score >= 80 else "warning"
            rows.append(
                f"<tr><td>{escape(Path(file).name)}</td>"
                f"<td class='{css}'>{analysis.readability.score}/100</td>"
                f"<td>{analysis.structure.score}/100</td>"
                f"<td>{escape(', '.join(analysis.topics.matched))}</td>"
                f"<td>{analysis.common_errors.count}</td></tr>"
            )
        rows.append("</table>")
        return "\n  ".join(rows)

    @staticmethod
    def _recommendations(report: Report) -> str:
        if not report.recommendations:
            return "<p class='success'>✓ All checks passed</p>"

        blocks = []
        for priority, recs in report.recommendations_by_priority().items():
            blocks.append(f"<h3>{escape(PRIORITY_LABELS[priority])}</h3>")
            for rec in recs:
                message = escape(rec.message).replace("\n", "<br>")
                blocks.append(
                    f"<div class='recommendation {priority.value}'>"
                    f"<strong>{escape(rec.file or 'General')}</strong>: {message}</div>"
                )
        return "\n  ".join(blocks)
