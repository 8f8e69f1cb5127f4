import json

from .base import ReportRenderer
from ..report import Report


class JSONRenderer(ReportRenderer):
    format = "json"
    extension = ".json"

    def render(self, report: Report) -> str:
        return json.dumps(report.to_dict(), ensure_ascii=False, indent=2)
