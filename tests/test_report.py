import json
from pathlib import Path

import pytest

from scholardoc.analyzer import analyze_content
from scholardoc.checklist import ChecklistItem, Status
from scholardoc.renderers import HTMLRenderer, JSONRenderer, MarkdownRenderer, get_renderer
from scholardoc.report import Priority, ReportGenerator, build_recommendations
from scholardoc.validator import ValidationResult

CHECKLIST = "### 文件\n- [ ] 自傳\n- [ ] 準備<面試>\n### 影片\n- [x] 影片錄製\n"


@pytest.fixture
def project(valid_project):
    (valid_project.applicant_dir / "README.md").write_text(CHECKLIST, encoding="utf-8")
    return valid_project


class TestRecommendations:

    def test_each_source_produces_recommendations(self):
        failed = ValidationResult(file="/x/自傳.md", valid=False, message="Format error: missing title")
        passed = ValidationResult(file="/x/計畫.md", valid=True, message="Word count: 10/800 ✓")

        low = analyze_content("# 標題\n\n好。。", "/x/a.md")
        low.readability.score = 60
        clean = analyze_content("# 標題\n\n第一段。\n\n第二段。\n\n第三段。", "/x/b.md")

        pending = [ChecklistItem("文件", "準備面試", False, Status.PENDING)]

        recs = build_recommendations([failed, passed], {"/x/a.md": low, "/x/b.md": clean}, pending)

        assert [(r.kind, r.priority, r.file) for r in recs] == [
            ("validation", Priority.HIGH, "自傳.md"),
            ("readability", Priority.MEDIUM, "a.md"),
            ("errors", Priority.HIGH, "a.md"),
            ("checklist", Priority.MEDIUM, None),
        ]
        assert recs[3].message == "Pending: 準備面試"
        assert "Repeated punctuation" in recs[2].message

    def test_readability_threshold_is_exclusive(self):
        analysis = analyze_content("字" * 60 + "。", "/x/a.md")
        assert analysis.readability.score == 70

        assert build_recommendations([], {"/x/a.md": analysis}, []) == []


class TestReportGenerator:

    def test_full_report(self, project):
        report = ReportGenerator(project).generate_full_report()

        assert len(report.validations) == 4
        assert report.passed == 4
        assert report.has_errors is False
        assert len(report.analyses) == 4
        assert report.checklist.completion == 33.33
        assert [i.description for i in report.checklist.pending] == ["準備<面試>", "影片錄製"]
        assert [r.kind for r in report.recommendations] == ["checklist", "checklist"]

    def test_missing_checklist_is_empty(self, valid_project):
        report = ReportGenerator(valid_project).generate_full_report()

        assert report.checklist.items == []
        assert report.checklist.completion == 0
        assert report.checklist.source is None

    def test_undecodable_documents_degrade(self, project):
        project.documents[1].write_bytes(b"# \xe8\x87\xaa\xff\xfe title\n")
        (project.applicant_dir / "README.md").write_bytes(b"- [ ] \xff\xfe\n")

        report = ReportGenerator(project).generate_full_report()

        assert report.passed == 3
        assert report.validations[1].message.startswith("Cannot read file")
        assert len(report.analyses) == 3
        assert report.checklist.items == []
        assert report.checklist.summary == "Checklist document unreadable"

    def test_validation_summary(self, project):
        summary = ReportGenerator(project).validation_summary()

        assert summary == {
            "total_files": 4,
            "passed": 4,
            "checklist_completion": 33.33,
            "has_errors": False,
        }

    def test_generate_all_reports(self, project):
        results = ReportGenerator(project).generate_all_reports()

        assert set(results) == {"markdown", "json", "html"}
        for fmt, name in (("markdown", "report.md"), ("json", "report.json"), ("html", "report.html")):
            path = project.reports_dir / name
            assert results[fmt].output_path == str(path)
            assert results[fmt].file_size == path.stat().st_size

    def test_generate_single_report(self, project, tmp_path):
        rendered = ReportGenerator(project).generate_report("json", tmp_path / "custom.json")

        assert rendered.format == "json"
        assert json.loads(Path(rendered.output_path).read_text(encoding="utf-8"))["validation"]["passed"] == 4


class TestRenderers:

    @pytest.fixture
    def report(self, project, write_document):
        write_document("02_自傳與學習計畫/自傳.md", "沒有標題")
        return ReportGenerator(project).generate_full_report()

    def test_json_matches_report(self, report):
        data = json.loads(JSONRenderer().render(report))

        assert data == json.loads(json.dumps(report.to_dict(), ensure_ascii=False))
        assert data["validation"]["passed"] == 3
        assert data["checklist"]["completion"] == report.checklist.completion
        assert len(data["recommendations"]) == len(report.recommendations)

    def test_markdown_lists_every_recommendation(self, report):
        text = MarkdownRenderer().render(report)

        assert "## 1. Document Validation" in text
        assert "### High priority" in text
        assert "### Medium priority" in text
        assert "**自傳.md**" in text
        assert "Pending: 影片錄製" in text

    def test_html_is_consistent_and_escaped(self, report):
        html = HTMLRenderer().render(report)

        assert "3/4 passed" in html
        assert f"<strong>{report.checklist.completion}%</strong>" in html
        assert "準備&lt;面試&gt;" in html
        assert "<面試>" not in html
        assert html.count("class='recommendation") == len(report.recommendations)

    def test_no_recommendations(self, valid_project):
        report = ReportGenerator(valid_project).generate_full_report()

        assert "no recommendations" in MarkdownRenderer().render(report)
        assert "All checks passed" in HTMLRenderer().render(report)


@pytest.mark.parametrize("fmt, cls", [
    ("markdown", MarkdownRenderer),
    ("md", MarkdownRenderer),
    (".json", JSONRenderer),
    ("HTML", HTMLRenderer),
])
def test_get_renderer(fmt, cls):
    assert isinstance(get_renderer(fmt), cls)


def test_get_renderer_unknown_format():
    with pytest.raises(ValueError):
        get_renderer("pdf")
