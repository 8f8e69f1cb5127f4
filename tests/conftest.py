from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from scholardoc.config import ProjectLayout

VALID_DOCUMENTS = {
    "01_申請書/300字短答_為何申請.md": "# 為何申請\n\n我希望透過獎學金學習軟體工程。\n\n我想把知識分享給社群。\n\n我會持續努力。\n",
    "02_自傳與學習計畫/自傳.md": "# 自傳\n\n## 成長\n\n我從小熱愛學習。\n\n## 經歷\n\n- 參與開源專案\n- 擔任教學助理\n\n## 未來\n\n我會持續貢獻社群。\n",
    "02_自傳與學習計畫/短期學習計畫.md": "# 短期學習計畫\n\n第一階段學習資安技術。\n\n第二階段參與研發專案。\n\n第三階段舉辦工作坊。\n",
    "02_自傳與學習計畫/未來工作應用.md": "# 未來工作應用\n\n我將把所學應用於系統開發。\n\n我會協助團隊降低風險。\n\n我也會回饋社群。\n",
}


@pytest.fixture
def layout(tmp_path) -> ProjectLayout:
    return ProjectLayout(tmp_path)


@pytest.fixture
def write_document(layout):
    # Write a file relative to the applicant folder.
    def _write(relative: str, content: str) -> Path:
        path = layout.applicant_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def valid_project(layout, write_document):
    for relative, content in VALID_DOCUMENTS.items():
        write_document(relative, content)
    return layout


@pytest.fixture
def make_pdf():
    def _make(path, pages: int = 1, text: str = "Page") -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        c = canvas.Canvas(str(path), pagesize=letter)
        for page in range(pages):
            c.drawString(72, 720, f"{text} {page + 1}")
            c.showPage()
        c.save()
        return path

    return _make
