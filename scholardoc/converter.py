from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence
from xml.sax.saxutils import escape

import markdown
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from loguru import logger
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    Preformatted,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus.doctemplate import LayoutError

from .config import ConverterOptions, ProjectLayout
from .fonts import find_cjk_font

PAGE_SIZES = {"A4": A4, "LETTER": letter}
HEADING_SIZES = {1: 24, 2: 20, 3: 18, 4: 16, 5: 14, 6: 12}
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]
CJK_FONT_NAME = "ScholarDocCJK"
BOLD_FONTS = {"Helvetica": "Helvetica-Bold", "Times-Roman": "Times-Bold", "Courier": "Courier-Bold"}


@dataclass
class ConversionResult:
    success: bool
    input_file: str
    output_file: Optional[str] = None
    file_size: Optional[int] = None
    error: Optional[str] = None


@dataclass
class BatchConversion:
    results: List[ConversionResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.success


def _make_numbered_canvas(font_size: int, right: float, bottom: float):
    # Canvas that defers page output so "page / total" can be stamped.

    class NumberedCanvas(canvas.Canvas):

        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            for state in self._saved_page_states:
                self.__dict__.update(state)
                self.setFont("Helvetica", font_size)
                self.drawRightString(right, bottom, f"{self._pageNumber} / {total}")
                super().showPage()
            super().save()

    return NumberedCanvas


class PDFConverter:
    """Renders Markdown documents to PDF with Traditional Chinese support.

    Markdown is parsed to HTML with python-markdown, walked with
    BeautifulSoup and laid out with reportlab platypus. Images are dropped.
    """

    def __init__(self, options: Optional[ConverterOptions] = None):
        self.options = options or ConverterOptions()
        if self.options.page_size.upper() not in PAGE_SIZES:
            raise ValueError(f"Unsupported page size: {self.options.page_size}")
        self._font_name: Optional[str] = None
        self._styles: dict = {}

    @property
    def font_name(self) -> str:
        if self._font_name is None:
            self._font_name = self._setup_font()
        return self._font_name

    @property
    def is_cjk(self) -> bool:
        return self.font_name == CJK_FONT_NAME

    def _setup_font(self) -> str:
        # Register a CJK TrueType font, or fall back to a built-in font.
        path = None
        if self.options.font_path:
            path = Path(self.options.font_path).expanduser()
        elif self.options.search_system_fonts:
            path = find_cjk_font()

        if path and path.exists():
            try:
                pdfmetrics.registerFont(TTFont(CJK_FONT_NAME, str(path)))
                pdfmetrics.registerFontFamily(
                    CJK_FONT_NAME,
                    normal=CJK_FONT_NAME,
                    bold=CJK_FONT_NAME,
                    italic=CJK_FONT_NAME,
                    boldItalic=CJK_FONT_NAME,
                )
                return CJK_FONT_NAME
            except TTFError as e:
                logger.warning(f"Cannot use font {path}: {e}")

        message = (
            "No Chinese font found, Chinese text may not display correctly. "
            "Install a CJK font such as Noto Sans CJK or Microsoft JhengHei."
        )
        logger.warning(message)
        return self.options.fallback_font

    def convert(self, markdown_file, output_pdf=None) -> ConversionResult:
        md_path = Path(markdown_file)
        if not md_path.exists():
            raise FileNotFoundError(f"File not found: {markdown_file}")

        output = Path(output_pdf) if output_pdf else md_path.with_suffix(".pdf")
        output.parent.mkdir(parents=True, exist_ok=True)

        try:
            content = md_path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            raise RuntimeError(f"Cannot read {md_path}: {e}") from e

        html = markdown.markdown(content, extensions=MARKDOWN_EXTENSIONS)
        soup = BeautifulSoup(html, "html.parser")

        self._build_pdf(soup, output, md_path.stem)

        return ConversionResult(
            success=True,
            input_file=str(md_path),
            output_file=str(output),
            file_size=output.stat().st_size,
        )

    def convert_batch(
        self,
        markdown_files: Sequence,
        output_dir,
        progress: Optional[Callable[[ConversionResult], None]] = None,
    ) -> BatchConversion:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        batch = BatchConversion()
        for md_file in markdown_files:
            md_path = Path(md_file)
            try:
                result = self.convert(md_path, output_dir / f"{md_path.stem}.pdf")
            except (FileNotFoundError, RuntimeError) as e:
                result = ConversionResult(success=False, input_file=str(md_path), error=str(e))

            batch.results.append(result)
            if progress:
                progress(result)

        return batch

    def convert_project(
        self,
        layout: Optional[ProjectLayout] = None,
        progress: Optional[Callable[[ConversionResult], None]] = None,
    ) -> BatchConversion:
        layout = layout or ProjectLayout()
        existing = [p for p in layout.documents if p.exists()]
        if not existing:
            raise FileNotFoundError(f"No Markdown documents found under {layout.applicant_dir}")
        return self.convert_batch(existing, layout.product_dir, progress)

    # Layout

    def _build_pdf(self, soup: BeautifulSoup, output: Path, title: str):
        page_size = PAGE_SIZES[self.options.page_size.upper()]
        margin = self.options.margin

        doc = SimpleDocTemplate(
            str(output),
            pagesize=page_size,
            leftMargin=margin,
            rightMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=title,
        )
        self._styles = self._make_styles()
        story = self._render_blocks(soup.children, doc.width)

        build_kwargs = {}
        if self.options.page_numbers:
            build_kwargs["canvasmaker"] = _make_numbered_canvas(
                10, page_size[0] - margin, margin / 2
            )

        try:
            doc.build(story or [Spacer(1, 1)], **build_kwargs)
        except (LayoutError, ValueError) as e:
            raise RuntimeError(f"Failed to render {title}: {e}") from e

    def _make_styles(self) -> dict:
        font = self.font_name
        size = self.options.font_size
        wrap = "CJK" if self.is_cjk else None
        bold = BOLD_FONTS.get(font, font)

        body = ParagraphStyle(
            "Body",
            fontName=font,
            fontSize=size,
            leading=size * self.options.line_height,
            spaceAfter=10,
            wordWrap=wrap,
        )
        styles = {
            "body": body,
            "list": ParagraphStyle("List", parent=body, spaceAfter=2),
            "quote": ParagraphStyle(
                "Quote", parent=body, leftIndent=15, textColor=colors.HexColor("#666666")
            ),
            "code": ParagraphStyle(
                "Code",
                fontName="Courier",
                fontSize=10,
                leading=13,
                backColor=colors.HexColor("#F5F5F5"),
                borderPadding=5,
                spaceBefore=5,
                spaceAfter=12,
            ),
            "cell": ParagraphStyle("Cell", parent=body, spaceAfter=0),
        }
        for level, heading_size in HEADING_SIZES.items():
            styles[f"h{level}"] = ParagraphStyle(
                f"Heading{level}",
                parent=body,
                fontName=bold,
                fontSize=heading_size,
                leading=heading_size * 1.3,
                spaceBefore=10,
                spaceAfter=8,
            )
        return styles

    def _render_blocks(self, nodes, width: float) -> list:
        story = []
        for node in nodes:
            if not isinstance(node, Tag):
                text = str(node).strip()
                if text and not isinstance(node, Comment):
                    story.append(Paragraph(escape(text), self._styles["body"]))
                continue

            name = node.name
            if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
                text = self._inline(node)
                if text.strip():
                    story.append(Paragraph(text, self._styles[name]))
            elif name == "p":
                text = self._inline(node).strip()
                if text:
                    story.append(Paragraph(text, self._styles["body"]))
            elif name in ("ul", "ol"):
                story.extend(self._render_list(node, 0))
                story.append(Spacer(1, 8))
            elif name == "pre":
                story.append(Preformatted(node.get_text().rstrip("\n"), self._styles["code"]))
            elif name == "blockquote":
                story.extend(self._render_quote(node))
            elif name == "hr":
                story.append(HRFlowable(width="100%", color=colors.grey, spaceBefore=4, spaceAfter=10))
            elif name == "table":
                story.append(self._render_table(node, width))
                story.append(Spacer(1, 10))
            elif name == "img":
                continue
            else:
                story.extend(self._render_blocks(node.children, width))
        return story

    def _render_list(self, node: Tag, depth: int) -> list:
        flowables = []
        ordered = node.name == "ol"
        start = int(node.get("start", 1)) if ordered else 1
        style = ParagraphStyle(
            f"List{depth}", parent=self._styles["list"], leftIndent=20 * (depth + 1)
        )

        for index, item in enumerate(node.find_all("li", recursive=False)):
            marker = f"{start + index}." if ordered else "•"
            text = self._inline(item).strip()
            flowables.append(Paragraph(f"{marker} {text}", style))

            for nested in item.find_all(["ul", "ol"], recursive=False):
                flowables.extend(self._render_list(nested, depth + 1))

        return flowables

    def _render_quote(self, node: Tag) -> list:
        parts = []
        for child in node.children:
            if isinstance(child, Tag):
                text = self._inline(child).strip()
            elif not isinstance(child, Comment):
                text = escape(str(child).strip())
            else:
                text = ""
            if text:
                parts.append(text)

        if not parts:
            return []
        return [Paragraph("<br/>".join(parts), self._styles["quote"])]

    def _render_table(self, node: Tag, width: float) -> Table:
        rows = []
        for tr in node.find_all("tr"):
            cells = tr.find_all(["th", "td"], recursive=False)
            rows.append([Paragraph(self._inline(c), self._styles["cell"]) for c in cells])

        columns = max((len(r) for r in rows), default=1)
        for row in rows:
            row.extend([""] * (columns - len(row)))

        has_header = node.find("thead") is not None
        table = Table(rows, colWidths=[width / columns] * columns, repeatRows=1 if has_header else 0)
        style = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        if has_header:
            style.append(("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#ECF0F1")))
        table.setStyle(TableStyle(style))
        return table

    def _inline(self, node) -> str:
        # Convert inline HTML to reportlab paragraph markup.
        if isinstance(node, Comment):
            return ""
        if isinstance(node, NavigableString):
            return escape(str(node))

        name = node.name
        if name in ("ul", "ol", "img"):
            return ""
        if name == "br":
            return "<br/>"

        inner = "".join(self._inline(child) for child in node.children)

        if name in ("strong", "b"):
            return f"<b>{inner}</b>"
        if name in ("em", "i"):
            return f"<i>{inner}</i>"
        if name == "code":
            return f'<font face="Courier">{inner}</font>'
        if name == "a" and node.get("href"):
            href = escape(node["href"], {'"': "&quot;"})
            return f'<a href="{href}" color="blue">{inner}</a>'
        if name == "p" and node.parent is not None and node.parent.name == "li":
            return inner + " "
        return inner
