import pdfplumber
import pikepdf
import pytest

from scholardoc.config import ConverterOptions
from scholardoc.converter import PDFConverter

SAMPLE = """# Hello

Some **bold** and *italic* text with a [link](https://example.com) and `code`.

- one
- two
    - nested

1. first
2. second

```
print("code block")
```

> quoted text

---

| Name | Value |
|------|-------|
| a    | 1     |

![image](missing.png)
"""


@pytest.fixture
def converter():
    return PDFConverter(ConverterOptions(search_system_fonts=False))


def test_convert_renders_pdf(tmp_path, converter):
    source = tmp_path / "sample.md"
    source.write_text(SAMPLE, encoding="utf-8")
    output = tmp_path / "out" / "sample.pdf"

    result = converter.convert(source, output)

    assert result.success is True
    assert result.output_file == str(output)
    assert result.file_size == output.stat().st_size

    with pdfplumber.open(output) as pdf:
        text = "\n".join(page.extract_text() or "" for page in pdf.pages)

    assert "Hello" in text
    assert "bold" in text
    assert "nested" in text
    assert "code block" in text
    assert "quoted text" in text
    assert "1 / 1" in text


def test_default_output_path_next_to_source(tmp_path, converter):
    source = tmp_path / "doc.md"
    source.write_text("# Title\n\nBody", encoding="utf-8")

    result = converter.convert(source)

    assert result.output_file == str(tmp_path / "doc.pdf")


def test_page_numbers_can_be_disabled(tmp_path):
    source = tmp_path / "doc.md"
    source.write_text("# Title", encoding="utf-8")
    output = tmp_path / "doc.pdf"

    PDFConverter(ConverterOptions(search_system_fonts=False, page_numbers=False)).convert(source, output)

    with pdfplumber.open(output) as pdf:
        assert "1 / 1" not in (pdf.pages[0].extract_text() or "")


def test_long_document_spans_pages(tmp_path, converter):
    source = tmp_path / "long.md"
    source.write_text("# Long\n\n" + "\n\n".join(f"Paragraph {i}" for i in range(200)), encoding="utf-8")
    output = tmp_path / "long.pdf"

    converter.convert(source, output)

    with pikepdf.open(output) as pdf:
        assert len(pdf.pages) > 1


def test_missing_source_raises(tmp_path, converter):
    with pytest.raises(FileNotFoundError):
        converter.convert(tmp_path / "missing.md")


def test_font_fallback(converter):
    assert converter.font_name == "Helvetica"
    assert converter.is_cjk is False


def test_missing_explicit_font_falls_back(tmp_path):
    converter = PDFConverter(ConverterOptions(font_path=str(tmp_path / "nope.ttf")))
    assert converter.font_name == "Helvetica"


def test_unknown_page_size():
    with pytest.raises(ValueError):
        PDFConverter(ConverterOptions(page_size="B7"))


def test_convert_batch_records_failures(tmp_path, converter):
    good = tmp_path / "good.md"
    good.write_text("# Good", encoding="utf-8")
    seen = []

    batch = converter.convert_batch([good, tmp_path / "bad.md"], tmp_path / "product", progress=seen.append)

    assert batch.total == 2
    assert batch.success == 1
    assert batch.failed == 1
    assert (tmp_path / "product" / "good.pdf").exists()
    assert seen[1].success is False
    assert "bad.md" in seen[1].error


def test_convert_project(valid_project, converter):
    batch = converter.convert_project(valid_project)

    assert batch.failed == 0
    assert all(p.exists() for p in valid_project.product_pdfs)


def test_convert_project_without_documents(layout, converter):
    with pytest.raises(FileNotFoundError):
        converter.convert_project(layout)


def test_options_overrides_ignore_none():
    options = ConverterOptions().with_overrides(font_size=14, font_path=None)

    assert options.font_size == 14
    assert options.font_path is None
    assert options.margin == 50


def test_undecodable_source_raises(tmp_path, converter):
    source = tmp_path / "bad.md"
    source.write_bytes(b"# \xff\xfe\n")

    with pytest.raises(RuntimeError, match="Cannot read"):
        converter.convert(source)
