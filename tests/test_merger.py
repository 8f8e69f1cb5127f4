import pikepdf
import pytest

from scholardoc.merger import PDFMerger, format_file_size, inspect_pdf


def test_merge_empty_list_raises(tmp_path):
    with pytest.raises(ValueError):
        PDFMerger(tmp_path / "out.pdf").merge([])


def test_missing_input_raises_before_writing(tmp_path, make_pdf):
    existing = make_pdf(tmp_path / "a.pdf")
    output = tmp_path / "out" / "merged.pdf"

    with pytest.raises(FileNotFoundError):
        PDFMerger(output).merge([existing, tmp_path / "missing.pdf"])

    assert not output.exists()


def test_non_pdf_input_raises(tmp_path):
    text = tmp_path / "a.txt"
    text.write_text("hello")

    with pytest.raises(ValueError):
        PDFMerger(tmp_path / "out.pdf").merge([text])


def test_merge_concatenates_pages(tmp_path, make_pdf):
    first = make_pdf(tmp_path / "自傳.pdf", pages=2)
    second = make_pdf(tmp_path / "計畫.pdf", pages=1)
    output = tmp_path / "product" / "merged.pdf"
    progress = []

    result = PDFMerger(output).merge(
        [first, second],
        metadata={"title": "測試標題", "author": "申請人"},
        progress=lambda *args: progress.append(args),
    )

    assert result.page_count == 3
    assert result.file_count == 2
    assert result.output_path == str(output)
    assert progress == [(1, 2, str(first)), (2, 2, str(second))]

    with pikepdf.open(output) as pdf:
        assert len(pdf.pages) == 3
        assert str(pdf.docinfo["/Title"]) == "測試標題"
        assert str(pdf.docinfo["/Author"]) == "申請人"
        with pdf.open_outline() as outline:
            assert [item.title for item in outline.root] == ["自傳", "計畫"]


def test_merge_without_bookmarks(tmp_path, make_pdf):
    output = tmp_path / "merged.pdf"
    PDFMerger(output).merge([make_pdf(tmp_path / "a.pdf")], bookmarks=False)

    with pikepdf.open(output) as pdf:
        with pdf.open_outline() as outline:
            assert list(outline.root) == []


def test_merge_project_pdfs_in_document_order(layout, make_pdf):
    for pdf_path, pages in zip(layout.product_pdfs, (1, 2, 3, 4)):
        make_pdf(pdf_path, pages=pages)

    merger = PDFMerger(layout=layout)
    result = merger.merge_project_pdfs()

    assert result.output_path == str(layout.merged_pdf)
    assert result.page_count == 10
    assert result.file_count == 4

    with pikepdf.open(layout.merged_pdf) as pdf:
        with pdf.open_outline() as outline:
            assert [item.title for item in outline.root] == [p.stem for p in layout.product_pdfs]


def test_merge_project_pdfs_skips_missing(layout, make_pdf):
    make_pdf(layout.product_pdfs[1])

    result = PDFMerger(layout=layout).merge_project_pdfs()

    assert result.file_count == 1


def test_merge_project_pdfs_without_inputs(layout):
    with pytest.raises(FileNotFoundError):
        PDFMerger(layout=layout).merge_project_pdfs()


def test_validate_and_info(tmp_path, make_pdf):
    merger = PDFMerger(tmp_path / "merged.pdf")

    assert merger.validate_merged_pdf()["valid"] is False
    assert merger.info() == {}

    merger.merge([make_pdf(tmp_path / "a.pdf", pages=2)])

    status = merger.validate_merged_pdf()
    assert status["valid"] is True
    assert status["page_count"] == 2
    assert status["file_size"] > 0
    assert merger.info()["page_count"] == 2


def test_corrupt_input_raises_runtime_error(tmp_path):
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"not a pdf")

    with pytest.raises(RuntimeError):
        PDFMerger(tmp_path / "out.pdf").merge([broken])


def test_inspect_pdf(tmp_path, make_pdf):
    info = inspect_pdf(make_pdf(tmp_path / "a.pdf", pages=3))

    assert info.page_count == 3
    assert info.file_size > 0

    with pytest.raises(FileNotFoundError):
        inspect_pdf(tmp_path / "missing.pdf")


@pytest.mark.parametrize("size, expected", [
    (500, "500 B"),
    (2048, "2.0 KB"),
    (3 * 1024 * 1024, "3.0 MB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
