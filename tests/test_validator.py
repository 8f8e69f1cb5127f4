import dataclasses

import pytest

from scholardoc.validator import DocumentValidator


def test_missing_file_returns_invalid_result(tmp_path):
    result = DocumentValidator().validate_file(tmp_path / "nonexistent.md")

    assert result.valid is False
    assert "does not exist" in result.message
    assert result.checks == {}


def test_word_count_over_limit(tmp_path):
    path = tmp_path / "測試.md"
    path.write_text("# 測試\n\n" + "字" * 308, encoding="utf-8")

    result = DocumentValidator().validate_file(path, 300)

    assert result.valid is False
    assert result.word_count == 310
    assert result.word_limit == 300
    assert result.checks["word_count_valid"] is False
    assert result.checks["has_title"] is True
    assert result.checks["chinese_majority"] is True
    assert result.checks["no_forbidden_chars"] is True
    assert "310/300" in result.message
    assert "exceeds limit by 10" in result.message


def test_limit_guessed_from_filename(tmp_path):
    path = tmp_path / "自傳.md"
    path.write_text("# 自傳\n\n" + "我" * 100, encoding="utf-8")

    result = DocumentValidator().validate_file(path)

    assert result.valid is True
    assert result.word_limit == 800
    assert result.message == "Word count: 102/800 ✓"


def test_unknown_filename_has_no_limit(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text("# 筆記\n\n" + "字" * 5000, encoding="utf-8")

    result = DocumentValidator().validate_file(path)

    assert result.word_limit is None
    assert result.checks["word_count_valid"] is True
    assert result.message == "Word count: 5002"


def test_missing_title(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("沒有標題的內容。", encoding="utf-8")

    result = DocumentValidator().validate_file(path)

    assert result.valid is False
    assert result.checks["has_title"] is False
    assert "missing title" in result.message


def test_sub_heading_is_not_a_title(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("## 小節\n\n內容。", encoding="utf-8")

    assert DocumentValidator().validate_file(path).checks["has_title"] is False


def test_low_chinese_ratio(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("# Title\n\nThis is English text only", encoding="utf-8")

    result = DocumentValidator().validate_file(path)

    assert result.checks["chinese_majority"] is False
    assert "low Chinese character ratio" in result.message


def test_forbidden_characters(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("# 標題\n\n內容□", encoding="utf-8")

    result = DocumentValidator().validate_file(path)

    assert result.checks["no_forbidden_chars"] is False
    assert "Forbidden characters" in result.message


def test_validate_project_reports_every_document(layout, write_document):
    write_document("02_自傳與學習計畫/自傳.md", "# 自傳\n\n我熱愛學習。")

    validator = DocumentValidator()
    results = validator.validate_project(layout)

    assert len(results) == 4
    assert [r.valid for r in results] == [False, True, False, False]
    assert validator.all_valid is False

    summary = validator.summary()
    assert "Validation Summary" in summary
    assert "Total: 4 files" in summary
    assert "Passed: 1" in summary
    assert "✓ 自傳.md" in summary


def test_valid_project(valid_project):
    validator = DocumentValidator()
    validator.validate_project(valid_project)

    assert validator.all_valid is True


def test_summary_before_validation():
    assert DocumentValidator().summary() == "No documents validated yet"


def test_to_dict_is_serializable(tmp_path):
    result = DocumentValidator().validate_file(tmp_path / "missing.md")
    data = result.to_dict()

    assert data["valid"] is False
    assert isinstance(data["timestamp"], str)


def test_undecodable_file_returns_invalid_result(tmp_path):
    path = tmp_path / "自傳.md"
    path.write_bytes(b"# \xe8\x87\xaa\xff\xfe title\n")

    result = DocumentValidator().validate_file(path)

    assert result.valid is False
    assert result.message.startswith("Cannot read file")
    assert result.word_count is None


def test_directory_returns_invalid_result(tmp_path):
    path = tmp_path / "自傳.md"
    path.mkdir()

    result = DocumentValidator().validate_file(path)

    assert result.valid is False
    assert result.message.startswith("Cannot read file")


def test_results_are_immutable(tmp_path):
    result = DocumentValidator().validate_file(tmp_path / "nonexistent.md")

    with pytest.raises(dataclasses.FrozenInstanceError):
        result.valid = True
