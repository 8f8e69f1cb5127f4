"""Heuristic content analysis: readability, keywords, structure, topics, errors"""

import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from .config import IMPORTANT_KEYWORDS, SDGS_KEYWORDS, ProjectLayout
from .normalizer import count_han, strip_markdown

_SENTENCE_END = re.compile(r"[。！？]")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_TITLE = re.compile(r"^#[ \t]+\S", re.MULTILINE)
_SECTION = re.compile(r"^##[ \t]+\S", re.MULTILINE)
_LIST = re.compile(r"^(?:[-*+]|\d+\.)[ \t]+\S", re.MULTILINE)

_REPEATED_PUNCTUATION = re.compile(r"[。，！？]{2,}")
_ASCII_DIGIT = re.compile(r"[0-9]")
_FULLWIDTH_DIGIT = re.compile(r"[０-９]")
_EXTRA_WHITESPACE = re.compile(r"\s{3,}")

_ENGLISH_WORD = re.compile(r"[a-zA-Z]+")
_NUMBER = re.compile(r"[0-9]+")
_PUNCTUATION = re.compile(r"[，。！？、；：]")

LONG_SENTENCE = 50
MIN_PARAGRAPHS = 3
TOP_KEYWORDS = 5


@dataclass
class Readability:
    score: int
    avg_sentence_length: float
    paragraph_count: int
    recommendation: str


@dataclass
class KeywordCount:
    count: int
    density: float  # occurrences per 1000 characters


@dataclass
class KeywordDensity:
    keywords: Dict[str, KeywordCount]
    top_keywords: Dict[str, KeywordCount]


@dataclass
class Structure:
    score: int
    has_title: bool
    has_sections: bool
    has_lists: bool
    section_count: int
    recommendation: str


@dataclass
class TopicAlignment:
    matched: List[str]
    details: Dict[str, List[str]]
    alignment_score: int


@dataclass
class CommonErrors:
    errors: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.errors)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class Statistics:
    total_characters: int
    chinese_characters: int
    english_words: int
    numbers: int
    punctuation: int
    lines: int
    paragraphs: int


@dataclass
class AnalysisResult:
    file: str
    readability: Readability
    keyword_density: KeywordDensity
    structure: Structure
    topics: TopicAlignment
    common_errors: CommonErrors
    statistics: Statistics

    def to_dict(self) -> dict:
        data = asdict(self)
        data["common_errors"]["count"] = self.common_errors.count
        data["common_errors"]["has_errors"] = self.common_errors.has_errors
        return data


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def split_paragraphs(content: str) -> List[str]:
    return [p for p in _PARAGRAPH_BREAK.split(content) if p.strip()]


def readability_recommendation(score: int) -> str:
    if score >= 80:
        return "Readability is good"
    if score >= 60:
        return "Readability is fair; consider shortening long sentences"
    return "Readability is low; add paragraph breaks and shorten sentences"


def analyze_readability(content: str) -> Readability:
    text = strip_markdown(content)

    sentences = _SENTENCE_END.split(text)
    while sentences and not sentences[-1].strip():
        sentences.pop()
    avg_length = sum(len(s) for s in sentences) / len(sentences) if sentences else 0.0

    paragraphs = split_paragraphs(content)

    score = 100
    if avg_length > LONG_SENTENCE:
        score -= 20
    if len(paragraphs) < MIN_PARAGRAPHS:
        score -= 10
    score = _clamp(score)

    return Readability(
        score=score,
        avg_sentence_length=round(avg_length, 1),
        paragraph_count=len(paragraphs),
        recommendation=readability_recommendation(score),
    )


def analyze_keywords(content: str, keywords: Iterable[str] = IMPORTANT_KEYWORDS) -> KeywordDensity:
    text = strip_markdown(content).lower()
    total_chars = len(re.sub(r"\s", "", text))

    counts = {}
    for keyword in keywords:
        count = text.count(keyword)
        density = round(count / total_chars * 1000, 2) if total_chars else 0.0
        counts[keyword] = KeywordCount(count=count, density=density)

    # sorted() is stable, so ties keep keyword list order
    top = sorted(counts.items(), key=lambda item: -item[1].count)[:TOP_KEYWORDS]
    return KeywordDensity(keywords=counts, top_keywords=dict(top))


def analyze_structure(content: str) -> Structure:
    has_title = bool(_TITLE.search(content))
    section_count = len(_SECTION.findall(content))
    has_sections = section_count > 0
    has_lists = bool(_LIST.search(content))

    score = 0
    if has_title:
        score += 30
    if has_sections:
        score += 30
    if has_lists:
        score += 20
    if section_count >= 3:
        score += 20

    advice = []
    if not has_title:
        advice.append("Add a title")
    if not has_sections:
        advice.append("Add section headings")
    if not has_lists:
        advice.append("Use lists to organise content")

    return Structure(
        score=_clamp(score),
        has_title=has_title,
        has_sections=has_sections,
        has_lists=has_lists,
        section_count=section_count,
        recommendation="; ".join(advice) if advice else "Structure is good",
    )


def analyze_topics(content: str, topics: Dict[str, Iterable[str]] = SDGS_KEYWORDS) -> TopicAlignment:
    text = strip_markdown(content)

    details = {}
    for topic, keywords in topics.items():
        found = [k for k in keywords if k in text]
        if found:
            details[topic] = found

    matched = list(details)
    return TopicAlignment(
        matched=matched,
        details=details,
        alignment_score=min(100, 20 * len(matched)),
    )


def _quotes_inconsistent(content: str) -> bool:
    corner = "「" in content or "」" in content
    curly = "“" in content or "”" in content
    if corner and curly:
        return True
    return content.count("「") != content.count("」") or content.count("“") != content.count("”")


def detect_common_errors(content: str) -> CommonErrors:
    errors = []

    if _REPEATED_PUNCTUATION.search(content):
        errors.append("Repeated punctuation")
    if _ASCII_DIGIT.search(content) and _FULLWIDTH_DIGIT.search(content):
        errors.append("Mixed full-width and half-width digits")
    if _EXTRA_WHITESPACE.search(content):
        errors.append("Extra whitespace")
    if _quotes_inconsistent(content):
        errors.append("Inconsistent quotation marks")

    return CommonErrors(errors=errors)


def calculate_statistics(content: str) -> Statistics:
    text = strip_markdown(content)
    return Statistics(
        total_characters=len(text),
        chinese_characters=count_han(text),
        english_words=len(_ENGLISH_WORD.findall(text)),
        numbers=len(_NUMBER.findall(text)),
        punctuation=len(_PUNCTUATION.findall(text)),
        lines=len(content.splitlines()),
        paragraphs=len(split_paragraphs(content)),
    )


def analyze_content(content: str, file: str = "") -> AnalysisResult:
    return AnalysisResult(
        file=file,
        readability=analyze_readability(content),
        keyword_density=analyze_keywords(content),
        structure=analyze_structure(content),
        topics=analyze_topics(content),
        common_errors=detect_common_errors(content),
        statistics=calculate_statistics(content),
    )


class ContentAnalyzer:
    # Runs the content heuristics over documents and keeps results by path

    def __init__(self):
        self.analysis_results: Dict[str, AnalysisResult] = {}

    def analyze_file(self, file_path) -> Optional[AnalysisResult]:
        path = Path(file_path)
        if not path.exists():
            logger.warning(f"Skipping analysis, file does not exist: {path}")
            return None

        try:
            content = path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Skipping analysis, cannot read {path}: {e}")
            return None

        result = analyze_content(content, str(path))
        self.analysis_results[str(path)] = result
        return result

    def analyze_batch(
        self,
        file_paths: Iterable,
        progress: Optional[Callable[[int, int, str], None]] = None,
    ) -> Dict[str, AnalysisResult]:
        paths = list(file_paths)
        for index, path in enumerate(paths):
            self.analyze_file(path)
            if progress:
                progress(index + 1, len(paths), str(path))
        return self.analysis_results

    def analyze_project(self, layout: Optional[ProjectLayout] = None) -> Dict[str, AnalysisResult]:
        layout = layout or ProjectLayout()
        existing = [p for p in layout.documents if p.exists()]
        return self.analyze_batch(existing)

    def summary(self) -> str:
        if not self.analysis_results:
            return "No documents analyzed yet"

        lines = ["Content Analysis Summary", "=" * 50, ""]
        for file, analysis in self.analysis_results.items():
            lines.extend([
                f"File: {Path(file).name}",
                "-" * 40,
                f"Readability: {analysis.readability.score}/100",
                f"Structure: {analysis.structure.score}/100",
                f"SDGs alignment: {', '.join(analysis.topics.matched) or 'none'}",
                f"Common errors: {analysis.common_errors.count}",
                "",
            ])
        return "\n".join(lines)
