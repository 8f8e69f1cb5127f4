import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

APPLICANT_DIR = "2025_明緯獎學金_李沛宸"

DOCUMENTS: Tuple[str, ...] = (
    "01_申請書/300字短答_為何申請.md",
    "02_自傳與學習計畫/自傳.md",
    "02_自傳與學習計畫/短期學習計畫.md",
    "02_自傳與學習計畫/未來工作應用.md",
)

CANDIDATE_DIRS: Tuple[str, ...] = ("01_申請書", "02_自傳與學習計畫", "05_影片")
VIDEO_DIR = "05_影片"
VIDEO_PATTERNS: Tuple[str, ...] = ("*.mp4", "*.mov", "*.avi")

PRODUCT_DIR = "product"
MERGED_PDF_NAME = "2025 明緯獎學金-李沛宸.pdf"
REPORTS_DIR = "reports"

# Keys are matched as substrings of the file name, first match wins
WORD_LIMITS: Dict[str, int] = {
    "300字短答_為何申請": 300,
    "自傳": 800,
    "短期學習計畫": 800,
    "未來工作應用": 1000,
}

IMPORTANT_KEYWORDS: Tuple[str, ...] = ("軟體", "工程", "開發", "安全", "資安", "系統", "專案", "技術")

SDGS_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "SDG4_優質教育": ("教育", "學習", "教學", "培訓", "知識", "技能", "教案", "工作坊", "分享"),
    "SDG3_良好健康": ("健康", "福祉", "安全", "風險", "防護", "保護"),
    "SDG9_產業創新": ("創新", "研發", "技術", "工程", "開發", "系統"),
    "SDG16_和平正義": ("安全", "詐騙", "風險", "治理", "稽核", "合規"),
    "SDG17_夥伴關係": ("合作", "社群", "分享", "貢獻", "開源", "回饋"),
}

FORBIDDEN_CHARS: Tuple[str, ...] = ("�", "□", "■")


def guess_word_limit(filename: str) -> Optional[int]:
    # Look up the word limit for a document by its file name.
    for pattern, limit in WORD_LIMITS.items():
        if pattern in filename:
            return limit
    return None


@dataclass(frozen=True)
class ProjectLayout:
    """Fixed folder structure of one applicant's documents.

    All paths are resolved relative to ``base_path``.
    """
    base_path: Path = Path(".")

    def __post_init__(self):
        object.__setattr__(self, "base_path", Path(self.base_path))

    @staticmethod
    def from_env() -> "ProjectLayout":
        base_raw = (os.getenv("SCHOLARDOC_BASE") or "").strip()
        return ProjectLayout(Path(base_raw) if base_raw else Path("."))

    @property
    def applicant_dir(self) -> Path:
        return self.base_path / APPLICANT_DIR

    @property
    def documents(self) -> List[Path]:
        return [self.applicant_dir / rel for rel in DOCUMENTS]

    @property
    def candidate_dirs(self) -> List[Path]:
        return [self.applicant_dir / d for d in CANDIDATE_DIRS]

    @property
    def video_dir(self) -> Path:
        return self.applicant_dir / VIDEO_DIR

    @property
    def product_dir(self) -> Path:
        return self.base_path / PRODUCT_DIR

    @property
    def product_pdfs(self) -> List[Path]:
        # One PDF per document, in document order
        return [self.product_dir / f"{doc.stem}.pdf" for doc in self.documents]

    @property
    def merged_pdf(self) -> Path:
        return self.product_dir / MERGED_PDF_NAME

    @property
    def reports_dir(self) -> Path:
        return self.base_path / REPORTS_DIR

    def checklist_candidates(self) -> List[Path]:
        return [
            self.applicant_dir / "README.md",
            self.base_path / "README.md",
            self.base_path.parent / "README.md",
        ]

    def find_checklist(self) -> Path:
        # First existing checklist document, else the applicant README.
        candidates = self.checklist_candidates()
        for path in candidates:
            if path.exists():
                return path
        return candidates[0]


@dataclass(frozen=True)
class ConverterOptions:
    # Rendering options for Markdown -> PDF conversion
    font_size: int = 12
    line_height: float = 1.5
    margin: int = 50
    page_size: str = "A4"
    font_path: Optional[str] = None
    search_system_fonts: bool = True
    fallback_font: str = "Helvetica"
    page_numbers: bool = True

    def with_overrides(self, **overrides) -> "ConverterOptions":
        # Ignore None so callers can pass optional CLI values straight through
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
