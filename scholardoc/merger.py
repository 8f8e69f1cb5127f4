from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pikepdf
from loguru import logger

from .config import ProjectLayout

METADATA_KEYS = {
    "title": "/Title",
    "author": "/Author",
    "subject": "/Subject",
    "keywords": "/Keywords",
    "creator": "/Creator",
    "producer": "/Producer",
}


@dataclass
class MergeResult:
    output_path: str
    page_count: int
    file_count: int


@dataclass
class PdfInfo:
    path: str
    page_count: int
    file_size: int


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{round(size / 1024.0, 2)} KB"
    return f"{round(size / (1024.0 * 1024), 2)} MB"


def inspect_pdf(pdf_path) -> PdfInfo:
    # Open a PDF read-only and report its page count.
    path = Path(pdf_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {pdf_path}")

    try:
        with pikepdf.open(path) as pdf:
            page_count = len(pdf.pages)
    except pikepdf.PdfError as e:
        raise RuntimeError(f"Unreadable PDF {path.name}: {e}") from e

    return PdfInfo(path=str(path), page_count=page_count, file_size=path.stat().st_size)


class PDFMerger:
    # Concatenates PDFs into a single file, one bookmark per source.

    def __init__(self, output_path=None, layout: Optional[ProjectLayout] = None):
        self.layout = layout or ProjectLayout()
        self.output_path = Path(output_path) if output_path else self.layout.merged_pdf
        self.page_count = 0
        self._merged = False

    def merge(
        self,
        pdf_files: Sequence,
        metadata: Optional[Dict[str, str]] = None,
        bookmarks: bool = True,
        progress: Optional[Callable[[int, int, str], None]] = None,
    ) -> MergeResult:
        paths = [Path(p) for p in pdf_files]
        self._validate_input_files(paths)

        sources = []
        output_pdf = pikepdf.Pdf.new()
        outline_entries = []
        try:
            for idx, path in enumerate(paths):
                try:
                    src = pikepdf.open(path)
                except pikepdf.PdfError as e:
                    raise RuntimeError(f"Error merging {path}: {e}") from e
                sources.append(src)

                outline_entries.append((path.stem, len(output_pdf.pages)))
                output_pdf.pages.extend(src.pages)

                if progress:
                    progress(idx + 1, len(paths), str(path))

            if bookmarks:
                with output_pdf.open_outline() as outline:
                    for title, page_index in outline_entries:
                        outline.root.append(pikepdf.OutlineItem(title, page_index))

            self._add_metadata(output_pdf, metadata or {})

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            output_pdf.save(self.output_path)
            self.page_count = len(output_pdf.pages)
        finally:
            for src in sources:
                src.close()
            output_pdf.close()

        if not self.output_path.exists():
            raise RuntimeError(f"Could not create output file: {self.output_path}")

        self._merged = True
        logger.debug(f"Merged {len(paths)} files into {self.output_path}")
        return MergeResult(
            output_path=str(self.output_path),
            page_count=self.page_count,
            file_count=len(paths),
        )

    def merge_project_pdfs(
        self,
        progress: Optional[Callable[[int, int, str], None]] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> MergeResult:
        existing = [p for p in self.layout.product_pdfs if p.exists()]
        if not existing:
            raise FileNotFoundError(f"No PDF files found in {self.layout.product_dir}")
        return self.merge(existing, metadata=metadata, progress=progress)

    def validate_merged_pdf(self) -> dict:
        if not self._merged:
            return {"valid": False, "message": "PDFs not merged yet"}

        return {
            "valid": True,
            "page_count": self.page_count,
            "file_size": self.output_path.stat().st_size,
            "output_path": str(self.output_path),
        }

    def info(self) -> dict:
        if not self._merged:
            return {}

        stat = self.output_path.stat()
        return {
            "output_path": str(self.output_path),
            "page_count": self.page_count,
            "file_size": format_file_size(stat.st_size),
            "created_at": datetime.fromtimestamp(stat.st_mtime),
        }

    @staticmethod
    def _validate_input_files(paths: List[Path]):
        # All inputs are checked before anything is written
        if not paths:
            raise ValueError("PDF file list must not be empty")

        for path in paths:
            if not path.exists():
                raise FileNotFoundError(f"File not found: {path}")
            if path.suffix.lower() != ".pdf":
                raise ValueError(f"Not a PDF file: {path}")

    @staticmethod
    def _add_metadata(pdf: "pikepdf.Pdf", metadata: Dict[str, str]):
        values = {
            "creator": "scholardoc",
            "producer": f"pikepdf {pikepdf.__version__}",
            **{k: v for k, v in metadata.items() if v},
        }
        for key, value in values.items():
            name = METADATA_KEYS.get(key)
            if name:
                pdf.docinfo[name] = value
        pdf.docinfo["/CreationDate"] = datetime.now().strftime("D:%Y%m%d%H%M%S")
