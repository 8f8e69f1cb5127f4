from pathlib import Path
from typing import Callable, Optional

from rich.console import Console

from .analyzer import ContentAnalyzer
from .config import APPLICANT_DIR, ConverterOptions, ProjectLayout
from .converter import ConversionResult, PDFConverter
from .merger import PDFMerger, format_file_size
from .report import ReportGenerator
from .validator import DocumentValidator

# sink(message, style) receives every progress line
Sink = Callable[[str, Optional[str]], None]


def console_sink(console: Optional[Console] = None) -> Sink:
    console = console or Console()

    def sink(message: str, style: Optional[str] = None):
        console.print(message, style=style, highlight=False, markup=False)

    return sink


class ScholarshipPipeline:
    """Runs the document steps in order: validate, convert, merge, analyze, report.

    Each step builds its own validator/converter/analyzer, so separate runs
    share no state. Steps return False on detected failures and raise on
    missing inputs.
    """

    def __init__(
        self,
        layout: Optional[ProjectLayout] = None,
        verbose: bool = True,
        sink: Optional[Sink] = None,
        converter_options: Optional[ConverterOptions] = None,
    ):
        self.layout = layout or ProjectLayout()
        self.verbose = verbose
        self.sink = sink or console_sink()
        self.converter_options = converter_options or ConverterOptions()

    def _log(self, message: str, style: Optional[str] = None):
        # Print log message if verbose mode is on.
        if self.verbose:
            self.sink(message, style)

    def validate(self) -> bool:
        self._log("\n=== Validating documents ===", "yellow")
        validator = DocumentValidator()
        validator.validate_project(self.layout)
        self._log(validator.summary())

        if validator.all_valid:
            self._log("✓ All documents passed validation", "green")
            return True

        self._log("✗ Some documents failed validation, see messages above", "red")
        return False

    def convert(self) -> bool:
        self._log("\n=== Converting Markdown to PDF ===", "yellow")
        converter = PDFConverter(self.converter_options)

        def report(result: ConversionResult):
            name = Path(result.input_file).name
            if result.success:
                self._log(f"  ✓ Converted: {name} -> {result.output_file}", "green")
            else:
                self._log(f"  ✗ Failed: {name} - {result.error}", "red")

        batch = converter.convert_project(self.layout, progress=report)

        self._log(f"Total: {batch.total}, succeeded: {batch.success}, failed: {batch.failed}")
        return batch.failed == 0

    def merge(self) -> bool:
        self._log("\n=== Merging PDFs ===", "yellow")
        merger = PDFMerger(layout=self.layout)

        def report(current: int, total: int, file: str):
            self._log(f"  Merging ({current}/{total}): {Path(file).name}")

        result = merger.merge_project_pdfs(
            progress=report,
            metadata={"title": APPLICANT_DIR},
        )
        info = merger.info()

        self._log(f"Output: {result.output_path}")
        self._log(f"Pages: {result.page_count}, files: {result.file_count}, size: {info['file_size']}")
        self._log("✓ PDF merged", "green")
        return True

    def analyze(self) -> bool:
        self._log("\n=== Analyzing content ===", "yellow")
        analyzer = ContentAnalyzer()
        analyzer.analyze_project(self.layout)
        self._log(analyzer.summary())
        self._log("✓ Content analysis complete", "green")
        return True

    def report(self) -> bool:
        self._log("\n=== Generating reports ===", "yellow")
        generator = ReportGenerator(self.layout)
        results = generator.generate_all_reports()

        for fmt, rendered in results.items():
            self._log(f"  {fmt.upper()}: {rendered.output_path} ({format_file_size(rendered.file_size)})", "cyan")
        self._log("✓ Reports generated", "green")
        return True

    def run_all(self) -> bool:
        steps = [
            ("Validate documents", self.validate),
            ("Convert to PDF", self.convert),
            ("Merge PDFs", self.merge),
            ("Analyze content", self.analyze),
            ("Generate reports", self.report),
        ]

        for idx, (title, step) in enumerate(steps, start=1):
            self._log(f"\n[{idx}/{len(steps)}] {title}", "bold yellow")
            if not step():
                self._log(f"✗ Stopped at step {idx}: {title}", "red")
                return False

        self._log("\n✓ All steps completed", "bold green")
        return True
