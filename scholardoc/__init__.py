"""
scholardoc - Scholarship Application Document Pipeline

Checks Markdown application documents and turns them into:
1. Validation, content analysis and checklist results
2. Per-document PDFs and one merged PDF
3. Reports in Markdown, JSON and HTML
"""

__version__ = "1.0.0"
