from .base import RenderedReport, ReportRenderer
from .html_renderer import HTMLRenderer
from .json_renderer import JSONRenderer
from .markdown_renderer import MarkdownRenderer


def get_renderer(fmt: str) -> ReportRenderer:
    renderers = {
        'markdown': MarkdownRenderer,
        'md': MarkdownRenderer,
        'json': JSONRenderer,
        'html': HTMLRenderer,
        'htm': HTMLRenderer,
    }

    renderer_class = renderers.get(fmt.lower().lstrip('.'))
    if not renderer_class:
        raise ValueError(f"Unsupported report format: {fmt}")

    return renderer_class()

__all__ = ['ReportRenderer', 'RenderedReport', 'MarkdownRenderer', 'JSONRenderer', 'HTMLRenderer', 'get_renderer']
