"""yoyak: summarize and translate Markdown text with chat models.

The streaming engines live in :mod:`yoyak.translate` and
:mod:`yoyak.summary`. Modules do not perform network I/O on import.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
