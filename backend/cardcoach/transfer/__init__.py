"""Flashcard import and export."""

from .import_export import (
    ExportError,
    ImportOptions,
    ImportResult,
    export_flashcards,
    import_flashcards,
)

__all__ = [
    "ExportError",
    "ImportOptions",
    "ImportResult",
    "export_flashcards",
    "import_flashcards",
]
