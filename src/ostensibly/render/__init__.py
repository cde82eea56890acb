"""Declaration file rendering."""

from ostensibly.render.printer import DeclarationPrinter, render_declaration_file

__all__ = ["DeclarationPrinter", "render_declaration_file"]
