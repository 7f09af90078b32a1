"""linkmend — keep norg workspace links intact when documents move."""

__version__ = "0.3.0"
