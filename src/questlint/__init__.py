"""questlint: structural and referential validation of quest-flow documents."""

__version__ = "0.1.0"
