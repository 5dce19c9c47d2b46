"""ndraft - card-based AI drafting with inline style and action directives."""

__version__ = "2.0.0"
