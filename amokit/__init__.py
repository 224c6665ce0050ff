"""Client functions for the amoCRM v4 API: mailings, notes, pipelines, segments and short links."""

__version__ = "0.1.0"
__all__ = ["mailing", "mailing_recipients", "notes", "pipelines", "segments", "short_links", "transport"]