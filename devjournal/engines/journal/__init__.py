"""Journal engine — turns stored activity into markdown summaries."""

from devjournal.engines.journal.template import render_summary

__all__ = ["render_summary"]
