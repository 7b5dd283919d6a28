"""Command line interface for modelcall."""
