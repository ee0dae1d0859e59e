"""Command-line interface (``commerce-spine``)."""
