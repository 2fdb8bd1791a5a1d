"""Command line interface for moneymngr."""
