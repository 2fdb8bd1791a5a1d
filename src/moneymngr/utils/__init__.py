"""Utility functions for moneymngr."""
