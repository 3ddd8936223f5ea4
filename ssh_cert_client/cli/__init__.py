"""Command line interface for get_cert."""
