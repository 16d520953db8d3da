"""Command line interface for savetoink."""
