"""E-reader document generation."""

from .epub import EpubGenerator, build_metadata_header

__all__ = ["EpubGenerator", "build_metadata_header"]
