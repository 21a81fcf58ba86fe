"""File Spec discovery and parsing."""

from .discovery import find_files
from .parser import parse_spec_file, parse_spec_text

__all__ = ["find_files", "parse_spec_file", "parse_spec_text"]
