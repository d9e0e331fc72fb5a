"""
Diff Parsing Layer

This module turns unified diff text into structured files, chunks
and line records with old/new file line numbers.
"""

from .parser import DiffParser, DiffParseError

__all__ = ['DiffParser', 'DiffParseError']
