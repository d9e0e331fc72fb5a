"""
Review Position Correction

This module reconciles model-generated review threads with the diff
they were generated for, rewriting stale or invalid line anchors.
"""

from .fixer import CommentPositionFixer
from .matching import extract_snippets, normalize_whitespace, nearest_line

__all__ = ['CommentPositionFixer', 'extract_snippets', 'normalize_whitespace', 'nearest_line']
