"""
Line Matching

Helpers that resolve a comment to a line of the new file: quoted snippet
extraction, whitespace normalization and nearest-line selection.
"""

import re
from bisect import bisect_left
from typing import Iterable, List, Optional, Sequence

from ..models.diff import TargetLine


FENCED_BLOCK_PATTERN = re.compile(r'```[^\n]*\n(.*?)```', re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r'`([^`\n]+)`')
QUOTED_PATTERN = re.compile(r'"([^"\n]+)"|“([^”\n]+)”')


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to one space and strip both ends."""
    return ' '.join(text.split())


def extract_snippets(text: str) -> List[str]:
    """
    Extract source text quoted in a comment.

    Snippets are returned in priority order: lines of fenced code blocks,
    inline code spans, double-quoted strings and finally the whole text
    when it is a single line. Duplicates and blank snippets are dropped.

    Args:
        text: Comment content

    Returns:
        Ordered list of candidate snippets
    """
    snippets: List[str] = []

    for block in FENCED_BLOCK_PATTERN.findall(text):
        snippets.extend(block.splitlines())

    # Inline spans are searched outside fenced blocks only
    remainder = FENCED_BLOCK_PATTERN.sub('', text)
    snippets.extend(INLINE_CODE_PATTERN.findall(remainder))
    for straight, curly in QUOTED_PATTERN.findall(remainder):
        snippets.append(straight or curly)

    stripped = text.strip()
    if stripped and '\n' not in stripped:
        snippets.append(stripped)

    unique: List[str] = []
    for snippet in snippets:
        if snippet.strip() and snippet not in unique:
            unique.append(snippet)
    return unique


def nearest_line(line_numbers: Sequence[int], anchor: int) -> Optional[int]:
    """
    Return the number closest to anchor; ties go to the lower number.

    Args:
        line_numbers: Sorted, distinct line numbers
        anchor: Line number to approximate

    Returns:
        Closest line number, or None if there are none
    """
    if not line_numbers:
        return None

    index = bisect_left(line_numbers, anchor)
    if index == 0:
        return line_numbers[0]
    if index == len(line_numbers):
        return line_numbers[-1]

    lower, upper = line_numbers[index - 1], line_numbers[index]
    if upper == anchor:
        return upper
    return lower if anchor - lower <= upper - anchor else upper


def _pick(matches: List[TargetLine], anchor: Optional[int]) -> TargetLine:
    if anchor is None:
        return matches[0]
    return min(matches, key=lambda line: (abs(line.new_line - anchor), line.new_line))


def find_exact_match(
    snippets: Iterable[str],
    lines: Sequence[TargetLine],
    anchor: Optional[int] = None,
) -> Optional[TargetLine]:
    """First snippet whose text equals a line's content exactly."""
    for snippet in snippets:
        matches = [line for line in lines if line.content.strip() and line.content == snippet]
        if matches:
            return _pick(matches, anchor)
    return None


def find_normalized_match(
    snippets: Iterable[str],
    lines: Sequence[TargetLine],
    anchor: Optional[int] = None,
) -> Optional[TargetLine]:
    """First snippet that equals a line's content after whitespace normalization."""
    normalized_lines = [(normalize_whitespace(line.content), line) for line in lines]
    for snippet in snippets:
        wanted = normalize_whitespace(snippet)
        if not wanted:
            continue
        matches = [line for text, line in normalized_lines if text == wanted]
        if matches:
            return _pick(matches, anchor)
    return None
