"""
Unified Diff Parser

Parses unified diff text into structured per-file chunks of added,
deleted and unchanged lines with old/new file line numbers.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models.diff import (
    AddedLine,
    Chunk,
    DeletedLine,
    DiffLine,
    FileDiff,
    FileParseFailure,
    ParsedDiff,
    UnchangedLine,
    normalize_path,
)


class DiffParseError(Exception):
    """Diff text of a single file could not be parsed"""
    def __init__(self, file_path: str, header: str, message: str):
        super().__init__(f"{message} in {file_path or '<unknown file>'}: {header!r}")
        self.file_path = file_path
        self.header = header
        self.message = message


@dataclass
class _FileSection:
    """Raw lines of one file: metadata header lines and hunk body lines."""
    header_lines: List[str] = field(default_factory=list)
    body_lines: List[str] = field(default_factory=list)

    @property
    def has_file_header(self) -> bool:
        return any(line.startswith('--- ') for line in self.header_lines)


class DiffParser:
    """
    Parser for unified diff text.

    Splits a diff submission into files and hunks. A malformed hunk fails
    only the file it belongs to; the remaining files are still parsed.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize diff parser.

        Args:
            logger: Logger for diagnostics (defaults to the module logger)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.hunk_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.binary_file_pattern = re.compile(r'^Binary files? .* differ')

    def parse(self, diff_text: str, file_path: Optional[str] = None, strict: bool = False) -> ParsedDiff:
        """
        Parse unified diff text.

        Args:
            diff_text: Diff of one or more files
            file_path: Path for hunks that appear before any file header
            strict: Raise on the first malformed file instead of recording it

        Returns:
            ParsedDiff with the parsed files and any per-file failures

        Raises:
            DiffParseError: In strict mode, for the first file that fails
        """
        files: List[FileDiff] = []
        failures: List[FileParseFailure] = []

        for section in self._split_sections((diff_text or '').splitlines()):
            try:
                files.append(self._parse_section(section, file_path))
            except DiffParseError as e:
                if strict:
                    raise
                self.logger.error(f"Failed to parse diff for {e.file_path or '<unknown file>'}: {e.message}: {e.header}")
                failures.append(FileParseFailure(file_path=e.file_path, header=e.header, message=e.message))

        self.logger.debug(f"Parsed diff: {len(files)} files, {len(failures)} failures")
        return ParsedDiff(files=tuple(files), failures=tuple(failures))

    def _split_sections(self, lines: List[str]) -> List[_FileSection]:
        """Group diff lines by the file they belong to."""
        sections: List[_FileSection] = []
        current: Optional[_FileSection] = None
        old_remaining = new_remaining = 0
        index = 0

        while index < len(lines):
            line = lines[index]
            in_hunk = old_remaining > 0 or new_remaining > 0

            if line.startswith('diff --git '):
                current = _FileSection(header_lines=[line])
                sections.append(current)
                old_remaining = new_remaining = 0
                index += 1
                continue

            # Inside a hunk a '---'/'+++' pair only starts a file when a hunk header follows it
            if self._is_file_header(lines, index) and (not in_hunk or self._is_hunk_header(lines, index + 2)):
                if in_hunk:
                    self.logger.warning(
                        f"Hunk ended with {old_remaining} old and {new_remaining} new lines still declared"
                    )
                    old_remaining = new_remaining = 0
                # '---' right after 'diff --git' belongs to the same file
                if current is None or current.body_lines or current.has_file_header:
                    current = _FileSection()
                    sections.append(current)
                current.header_lines.extend(lines[index:index + 2])
                index += 2
                continue

            if line.startswith('@@'):
                if current is None:
                    current = _FileSection()
                    sections.append(current)
                current.body_lines.append(line)
                match = self.hunk_header_pattern.match(line)
                if match:
                    old_remaining = int(match.group(2) or 1)
                    new_remaining = int(match.group(4) or 1)
                else:
                    old_remaining = new_remaining = 0
                index += 1
                continue

            if current is not None:
                if current.body_lines:
                    current.body_lines.append(line)
                    old_remaining, new_remaining = self._consume(line, old_remaining, new_remaining)
                else:
                    current.header_lines.append(line)
            index += 1

        return sections

    def _is_file_header(self, lines: List[str], index: int) -> bool:
        return (
            lines[index].startswith('--- ')
            and index + 1 < len(lines)
            and lines[index + 1].startswith('+++ ')
        )

    def _is_hunk_header(self, lines: List[str], index: int) -> bool:
        return index < len(lines) and self.hunk_header_pattern.match(lines[index]) is not None

    def _consume(self, line: str, old_remaining: int, new_remaining: int) -> Tuple[int, int]:
        """Update the declared line counts still expected in a hunk."""
        if line.startswith('\\'):
            return old_remaining, new_remaining
        if line.startswith('+'):
            return old_remaining, max(new_remaining - 1, 0)
        if line.startswith('-'):
            return max(old_remaining - 1, 0), new_remaining
        return max(old_remaining - 1, 0), max(new_remaining - 1, 0)

    def _parse_section(self, section: _FileSection, default_path: Optional[str]) -> FileDiff:
        """
        Parse the lines of one file into a FileDiff.

        Args:
            section: Header and body lines of the file
            default_path: Path used when the section has no file header

        Returns:
            FileDiff for the section

        Raises:
            DiffParseError: For a malformed hunk header or an unnamed file
        """
        old_path, new_path, change_type, is_binary = self._parse_header(section.header_lines)

        if old_path is None and new_path is None:
            if not default_path or not default_path.strip():
                header = section.body_lines[0] if section.body_lines else ''
                raise DiffParseError('', header, "Hunk without a file header")
            old_path = new_path = default_path

        path = normalize_path(new_path if new_path is not None else old_path)
        chunks = self._parse_chunks(section.body_lines, path)

        self.logger.debug(f"Parsed {len(chunks)} chunks for {path}")
        return FileDiff(
            path=path,
            chunks=tuple(chunks),
            old_path=normalize_path(old_path) if old_path is not None else None,
            new_path=normalize_path(new_path) if new_path is not None else None,
            change_type=change_type,
            is_binary=is_binary,
        )

    def _parse_header(self, header_lines: List[str]) -> Tuple[Optional[str], Optional[str], str, bool]:
        """Extract old/new paths, change type and binary flag from file header lines."""
        old_path: Optional[str] = None
        new_path: Optional[str] = None
        change_type = 'modified'
        is_binary = False
        old_is_null = new_is_null = False

        for line in header_lines:
            if line.startswith('diff --git '):
                old_path, new_path = self._git_header_paths(line[len('diff --git '):])
            elif line.startswith('--- '):
                old_path, old_is_null = self._header_path(line[4:], 'a/')
            elif line.startswith('+++ '):
                new_path, new_is_null = self._header_path(line[4:], 'b/')
            elif line.startswith('new file mode'):
                change_type = 'added'
            elif line.startswith('deleted file mode'):
                change_type = 'deleted'
            elif line.startswith('rename from '):
                old_path = line[len('rename from '):]
                change_type = 'renamed'
            elif line.startswith('rename to '):
                new_path = line[len('rename to '):]
                change_type = 'renamed'
            elif self.binary_file_pattern.match(line):
                is_binary = True

        if old_is_null:
            old_path = None
            change_type = 'added'
        if new_is_null:
            new_path = None
            change_type = 'deleted'

        return old_path, new_path, change_type, is_binary

    def _git_header_paths(self, raw: str) -> Tuple[Optional[str], Optional[str]]:
        """Old and new paths from the arguments of a 'diff --git' line."""
        # Unchanged names split evenly even when they contain spaces
        half = len(raw) // 2
        if len(raw) % 2 == 1 and raw[half] == ' ':
            old, new = raw[:half], raw[half + 1:]
            if old.startswith('a/') and new.startswith('b/') and old[2:] == new[2:]:
                return old[2:], new[2:]
            if old == new:
                return old, new

        if raw.startswith('a/') and ' b/' in raw:
            old, new = raw[2:].split(' b/', 1)
            return old, new

        if ' ' not in raw:
            return None, None
        old, new = raw.split(' ', 1)
        return old, new

    def _header_path(self, raw: str, prefix: str) -> Tuple[Optional[str], bool]:
        """Path from a '---'/'+++' line; the flag is set for /dev/null."""
        path = raw.split('\t')[0].strip()
        if path == '/dev/null':
            return None, True
        if path.startswith(prefix):
            path = path[len(prefix):]
        return path, False

    def _parse_chunks(self, body_lines: List[str], path: str) -> List[Chunk]:
        """
        Parse hunk body lines into chunks.

        Args:
            body_lines: Lines starting at the first hunk header
            path: Normalized file path, for error reporting

        Returns:
            List of Chunk objects in diff order
        """
        chunks: List[Chunk] = []
        header_match = None
        header = ''
        lines: List[DiffLine] = []
        old_line = new_line = 0
        old_remaining = new_remaining = 0

        def flush():
            if header_match is None:
                return
            chunks.append(Chunk(
                old_start=int(header_match.group(1)),
                old_lines=int(header_match.group(2) or 1),
                new_start=int(header_match.group(3)),
                new_lines=int(header_match.group(4) or 1),
                lines=tuple(lines),
                header=header,
                section=header_match.group(5).strip(),
            ))

        for raw in body_lines:
            if raw.startswith('@@'):
                match = self.hunk_header_pattern.match(raw)
                if not match:
                    raise DiffParseError(path, raw, "Malformed hunk header")
                flush()
                header_match, header, lines = match, raw, []
                old_line, new_line = int(match.group(1)), int(match.group(3))
                old_remaining, new_remaining = int(match.group(2) or 1), int(match.group(4) or 1)
                continue

            if raw.startswith('\\'):
                # "\ No newline at end of file"
                continue

            if raw.startswith('+'):
                lines.append(AddedLine(content=raw[1:], new_line=new_line))
                new_line += 1
            elif raw.startswith('-'):
                lines.append(DeletedLine(content=raw[1:], old_line=old_line))
                old_line += 1
            elif raw == '' and (old_remaining <= 0 or new_remaining <= 0):
                continue
            else:
                content = raw[1:] if raw.startswith(' ') else raw
                lines.append(UnchangedLine(content=content, old_line=old_line, new_line=new_line))
                old_line += 1
                new_line += 1
            old_remaining, new_remaining = self._consume(raw, old_remaining, new_remaining)

        flush()
        return chunks
