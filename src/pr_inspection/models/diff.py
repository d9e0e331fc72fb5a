"""
Diff Data Models

unified diff 파싱 결과 데이터 모델들 (파일, 청크, 라인)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union


class LineType(Enum):
    """Kinds of lines inside a diff chunk."""
    ADDED = "added"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class AddedLine:
    """Line that only exists in the new file version."""
    content: str
    new_line: int

    @property
    def line_type(self) -> LineType:
        return LineType.ADDED


@dataclass(frozen=True)
class DeletedLine:
    """Line that only exists in the old file version."""
    content: str
    old_line: int

    @property
    def line_type(self) -> LineType:
        return LineType.DELETED


@dataclass(frozen=True)
class UnchangedLine:
    """Context line present in both file versions."""
    content: str
    old_line: int
    new_line: int

    @property
    def line_type(self) -> LineType:
        return LineType.UNCHANGED


DiffLine = Union[AddedLine, DeletedLine, UnchangedLine]

# Lines that exist in the new file and can carry a comment anchor
TargetLine = Union[AddedLine, UnchangedLine]


def normalize_path(path: str) -> str:
    """Normalize a file path to forward slashes with a single leading '/'."""
    normalized = path.strip().replace('\\', '/')
    return '/' + normalized.lstrip('/')


@dataclass(frozen=True)
class Chunk:
    """One hunk of a file diff, with the line ranges declared in its header."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: Tuple[DiffLine, ...] = ()
    header: str = ""
    section: str = ""

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_lines < 0 or self.new_lines < 0:
            raise ValueError("Line counts must be non-negative")

    @property
    def added_lines(self) -> List[AddedLine]:
        return [line for line in self.lines if isinstance(line, AddedLine)]

    @property
    def deleted_lines(self) -> List[DeletedLine]:
        return [line for line in self.lines if isinstance(line, DeletedLine)]

    @property
    def unchanged_lines(self) -> List[UnchangedLine]:
        return [line for line in self.lines if isinstance(line, UnchangedLine)]


@dataclass(frozen=True)
class FileDiff:
    """All chunks of one file, keyed by its normalized path."""
    path: str
    chunks: Tuple[Chunk, ...] = ()
    old_path: Optional[str] = None
    new_path: Optional[str] = None
    change_type: str = "modified"  # 'added', 'deleted', 'modified', 'renamed'
    is_binary: bool = False

    def __post_init__(self):
        """데이터 검증"""
        valid_types = {'added', 'deleted', 'modified', 'renamed'}
        if self.change_type not in valid_types:
            raise ValueError(f"Invalid change_type: {self.change_type}")
        if not self.path.startswith('/'):
            raise ValueError(f"File path must be normalized: {self.path}")

    @property
    def additions(self) -> int:
        return sum(len(chunk.added_lines) for chunk in self.chunks)

    @property
    def deletions(self) -> int:
        return sum(len(chunk.deleted_lines) for chunk in self.chunks)

    def target_lines(self) -> List[TargetLine]:
        """
        Return the Added and Unchanged lines of this file.

        Sorted by new-file line number; if overlapping hunks declare the
        same number twice, the first occurrence wins.
        """
        by_number: Dict[int, TargetLine] = {}
        for chunk in self.chunks:
            for line in chunk.lines:
                if isinstance(line, (AddedLine, UnchangedLine)):
                    by_number.setdefault(line.new_line, line)
        return [by_number[number] for number in sorted(by_number)]

    def target_line_numbers(self) -> List[int]:
        return [line.new_line for line in self.target_lines()]

    @property
    def has_target_lines(self) -> bool:
        return any(
            isinstance(line, (AddedLine, UnchangedLine))
            for chunk in self.chunks
            for line in chunk.lines
        )


@dataclass(frozen=True)
class FileParseFailure:
    """A file whose diff could not be parsed."""
    file_path: str
    header: str
    message: str


@dataclass(frozen=True)
class ParsedDiff:
    """Parsed form of one diff submission."""
    files: Tuple[FileDiff, ...] = ()
    failures: Tuple[FileParseFailure, ...] = ()
    _index: Dict[str, FileDiff] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        index: Dict[str, FileDiff] = {}
        for file_diff in self.files:
            index.setdefault(file_diff.path, file_diff)
        # frozen dataclass: populate the lookup table once
        object.__setattr__(self, '_index', index)

    def __iter__(self) -> Iterator[FileDiff]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    @property
    def paths(self) -> List[str]:
        return [file_diff.path for file_diff in self.files]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def get_file(self, path: Optional[str]) -> Optional[FileDiff]:
        """Look up a file by path; the path is normalized before matching."""
        if not path or not path.strip():
            return None
        return self._index.get(normalize_path(path))
