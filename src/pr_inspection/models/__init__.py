"""
Data Models

PR Inspection 시스템의 핵심 데이터 모델들
"""

from .diff import (
    AddedLine,
    DeletedLine,
    UnchangedLine,
    DiffLine,
    LineType,
    Chunk,
    FileDiff,
    FileParseFailure,
    ParsedDiff,
    normalize_path,
)
from .review import Comment, CommentType, FilePosition, ThreadContext, Thread, ThreadStatus, Review

__all__ = [
    "AddedLine",
    "DeletedLine",
    "UnchangedLine",
    "DiffLine",
    "LineType",
    "Chunk",
    "FileDiff",
    "FileParseFailure",
    "ParsedDiff",
    "normalize_path",
    "Comment",
    "CommentType",
    "FilePosition",
    "ThreadContext",
    "Thread",
    "ThreadStatus",
    "Review",
]
