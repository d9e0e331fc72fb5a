"""
PR Inspection Assistant

AI 코드 리뷰 코멘트를 unified diff에 맞춰 보정하는 Pull Request 검사 도구
"""

__version__ = "1.0.0"

from .assistant import InspectionAssistant
from .diff import DiffParser, DiffParseError
from .review import CommentPositionFixer

__all__ = ["InspectionAssistant", "DiffParser", "DiffParseError", "CommentPositionFixer"]
