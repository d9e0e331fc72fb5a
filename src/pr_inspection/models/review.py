"""
Review Data Models

모델이 반환하는 코드 리뷰 스레드 데이터 모델들
"""

import json
import logging
from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


logger = logging.getLogger(__name__)


class CommentType(IntEnum):
    """Comment type codes understood by the review host."""
    UNKNOWN = 0
    TEXT = 1
    REGULAR = 2
    SYSTEM = 3


class ThreadStatus(IntEnum):
    """Thread status codes understood by the review host."""
    UNKNOWN = 0
    ACTIVE = 1
    FIXED = 2
    WONT_FIX = 3
    CLOSED = 4
    BY_DESIGN = 5
    PENDING = 6


MIN_CONFIDENCE_SCORE = 1
MAX_CONFIDENCE_SCORE = 10


class _ReviewModel(BaseModel):
    """camelCase JSON을 snake_case 속성으로 매핑하는 베이스 모델"""
    model_config = ConfigDict(populate_by_name=True, extra='allow')


class Comment(_ReviewModel):
    """스레드 내 개별 코멘트"""
    content: str = ""
    comment_type: int = Field(default=int(CommentType.REGULAR), alias='commentType')

    @field_validator('content', mode='before')
    @classmethod
    def validate_content(cls, v):
        return "" if v is None else v


class FilePosition(_ReviewModel):
    """파일 내 위치 (라인/컬럼, 범위 밖 값은 보정 단계에서 처리)"""
    line: int
    offset: int = 1

    @field_validator('offset', mode='before')
    @classmethod
    def validate_offset(cls, v):
        return 1 if v is None else v


class ThreadContext(_ReviewModel):
    """스레드가 붙을 파일과 위치"""
    file_path: Optional[str] = Field(default=None, alias='filePath')
    right_file_start: Optional[FilePosition] = Field(default=None, alias='rightFileStart')
    right_file_end: Optional[FilePosition] = Field(default=None, alias='rightFileEnd')
    left_file_start: Optional[FilePosition] = Field(default=None, alias='leftFileStart')
    left_file_end: Optional[FilePosition] = Field(default=None, alias='leftFileEnd')

    @property
    def anchor_line(self) -> Optional[int]:
        """Line the thread points at, preferring the new-file side."""
        if self.right_file_start is not None:
            return self.right_file_start.line
        if self.left_file_start is not None:
            return self.left_file_start.line
        return None

    @property
    def has_file_path(self) -> bool:
        return bool(self.file_path and self.file_path.strip())


class Thread(_ReviewModel):
    """리뷰 스레드"""
    comments: List[Comment] = Field(default_factory=list)
    status: int = int(ThreadStatus.ACTIVE)
    thread_context: Optional[ThreadContext] = Field(default=None, alias='threadContext')
    confidence_score: Optional[float] = Field(default=None, alias='confidenceScore')

    @field_validator('comments', mode='before')
    @classmethod
    def validate_comments(cls, v):
        return [] if v is None else v

    @field_validator('confidence_score')
    @classmethod
    def clamp_confidence_score(cls, v):
        if v is None:
            return v
        return min(max(v, MIN_CONFIDENCE_SCORE), MAX_CONFIDENCE_SCORE)

    @property
    def file_path(self) -> Optional[str]:
        if self.thread_context is None:
            return None
        return self.thread_context.file_path

    @property
    def text(self) -> str:
        """All comment contents joined by newlines."""
        return '\n'.join(comment.content for comment in self.comments)


class Review(_ReviewModel):
    """파일 하나에 대한 리뷰 결과"""
    threads: List[Thread] = Field(default_factory=list)

    @field_validator('threads', mode='before')
    @classmethod
    def validate_threads(cls, v):
        return [] if v is None else v

    @classmethod
    def empty(cls) -> "Review":
        return cls(threads=[])

    @classmethod
    def from_model_output(cls, raw: Union[str, bytes, Dict[str, Any], None]) -> "Review":
        """
        Build a Review from raw model output.

        Args:
            raw: JSON text or an already decoded dict

        Returns:
            Parsed Review, or an empty Review when the output is missing
            or does not have the review shape
        """
        if raw is None:
            logger.error("Model output missing. Returning empty review")
            return cls.empty()

        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            if not isinstance(data, dict):
                raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
            raw_threads = data.get('threads')
            if raw_threads is not None and not isinstance(raw_threads, list):
                raise ValueError(f"Expected a list of threads, got {type(raw_threads).__name__}")
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"Failed to parse model output. Returning empty review: {e}")
            return cls.empty()

        # 스레드 단위 검증: 잘못된 스레드만 제외
        threads: List[Thread] = []
        for index, raw_thread in enumerate(raw_threads or []):
            try:
                threads.append(Thread.model_validate(raw_thread))
            except ValidationError as e:
                logger.error(f"Dropping malformed thread {index} from model output: {e}")

        return cls(threads=threads)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize using the camelCase field names of the model schema."""
        return self.model_dump(by_alias=True, exclude_none=True)
