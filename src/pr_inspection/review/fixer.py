"""
Comment Position Fixer

Corrects the line anchors of model-generated review threads so that every
thread points at a line that exists in the new version of its file.
"""

import logging
from typing import List, Optional, Union

from ..diff.parser import DiffParser
from ..models.diff import FileDiff, ParsedDiff, TargetLine
from ..models.review import FilePosition, Review, Thread
from .matching import extract_snippets, find_exact_match, find_normalized_match, nearest_line


class CommentPositionFixer:
    """
    Rewrites thread anchors against the diff the review was generated for.

    Resolution order per thread:
    1. Keep anchors that already name an added or unchanged line
    2. Match text quoted in the comments, exact then whitespace-normalized
    3. Clamp to the nearest added or unchanged line

    Threads on files without any added or unchanged line are dropped.
    Threads whose file is not part of the diff are passed through.
    """

    def __init__(self, parser: Optional[DiffParser] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize comment position fixer.

        Args:
            parser: Parser used when fix() is given raw diff text
            logger: Logger for diagnostics (defaults to the module logger)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.parser = parser or DiffParser(logger=self.logger)

    def fix(
        self,
        review: Optional[Review],
        diff: Union[str, ParsedDiff],
        file_path: Optional[str] = None,
    ) -> Review:
        """
        Correct the anchors of all threads in a review.

        Args:
            review: Review to correct; None is treated as an empty review
            diff: Raw diff text or an already parsed diff
            file_path: Path for header-less hunks when diff is raw text

        Returns:
            New Review with corrected threads; dropped threads are omitted
        """
        if review is None or not review.threads:
            return Review.empty()

        parsed_diff = diff if isinstance(diff, ParsedDiff) else self.parser.parse(diff, file_path=file_path)

        threads: List[Thread] = []
        for thread in review.threads:
            fixed = self.fix_thread(thread, parsed_diff)
            if fixed is not None:
                threads.append(fixed)

        dropped = len(review.threads) - len(threads)
        if dropped:
            self.logger.info(f"Dropped {dropped} of {len(review.threads)} threads without a valid target line")
        return Review(threads=threads)

    def fix_thread(self, thread: Thread, parsed_diff: ParsedDiff) -> Optional[Thread]:
        """
        Correct the anchor of one thread.

        Args:
            thread: Thread to correct (not modified)
            parsed_diff: Diff the thread was generated against

        Returns:
            Corrected copy of the thread, or None if it must be dropped
        """
        context = thread.thread_context
        if context is None or not context.has_file_path:
            self.logger.error(f"Thread missing threadContext or filePath: {thread.model_dump_json(by_alias=True)}")
            return thread.model_copy(deep=True)

        file_diff = parsed_diff.get_file(context.file_path)
        if file_diff is None:
            self.logger.warning(f"No diff found for {context.file_path}; thread position left unchanged")
            return thread.model_copy(deep=True)

        target_lines = file_diff.target_lines()
        if not target_lines:
            self.logger.info(f"Dropping thread on {file_diff.path}: no added or unchanged lines in diff")
            return None

        valid_numbers = [line.new_line for line in target_lines]
        anchor = context.anchor_line

        if context.right_file_start is not None and anchor in valid_numbers:
            self.logger.debug(f"Thread anchor {file_diff.path}:{anchor} is valid")
            return self._accept(thread, file_diff, valid_numbers)

        snippets: List[str] = []
        for comment in thread.comments:
            snippets.extend(snippet for snippet in extract_snippets(comment.content) if snippet not in snippets)

        target = find_exact_match(snippets, target_lines, anchor)
        if target is not None:
            self.logger.info(f"Moved thread on {file_diff.path} from line {anchor} to {target.new_line} (exact match)")
            return self._anchor(thread, target)

        target = find_normalized_match(snippets, target_lines, anchor)
        if target is not None:
            self.logger.info(f"Moved thread on {file_diff.path} from line {anchor} to {target.new_line} (normalized match)")
            return self._anchor(thread, target)

        if anchor is None:
            self.logger.debug(f"Thread on {file_diff.path} has no line anchor; kept as file-level thread")
            return thread.model_copy(deep=True)

        target = self._line(target_lines, nearest_line(valid_numbers, anchor))
        self.logger.info(f"Moved thread on {file_diff.path} from line {anchor} to {target.new_line} (nearest line)")
        return self._anchor(thread, target)

    def _accept(self, thread: Thread, file_diff: FileDiff, valid_numbers: List[int]) -> Thread:
        """Keep a valid anchor; collapse a dangling end position onto the start line."""
        fixed = thread.model_copy(deep=True)
        context = fixed.thread_context
        if context.right_file_start.offset < 1:
            context.right_file_start = FilePosition(line=context.right_file_start.line, offset=1)
        end = context.right_file_end
        if end is not None and (
            end.line not in valid_numbers
            or end.line < context.right_file_start.line
            or end.offset < 1
        ):
            start_line = context.right_file_start.line
            target = self._line(file_diff.target_lines(), start_line)
            context.right_file_end = FilePosition(line=start_line, offset=len(target.content) + 1)
            self.logger.debug(f"Collapsed thread end on {file_diff.path} to line {start_line}")
        return fixed

    def _anchor(self, thread: Thread, target: TargetLine) -> Thread:
        """Point a copy of the thread at the whole of the target line."""
        fixed = thread.model_copy(deep=True)
        context = fixed.thread_context
        context.right_file_start = FilePosition(line=target.new_line, offset=1)
        context.right_file_end = FilePosition(line=target.new_line, offset=len(target.content) + 1)
        context.left_file_start = None
        context.left_file_end = None
        return fixed

    def _line(self, lines: List[TargetLine], number: int) -> TargetLine:
        for line in lines:
            if line.new_line == number:
                return line
        raise LookupError(f"Line {number} is not a target line")
