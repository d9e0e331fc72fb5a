"""
Unit tests for comment position correction.
"""

import logging
from unittest.mock import Mock

from pr_inspection.diff.parser import DiffParser
from pr_inspection.models.review import Comment, FilePosition, Review, Thread, ThreadContext
from pr_inspection.review.fixer import CommentPositionFixer
from pr_inspection.review.matching import (
    extract_snippets,
    find_exact_match,
    find_normalized_match,
    nearest_line,
    normalize_whitespace,
)


SIMPLE_DIFF = "@@ -1,3 +1,4 @@\n line1\n+line2\n line3\n-line4\n"

DELETED_FILE_DIFF = (
    "diff --git a/deleted.ts b/deleted.ts\n"
    "deleted file mode 100644\n"
    "--- a/deleted.ts\n"
    "+++ /dev/null\n"
    "@@ -1,2 +0,0 @@\n"
    "-const a = 1;\n"
    "-const b = 2;\n"
)


def make_thread(file_path, line=None, content="", end_line=None, left_line=None):
    """Build a single-comment thread anchored at the given line."""
    context = None
    if file_path is not None:
        context = ThreadContext(
            file_path=file_path,
            right_file_start=FilePosition(line=line) if line is not None else None,
            right_file_end=FilePosition(line=end_line) if end_line is not None else None,
            left_file_start=FilePosition(line=left_line) if left_line is not None else None,
        )
    return Thread(comments=[Comment(content=content)], thread_context=context, confidence_score=7)


class TestCommentPositionFixer:
    """Unit tests for CommentPositionFixer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.fixer = CommentPositionFixer()
        self.parsed = DiffParser().parse(SIMPLE_DIFF, file_path="/a.ts")

    def test_valid_anchor_is_unchanged(self):
        """Test a thread already on an added line is accepted as is."""
        thread = make_thread("/a.ts", line=2, content="line2")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads == [thread]

    def test_valid_anchor_on_unchanged_line(self):
        """Test unchanged (context) lines are valid anchors too."""
        thread = make_thread("/a.ts", line=3, content="Rename this")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads[0].thread_context.right_file_start.line == 3

    def test_content_match_relocates_anchor(self):
        """Test a stale anchor moves to the line quoted in the comment."""
        thread = make_thread("/a.ts", line=99, content='The value "line2" is never used.')

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        context = fixed.threads[0].thread_context
        assert context.right_file_start == FilePosition(line=2, offset=1)
        assert context.right_file_end == FilePosition(line=2, offset=6)

    def test_nearest_line_when_no_content_match(self):
        """Test an anchor with no content match clamps to the nearest valid line."""
        thread = make_thread("/a.ts", line=99, content="Consider adding tests.")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads[0].thread_context.right_file_start.line == 3

    def test_non_positive_anchor_clamps_to_first_line(self):
        """Test line 0 and negative anchors move to the first target line."""
        review = Review.from_model_output({
            "threads": [
                {
                    "comments": [{"content": "line2"}],
                    "threadContext": {"filePath": "/a.ts", "rightFileStart": {"line": 2, "offset": 1}},
                },
                {
                    "comments": [{"content": "Off by one"}],
                    "threadContext": {"filePath": "/a.ts", "rightFileStart": {"line": 0, "offset": 0}},
                },
                {
                    "comments": [{"content": "Way off"}],
                    "threadContext": {"filePath": "/a.ts", "rightFileStart": {"line": -7, "offset": 1}},
                },
            ]
        })

        fixed = self.fixer.fix(review, self.parsed)

        starts = [thread.thread_context.right_file_start for thread in fixed.threads]
        assert starts == [FilePosition(line=2), FilePosition(line=1), FilePosition(line=1)]
        assert fixed.threads[1].thread_context.right_file_end == FilePosition(line=1, offset=6)

    def test_non_positive_offsets_on_valid_line_are_clamped(self):
        """Test a valid line keeps its anchor while zero offsets are raised to 1."""
        thread = make_thread("/a.ts", line=2, content="x")
        thread.thread_context.right_file_start = FilePosition(line=2, offset=0)
        thread.thread_context.right_file_end = FilePosition(line=2, offset=0)

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        context = fixed.threads[0].thread_context
        assert context.right_file_start == FilePosition(line=2, offset=1)
        assert context.right_file_end == FilePosition(line=2, offset=6)

    def test_deleted_file_thread_is_dropped(self):
        """Test threads on a fully deleted file are removed."""
        parsed = DiffParser().parse(DELETED_FILE_DIFF)
        review = Review(threads=[
            make_thread("/deleted.ts", line=1, content="const a = 1;"),
            make_thread("/other.ts", line=1, content="kept"),
        ])

        fixed = self.fixer.fix(review, parsed)

        assert [thread.file_path for thread in fixed.threads] == ["/other.ts"]

    def test_unknown_file_is_passed_through(self):
        """Test threads on files outside the diff are returned unmodified."""
        thread = make_thread("/elsewhere.ts", line=42, content="hmm")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads == [thread]

    def test_thread_without_file_path_is_kept_and_logged(self):
        """Test threads missing a file path are kept and reported."""
        logger = Mock(spec=logging.Logger)
        fixer = CommentPositionFixer(logger=logger)
        thread = make_thread(None, content="General remark")

        fixed = fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads == [thread]
        logger.error.assert_called_once()

    def test_empty_and_none_review(self):
        """Test None and empty reviews produce an empty review."""
        assert self.fixer.fix(None, SIMPLE_DIFF).threads == []
        assert self.fixer.fix(Review(), SIMPLE_DIFF).threads == []

    def test_raw_diff_text_is_parsed(self):
        """Test fix() accepts raw diff text with a file path for bare hunks."""
        thread = make_thread("a.ts", line=50, content="`line1`")

        fixed = self.fixer.fix(Review(threads=[thread]), SIMPLE_DIFF, file_path="/a.ts")

        assert fixed.threads[0].thread_context.right_file_start.line == 1

    def test_input_review_is_not_mutated(self):
        """Test the caller's review keeps its original anchors."""
        thread = make_thread("/a.ts", line=99, content="`line2`")
        review = Review(threads=[thread])

        self.fixer.fix(review, self.parsed)

        assert review.threads[0].thread_context.right_file_start.line == 99

    def test_normalized_whitespace_match(self):
        """Test quoted text matches lines that differ only in whitespace."""
        parsed = DiffParser().parse(
            "@@ -1,2 +1,3 @@\n a = 1\n+if  (x)   return y;\n b = 2\n",
            file_path="/c.js",
        )
        thread = make_thread("/c.js", line=40, content="`if (x) return y;` swallows errors")

        fixed = self.fixer.fix(Review(threads=[thread]), parsed)

        assert fixed.threads[0].thread_context.right_file_start.line == 2

    def test_exact_match_beats_normalized_match(self):
        """Test an exact match wins over a closer whitespace-normalized match."""
        parsed = DiffParser().parse(
            "@@ -1,1 +1,1 @@\n foo(a,  b)\n@@ -8,0 +8,1 @@\n+foo(a, b)\n",
            file_path="/d.py",
        )
        thread = make_thread("/d.py", line=2, content="`foo(a, b)` ignores the result")

        fixed = self.fixer.fix(Review(threads=[thread]), parsed)

        assert fixed.threads[0].thread_context.right_file_start.line == 8

    def test_duplicate_content_picks_line_nearest_anchor(self):
        """Test repeated line content resolves to the occurrence nearest the anchor."""
        parsed = DiffParser().parse(
            "@@ -1,0 +1,3 @@\n+return None\n+pass\n+return None\n@@ -50,0 +50,1 @@\n+return None\n",
            file_path="/e.py",
        )
        thread = make_thread("/e.py", line=40, content="`return None` hides the error")

        fixed = self.fixer.fix(Review(threads=[thread]), parsed)

        assert fixed.threads[0].thread_context.right_file_start.line == 50

    def test_left_side_anchor_moves_to_right_side(self):
        """Test a thread anchored on a deleted line is moved into new-file coordinates."""
        thread = make_thread("/a.ts", left_line=3, content="Why was line4 removed?")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        context = fixed.threads[0].thread_context
        assert context.left_file_start is None
        assert context.right_file_start.line == 3

    def test_file_level_thread_without_anchor_or_match(self):
        """Test a thread with no line anchor and no quoted line stays file-level."""
        thread = make_thread("/a.ts", content="Overall this file needs tests.")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads == [thread]

    def test_thread_without_anchor_but_quoted_line_gets_anchor(self):
        """Test a quoted line gives an unanchored thread a position."""
        thread = make_thread("/a.ts", content="`line3` duplicates line1")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads[0].thread_context.right_file_start.line == 3

    def test_dangling_end_position_is_collapsed(self):
        """Test an invalid end line on a valid start collapses onto the start line."""
        thread = make_thread("/a.ts", line=2, end_line=77, content="x")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        context = fixed.threads[0].thread_context
        assert context.right_file_start.line == 2
        assert context.right_file_end == FilePosition(line=2, offset=6)

    def test_valid_range_is_kept(self):
        """Test a valid start/end range is left alone."""
        thread = make_thread("/a.ts", line=1, end_line=3, content="x")

        fixed = self.fixer.fix(Review(threads=[thread]), self.parsed)

        assert fixed.threads == [thread]


class TestMatchingHelpers:
    """Unit tests for the line matching helpers."""

    def test_normalize_whitespace(self):
        """Test whitespace runs collapse and ends are stripped."""
        assert normalize_whitespace("  a\t\tb   c \n") == "a b c"
        assert normalize_whitespace("   ") == ""

    def test_extract_snippets_order(self):
        """Test fenced blocks come first, then inline code, then quotes."""
        text = 'Use "foo" instead of `bar()`:\n```python\nbaz = 1\nqux = 2\n```'

        assert extract_snippets(text) == ["baz = 1", "qux = 2", "bar()", "foo"]

    def test_extract_snippets_single_line_comment(self):
        """Test a single-line comment is itself a candidate."""
        assert extract_snippets("line2") == ["line2"]
        assert extract_snippets("") == []

    def test_nearest_line_ties_go_lower(self):
        """Test equidistant candidates resolve to the lower line."""
        assert nearest_line([2, 6], 4) == 2
        assert nearest_line([2, 6], 5) == 6
        assert nearest_line([2, 6], 1) == 2
        assert nearest_line([2, 6], 100) == 6
        assert nearest_line([2, 6], 6) == 6
        assert nearest_line([], 3) is None

    def test_blank_snippets_and_lines_never_match(self):
        """Test blank content is not used for matching."""
        parsed = DiffParser().parse("@@ -1,2 +1,2 @@\n \n a\n", file_path="/f.py")
        lines = parsed.files[0].target_lines()

        assert find_exact_match(["", " "], lines) is None
        assert find_normalized_match(["", " "], lines) is None
