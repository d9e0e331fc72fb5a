"""
Property-based tests for comment position correction.

After correction every anchored thread on a file in the diff points at a
line that exists in the new version of that file.
"""

import string

from hypothesis import given, strategies as st

from pr_inspection.diff.parser import DiffParser
from pr_inspection.models.review import Comment, FilePosition, Review, Thread, ThreadContext
from pr_inspection.review.fixer import CommentPositionFixer
from pr_inspection.review.matching import nearest_line


CONTENT = st.text(alphabet=string.ascii_letters + string.digits + " _=();", min_size=1, max_size=20)

HUNK_LINES = st.lists(
    st.tuples(st.sampled_from(['+', '-', ' ']), CONTENT),
    min_size=1,
    max_size=20,
)


@st.composite
def file_diffs(draw):
    """Diff text for /gen.py made of one or two hunks."""
    text = "--- a/gen.py\n+++ b/gen.py\n"
    start = draw(st.integers(min_value=1, max_value=200))
    for _ in range(draw(st.integers(min_value=1, max_value=2))):
        body = draw(HUNK_LINES)
        old_count = sum(1 for marker, _ in body if marker != '+')
        new_count = sum(1 for marker, _ in body if marker != '-')
        text += f"@@ -{start},{old_count} +{start},{new_count} @@\n"
        text += "".join(f"{marker}{content}\n" for marker, content in body)
        start += max(old_count, new_count) + draw(st.integers(min_value=1, max_value=50))
    return text


@st.composite
def reviews(draw, file_path="/gen.py"):
    """Reviews whose threads carry arbitrary right-side anchors."""
    threads = []
    for _ in range(draw(st.integers(min_value=1, max_value=6))):
        line = draw(st.integers(min_value=-5, max_value=500))
        content = draw(st.one_of(CONTENT, CONTENT.map(lambda text: f"`{text}`")))
        threads.append(Thread(
            comments=[Comment(content=content)],
            thread_context=ThreadContext(file_path=file_path, right_file_start=FilePosition(line=line)),
        ))
    return Review(threads=threads)


class TestCommentPositionFixingProperties:
    """Property tests for CommentPositionFixer."""

    @given(diff=file_diffs(), review=reviews())
    def test_corrected_anchors_are_target_lines(self, diff, review):
        """
        Property: Surviving anchors name added or unchanged lines.

        Given: A file diff and threads with arbitrary anchors
        When: The review is corrected
        Then: Every start and end line is a target line of the file
        """
        parsed = DiffParser().parse(diff)
        valid = set(parsed.get_file("/gen.py").target_line_numbers())

        fixed = CommentPositionFixer().fix(review, parsed)

        for thread in fixed.threads:
            context = thread.thread_context
            assert context.right_file_start.line in valid
            if context.right_file_end is not None:
                assert context.right_file_end.line in valid
                assert context.right_file_end.line >= context.right_file_start.line

    @given(diff=file_diffs(), review=reviews())
    def test_threads_survive_unless_file_has_no_target_lines(self, diff, review):
        """
        Property: Threads are only dropped for files without target lines.

        Given: A file diff and anchored threads on that file
        When: The review is corrected
        Then: All threads are kept if the file has a target line, none otherwise
        """
        parsed = DiffParser().parse(diff)
        has_targets = parsed.get_file("/gen.py").has_target_lines

        fixed = CommentPositionFixer().fix(review, parsed)

        assert len(fixed.threads) == (len(review.threads) if has_targets else 0)

    @given(diff=file_diffs(), review=reviews())
    def test_correction_is_idempotent(self, diff, review):
        """
        Property: Correcting a corrected review changes nothing.

        Given: A review corrected once
        When: It is corrected again against the same diff
        Then: The result is equal to the first correction
        """
        fixer = CommentPositionFixer()
        parsed = DiffParser().parse(diff)

        once = fixer.fix(review, parsed)
        twice = fixer.fix(once, parsed)

        assert twice == once

    @given(diff=file_diffs(), review=reviews(file_path="/elsewhere.py"))
    def test_threads_on_other_files_are_untouched(self, diff, review):
        """
        Property: Threads on files outside the diff pass through unchanged.

        Given: Threads on a file that is not in the diff
        When: The review is corrected
        Then: The review is returned as is
        """
        fixed = CommentPositionFixer().fix(review, DiffParser().parse(diff))

        assert fixed == review

    @given(
        numbers=st.lists(st.integers(min_value=1, max_value=1000), min_size=1, max_size=30, unique=True),
        anchor=st.integers(min_value=1, max_value=1200),
    )
    def test_nearest_line_is_closest_and_lowest(self, numbers, anchor):
        """
        Property: nearest_line picks the closest line, preferring the lower one.

        Given: Sorted valid line numbers and any anchor
        When: The nearest line is selected
        Then: No other line is closer, and equally close lines are higher
        """
        numbers = sorted(numbers)

        chosen = nearest_line(numbers, anchor)

        distance = abs(chosen - anchor)
        for number in numbers:
            assert abs(number - anchor) > distance or (abs(number - anchor) == distance and number >= chosen)
