"""
Inspection Assistant

Main interface that runs the review of one file: prompt construction,
token budget check, model request, thread diagnostics and line anchor
correction.
"""

import logging
from typing import List, Optional

from .config import AppConfig
from .llm.client import ModelClient, ModelClientError
from .llm.prompts import PromptBuilder
from .models.diff import normalize_path
from .models.review import Review
from .review.fixer import CommentPositionFixer


class InspectionAssistant:
    """
    Per-file review flow.

    1. Build the system and user prompts
    2. Skip diffs that exceed the token budget
    3. Request a structured review from the model client
    4. Correct thread anchors against the same diff (optional)
    5. Drop low-confidence threads (optional)
    """

    def __init__(
        self,
        client: ModelClient,
        config: Optional[AppConfig] = None,
        fixer: Optional[CommentPositionFixer] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize inspection assistant.

        Args:
            client: Model client that returns structured reviews
            config: Optional configuration object
            fixer: Comment position fixer (created when omitted)
            prompt_builder: Prompt builder (created from the review config when omitted)
            logger: Logger for diagnostics (defaults to the module logger)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.client = client
        self.config = config or AppConfig()
        self.review_config = self.config.review
        self.max_tokens = self.config.model.max_tokens
        self.fixer = fixer or CommentPositionFixer(logger=self.logger)
        self.prompt_builder = prompt_builder or PromptBuilder.from_config(self.review_config)

    def review_file(
        self,
        diff: str,
        file_name: str,
        existing_comments: Optional[List[str]] = None,
        rules_context: str = "",
        pr_context: str = "",
        pull_request_description: str = "",
    ) -> Review:
        """
        Review the diff of a single file.

        Args:
            diff: Diff of the file
            file_name: Path of the file under review
            existing_comments: Comments already on the file
            rules_context: Project rules prepended to the prompt
            pr_context: Additional pull request context
            pull_request_description: Pull request description

        Returns:
            Review for the file; empty when the diff was skipped or the
            model gave no usable answer
        """
        file_name = normalize_path(file_name)

        prompt = self.prompt_builder.build_user_prompt(
            diff=diff,
            file_name=file_name,
            existing_comments=existing_comments,
            rules_context=rules_context,
            pr_context=pr_context,
            pull_request_description=pull_request_description,
        )

        if self.prompt_builder.exceeds_token_limit(prompt, self.max_tokens):
            self.logger.warning(f"Unable to process diff for file {file_name} as it exceeds token limits.")
            return Review.empty()

        self.logger.info(f"Diff:\n{diff}")
        self.logger.debug(f"System Message: \n{self.prompt_builder.system_message}\n\nPrompt:\n{prompt}")

        try:
            review = self.client.request_review(self.prompt_builder.system_message, prompt)
        except ModelClientError as e:
            self.logger.error(f"Review request failed for file {file_name}. Returning empty review: {e}")
            return Review.empty()

        if review is None:
            self.logger.error(f"No review returned for file {file_name}. Returning empty review")
            review = Review.empty()

        self._log_threads(review, file_name)

        if self.review_config.enable_comment_line_correction:
            review = self.fixer.fix(review, diff, file_path=file_name)

        if self.review_config.enable_confidence_mode:
            review = self._filter_by_confidence(review)

        return review

    def _log_threads(self, review: Review, file_name: str) -> None:
        """Log every thread and flag those without a target file."""
        self.logger.info(f"Processing review threads for file: {file_name}")
        for thread in review.threads:
            self.logger.info(f"Thread: {thread.model_dump_json(by_alias=True, exclude_none=True, indent=2)}")
            if thread.thread_context is None or not thread.thread_context.has_file_path:
                self.logger.error(f"Thread missing threadContext or filePath: {thread.model_dump_json(by_alias=True)}")

    def _filter_by_confidence(self, review: Review) -> Review:
        """Drop threads scored below the confidence threshold; unscored threads are kept."""
        threshold = self.review_config.confidence_threshold
        threads = [
            thread for thread in review.threads
            if thread.confidence_score is None or thread.confidence_score >= threshold
        ]
        if len(threads) != len(review.threads):
            self.logger.info(
                f"Dropped {len(review.threads) - len(threads)} threads below confidence {threshold}"
            )
        return Review(threads=threads)
