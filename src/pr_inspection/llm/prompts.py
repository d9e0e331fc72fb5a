"""
Prompt Builder

Builds the system and user prompts sent to the language model for the
review of a single file diff.
"""

import json
import logging
from typing import List, Optional


logger = logging.getLogger(__name__)


CHARS_PER_TOKEN = 4  # Average characters per token

BASE_SYSTEM_MESSAGE = (
    "You are an expert software engineer performing a code review. "
    "Provide actionable, high-quality feedback on the code changes."
)


def estimate_tokens(text: str) -> int:
    """Rough token count of a message."""
    return (len(text) + CHARS_PER_TOKEN - 1) // CHARS_PER_TOKEN


class PromptBuilder:
    """
    Builds prompts for file review requests.

    The system prompt is fixed per builder and lists which kinds of
    feedback the model should give; the user prompt carries the diff
    and the pull request context as JSON.
    """

    def __init__(
        self,
        check_for_bugs: bool = True,
        check_for_performance: bool = True,
        check_for_best_practices: bool = True,
        modified_lines_only: bool = True,
        additional_prompts: Optional[List[str]] = None,
    ):
        """
        Initialize prompt builder.

        Args:
            check_for_bugs: Ask the model to highlight bugs
            check_for_performance: Ask for major performance problems
            check_for_best_practices: Ask for (or forbid) best-practice comments
            modified_lines_only: Restrict comments to new or modified lines
            additional_prompts: Extra instructions appended verbatim
        """
        details = []
        if check_for_bugs:
            details.append("Highlight any bugs.")
        if check_for_performance:
            details.append("Highlight major performance problems.")
        if check_for_best_practices:
            details.append("Provide details on missed use of best practices.")
        else:
            details.append("Do not provide comments on best practices.")
        if modified_lines_only:
            details.append("Only comment on new or modified lines.")
        details.extend(additional_prompts or [])

        self.system_message = BASE_SYSTEM_MESSAGE + (" " + " ".join(details) if details else "")
        logger.info(f"System prompt:\n{self.system_message}")

    @classmethod
    def from_config(cls, review_config) -> "PromptBuilder":
        """Create a builder from a ReviewConfig section."""
        return cls(
            check_for_bugs=review_config.check_for_bugs,
            check_for_performance=review_config.check_for_performance,
            check_for_best_practices=review_config.check_for_best_practices,
            modified_lines_only=review_config.modified_lines_only,
            additional_prompts=list(review_config.additional_prompts),
        )

    def build_user_prompt(
        self,
        diff: str,
        file_name: str,
        existing_comments: Optional[List[str]] = None,
        rules_context: str = "",
        pr_context: str = "",
        pull_request_description: str = "",
    ) -> str:
        """
        Build the user prompt for one file.

        Args:
            diff: Diff of the file under review
            file_name: Normalized path of the file
            existing_comments: Comments already present on the file
            rules_context: Project rules, prepended to the prompt when given
            pr_context: Additional pull request context
            pull_request_description: Pull request description

        Returns:
            Prompt text
        """
        user_prompt = {
            "fileName": file_name,
            "diff": diff,
            "existingComments": existing_comments or [],
            "pullRequestDescription": pull_request_description,
            "prContext": pr_context,
        }
        prompt = json.dumps(user_prompt, indent=4)

        if rules_context:
            prompt = rules_context + "\n\n" + prompt
        return prompt

    def exceeds_token_limit(self, prompt: str, token_limit: int) -> bool:
        """Check whether system message plus prompt exceed the token limit."""
        tokens = estimate_tokens(self.system_message + prompt)
        logger.info(f"Token count: {tokens}")
        return tokens > token_limit
