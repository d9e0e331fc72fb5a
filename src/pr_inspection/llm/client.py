"""
Model Client

Sends review requests to an OpenAI-compatible chat completions API and
turns the forced tool call into a Review.
"""

import json
import logging
from typing import Dict, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models.review import Review
from .schema import REVIEW_FUNCTION_NAME, REVIEW_TOOL, REVIEW_TOOL_CHOICE


logger = logging.getLogger(__name__)


class ModelClientError(Exception):
    """Model API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class ModelClient(Protocol):
    """Anything that can turn a system and user prompt into a Review."""

    def request_review(self, system_prompt: str, user_prompt: str) -> Review:
        ...


class ChatCompletionsClient:
    """
    Chat completions client for OpenAI and Azure OpenAI.

    Forces the returnReview tool so the answer arrives as structured
    arguments instead of free text.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        azure_api_version: Optional[str] = None,
        timeout_seconds: int = 60,
    ):
        """
        Initialize chat completions client.

        Args:
            api_key: API key for the provider
            model: Model name (deployment name for Azure)
            base_url: API base URL (resource endpoint for Azure)
            azure_api_version: Azure API version; enables Azure routing and auth
            timeout_seconds: Request timeout
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.azure_api_version = azure_api_version
        self.timeout_seconds = timeout_seconds
        self.session = self._create_session()

    @classmethod
    def from_config(cls, model_config) -> "ChatCompletionsClient":
        """Create a client from a ModelConfig section."""
        return cls(
            api_key=model_config.api_key,
            model=model_config.ai_model,
            base_url=model_config.api_base_url,
            azure_api_version=model_config.azure_api_version,
            timeout_seconds=model_config.timeout_seconds,
        )

    @property
    def is_azure(self) -> bool:
        return self.azure_api_version is not None

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        if self.is_azure:
            session.headers.update({'api-key': self.api_key})
        else:
            session.headers.update({'Authorization': f'Bearer {self.api_key}'})
        session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': 'PR-Inspection-Assistant/1.0',
        })

        return session

    def _completions_url(self) -> str:
        if self.is_azure:
            return (
                f"{self.base_url}/openai/deployments/{self.model}/chat/completions"
                f"?api-version={self.azure_api_version}"
            )
        return f"{self.base_url}/chat/completions"

    def request_review(self, system_prompt: str, user_prompt: str) -> Review:
        """
        Request a structured review.

        Args:
            system_prompt: System message
            user_prompt: User message with the diff

        Returns:
            Review parsed from the tool call, or an empty Review when the
            response carries no usable tool call

        Raises:
            ModelClientError: For transport errors and non-2xx responses
        """
        logger.debug(f"Using model: {self.model}")
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "tools": [REVIEW_TOOL],
            "tool_choice": REVIEW_TOOL_CHOICE,
        }

        try:
            response = self.session.post(self._completions_url(), json=payload, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise ModelClientError(f"Model request failed: {e}") from e

        if not response.ok:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            error = error_data.get('error') if isinstance(error_data, dict) else None
            message = error.get('message', 'Unknown error') if isinstance(error, dict) else 'Unknown error'
            raise ModelClientError(
                f"Model API error: {response.status_code} - {message}",
                status_code=response.status_code,
                response_data=error_data,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ModelClientError(f"Model API returned invalid JSON: {e}", status_code=response.status_code) from e

        return self._review_from_response(body)

    def _review_from_response(self, body: Dict) -> Review:
        """Extract the returnReview tool call arguments from a completion."""
        choices = body.get('choices') or []
        if not choices:
            logger.error("No choices in model response. Returning empty review")
            return Review.empty()

        choice = choices[0]
        message = choice.get('message') or {}
        tool_calls = message.get('tool_calls') or []

        if choice.get('finish_reason') in ('tool_calls', 'stop') and tool_calls:
            for tool_call in tool_calls:
                function = tool_call.get('function') or {}
                if tool_call.get('type') == 'function' and function.get('name') == REVIEW_FUNCTION_NAME:
                    arguments = function.get('arguments')
                    logger.info(f"Comments (function call):\n{arguments}")
                    try:
                        data = json.loads(arguments) if isinstance(arguments, str) else arguments
                    except ValueError as e:
                        logger.error(f"Failed to parse function call response. Returning empty review: {e}")
                        return Review.empty()
                    return Review.from_model_output(data)

        logger.error("No valid function call found in response. Returning empty review")
        return Review.empty()
