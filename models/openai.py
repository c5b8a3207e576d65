"""OpenAI-compatible classification backend.

Talks to any endpoint that speaks the chat-completions protocol (OpenAI,
OpenRouter, a local llama.cpp or vLLM server) through the OpenAI SDK.
"""

from typing import Any, Optional

import openai
from openai import OpenAI

from .base import Classifier, ClassificationFailure

CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


def base_url_from_endpoint(url: str) -> str:
    """Turn a full chat-completions URL into the SDK's base URL.

    https://api.example.com/v1/chat/completions -> https://api.example.com/v1
    A URL without the suffix is taken as a base URL already.
    """
    url = url.rstrip("/")
    if url.endswith(CHAT_COMPLETIONS_SUFFIX):
        url = url[:-len(CHAT_COMPLETIONS_SUFFIX)]
    return url


class OpenAIClassifier(Classifier):
    """Chat-completions classifier.

    The SDK's own retries are disabled; backoff is handled by
    RetryingClassifier so every wait is logged.
    """

    def __init__(self, api_url: str, api_key: str, model: str,
                 client: Optional[Any] = None) -> None:
        """
        Args:
            api_url: Endpoint URL (full chat-completions URL or base URL)
            api_key: Bearer credential
            model: Model identifier
            client: Preconfigured client object (tests pass a fake)
        """
        self.model = model
        self.client = client or OpenAI(
            base_url=base_url_from_endpoint(api_url),
            api_key=api_key,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return "openai"

    def classify(self, text: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(text),
            )
        except openai.APIStatusError as e:
            raise ClassificationFailure(
                f"AI API error: HTTP {e.status_code}", status_code=e.status_code
            ) from e
        except openai.APIError as e:
            raise ClassificationFailure(f"AI API error: {e}") from e
        except ValueError as e:
            # application/json content type with a body that is not JSON
            raise ClassificationFailure("AI API returned an unparsable body") from e

        try:
            choices = response.choices
        except AttributeError:
            raise ClassificationFailure("AI API returned an unparsable body")

        if not choices:
            # Well-formed answer without a title
            return self._clean_title(None)

        message = getattr(choices[0], "message", None)
        return self._clean_title(getattr(message, "content", None))
