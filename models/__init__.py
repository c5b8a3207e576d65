"""Classification client for ocr-rename.

Asks a chat-completion API for a canonical 'YYYY-MM-DD - Sender - Title'
string derived from a document's text:
- OpenAIClassifier: one request per call, any OpenAI-compatible endpoint
- RetryingClassifier: exponential backoff around another classifier

Usage:
    from models import create_classifier

    classifier = create_classifier(settings)
    title = classifier.classify(text)
"""

import threading
from typing import Optional

from .base import (
    Classifier,
    ClassificationFailure,
    FALLBACK_TITLE,
    MAX_TEXT_CHARS,
)
from .openai import OpenAIClassifier, base_url_from_endpoint
from .retrying import RetryingClassifier


def create_classifier(settings, stop_event: Optional[threading.Event] = None) -> Classifier:
    """Create the retrying classifier configured by Settings.

    Args:
        settings: ocrrename.config.Settings
        stop_event: Interrupts retry waits when set

    Returns:
        RetryingClassifier wrapping an OpenAIClassifier
    """
    backend = OpenAIClassifier(settings.api_url, settings.api_key, settings.model)
    return RetryingClassifier(
        backend,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
        max_attempts=settings.retry_max_attempts,
        stop_event=stop_event,
    )


__all__ = [
    'Classifier',
    'ClassificationFailure',
    'FALLBACK_TITLE',
    'MAX_TEXT_CHARS',
    'OpenAIClassifier',
    'RetryingClassifier',
    'base_url_from_endpoint',
    'create_classifier',
]
