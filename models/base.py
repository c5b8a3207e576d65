"""Base classes for the classification client.

This module defines the interface every classification backend implements and
the prompt that asks for a canonical document title.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class ClassificationFailure(Exception):
    """The classification API returned an error status or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# Characters of extracted text sent with a request
MAX_TEXT_CHARS = 2000

# Returned when the API answers but the message content is empty
FALLBACK_TITLE = "Untitled"


SYSTEM_PROMPT = "You are a helpful assistant."


# Title extraction prompt, the OCR text is appended after the blank line
TITLE_PROMPT = """From the following OCR text, extract the sender or organization name and the document date.
Return ONLY a string in the format: YYYY-MM-DD - <Sender/Organization name> - <Sensible Title>.
Example: 2020-01-15 - Agentur für Arbeit - Arbeitsuchendmeldung

Some specific guidelines:
- If the day is unknown, use 00 for it (2021-03-00). If the month is unknown too, use 2021-00-00. If no date can be found at all, use 0000-00-00.
- The title is a short, sensible description of the document, not more than 6 words, in the language of the document.
- Umlauts like äöüß are safe, keep them.
- OCR often reads ß as B and drops umlaut dots. Correct such misspellings in the sender and title (e.g. StraBe -> Straße, Gebuhren -> Gebühren).
- Do not add any other words or punctuation.

"""


class Classifier(ABC):
    """Abstract base class for classification backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'openai')."""
        pass

    @abstractmethod
    def classify(self, text: str) -> str:
        """Derive a canonical 'YYYY-MM-DD - Sender - Title' string from text.

        Makes exactly one request. Retrying is the caller's business.

        Args:
            text: Plain text extracted from the document

        Returns:
            The trimmed title, or FALLBACK_TITLE if the answer was empty

        Raises:
            ClassificationFailure: On a non-success status or unusable body
        """
        pass

    # =========================================================================
    # Helper methods (shared by all implementations)
    # =========================================================================

    def _truncate(self, text: str) -> str:
        return text[:MAX_TEXT_CHARS]

    def _build_messages(self, text: str) -> List[Dict[str, str]]:
        """Build the chat messages for a title request."""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": TITLE_PROMPT + self._truncate(text)},
        ]

    def _clean_title(self, content: Optional[str]) -> str:
        title = (content or "").strip()
        return title or FALLBACK_TITLE
