"""Output filename generation."""

import unicodedata

from storage import LocalDriver, Stage

from .title_ledger import TitleLedger

# Used when a title sanitizes to nothing
DEFAULT_BASE_NAME = "Untitled"

# UTF-8 bytes kept of a title; leaves room for "_N" and ".pdf" under the
# common 255-byte filename limit
MAX_BASE_NAME_BYTES = 200

_ALLOWED_PUNCTUATION = " _-"


def _is_allowed(ch: str) -> bool:
    # Letters and digits of any script (Unicode categories L* and N*)
    return ch in _ALLOWED_PUNCTUATION or unicodedata.category(ch)[0] in "LN"


def _limit_length(name: str) -> str:
    """Cut name to MAX_BASE_NAME_BYTES without splitting a character."""
    encoded = name.encode("utf-8")
    if len(encoded) <= MAX_BASE_NAME_BYTES:
        return name
    return encoded[:MAX_BASE_NAME_BYTES].decode("utf-8", errors="ignore")


def sanitize_filename(name: str) -> str:
    """Replace every character except letters, digits, space, '_' and '-' with '_'.

    Total and idempotent: sanitize_filename(sanitize_filename(x)) equals
    sanitize_filename(x).
    """
    return "".join(ch if _is_allowed(ch) else "_" for ch in name)


def unique_base_name(title: str, ledger: TitleLedger, driver: LocalDriver,
                     ext: str = ".pdf") -> str:
    """Pick a base name for title that no delivered document uses yet.

    Candidates are tried in order: "Title", "Title_1", "Title_2", ... A
    candidate is taken if it is neither in the ledger nor an existing file in
    the output directory. The chosen name is appended to the ledger before it
    is returned, so it is recorded before any file carries it. Over-long titles
    are cut to MAX_BASE_NAME_BYTES of UTF-8.

    Returns:
        The base name without extension
    """
    base = _limit_length(sanitize_filename(title)).strip() or DEFAULT_BASE_NAME

    candidate = base
    counter = 0
    while ledger.exists(candidate) or driver.file_exists(Stage.OUT, candidate + ext):
        counter += 1
        candidate = f"{base}_{counter}"

    ledger.append(candidate)
    return candidate
