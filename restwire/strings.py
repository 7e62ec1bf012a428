"""String helpers for mapping between naming conventions.

Used when matching JSON/XML member names (``user_name``, ``UserName``,
``userName``) against one another.
"""

from __future__ import annotations

import re

_UPPER_CASE = re.compile(r"^[A-Z]+$")


def has_value(value: str | None) -> bool:
    return bool(value)


def remove_underscores(value: str) -> str:
    return value.replace("_", "")


def matches(value: str, pattern: str) -> bool:
    """True if the regex pattern matches anywhere in value."""
    return re.search(pattern, value) is not None


def is_upper_case(value: str) -> bool:
    """True for a non-empty run of ASCII capitals only."""
    return _UPPER_CASE.match(value) is not None


def make_initial_lower_case(word: str) -> str:
    return word[:1].lower() + word[1:]


def to_pascal_case(text: str, remove_underscores: bool = True) -> str:
    """Convert lower_case_and_underscored or ALLCAPS words to PascalCase.

    Args:
        text: Input; underscores and spaces separate words.
        remove_underscores: If False, words are re-joined with '_'.

    Examples:
        >>> to_pascal_case("user_name")
        'UserName'
        >>> to_pascal_case("HTTP_STATUS", remove_underscores=False)
        'Http_Status'
    """
    if not text:
        return text

    words = text.replace("_", " ").split(" ")
    join_string = "" if remove_underscores else "_"

    if len(words) > 1 or is_upper_case(words[0]):
        for i, word in enumerate(words):
            if not word:
                continue
            rest = word[1:]
            if is_upper_case(rest):
                rest = rest.lower()
            words[i] = word[0].upper() + rest
        return join_string.join(words)

    return words[0][:1].upper() + words[0][1:]


def to_camel_case(text: str) -> str:
    return make_initial_lower_case(to_pascal_case(text))


def add_underscores(pascal_cased_word: str) -> str:
    """Convert PascalCase/camelCase (and dashes or spaces) to snake_case.

    >>> add_underscores("HTTPStatusCode")
    'http_status_code'
    """
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", pascal_cased_word)
    result = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", result)
    result = re.sub(r"[-\s]", "_", result)
    return result.lower()
