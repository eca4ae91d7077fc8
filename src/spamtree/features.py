"""
spamtree.features
=================

Column schema of the spambase data: 48 word frequencies, 6 character
frequencies and 3 capital-run statistics, followed by the 0/1 label column.

The display groups below only matter to front ends that let a user pick
features.  The tree builder itself works with any set of numeric columns.
"""

from __future__ import annotations

from .exceptions import ConfigurationError

LABEL_COLUMN = "true_spam_bool"

# display label -> column name, in dataset column order
WORD_FEATURES: dict[str, str] = {
    word: f"word_freq_{word}"
    for word in (
        "make", "address", "all", "3d", "our", "over", "remove", "internet",
        "order", "mail", "receive", "will", "people", "report", "addresses",
        "free", "business", "email", "you", "credit", "your", "font", "000",
        "money", "hp", "hpl", "george", "650", "lab", "labs", "telnet", "857",
        "data", "415", "85", "technology", "1999", "parts", "pm", "direct",
        "cs", "meeting", "original", "project", "re", "edu", "table",
        "conference",
    )
}

# "prenthesis" is the column's spelling in the published data files
CHAR_FEATURES: dict[str, str] = {
    ";": "char_freq_semicolon",
    "(": "char_freq_prenthesis",
    "[": "char_freq_bracket",
    "!": "char_freq_bang",
    "$": "char_freq_dollar",
    "#": "char_freq_hash",
}

CAPS_FEATURES: dict[str, str] = {
    "Average capital sequence length": "capital_run_length_average",
    "Longest capital sequence length": "capital_run_length_longest",
    "Total number of capital letters": "capital_run_length_total",
}

FEATURE_GROUPS: dict[str, dict[str, str]] = {
    "Word Frequencies": WORD_FEATURES,
    "Character Frequencies": CHAR_FEATURES,
    "Capital Statistics": CAPS_FEATURES,
}

FEATURE_NAMES: tuple[str, ...] = (
    *WORD_FEATURES.values(),
    *CHAR_FEATURES.values(),
    *CAPS_FEATURES.values(),
)

# A deliberately middling starting model.
DEFAULT_FEATURES: tuple[str, ...] = (
    "word_freq_your",
    "word_freq_george",
    "word_freq_edu",
    "char_freq_prenthesis",
    "capital_run_length_total",
)


def resolve_feature(name: str) -> str:
    """Map a display label (``"free"``, ``"$"``) or a column name to the column name."""
    if name in FEATURE_NAMES:
        return name
    for group in FEATURE_GROUPS.values():
        if name in group:
            return group[name]
    raise ConfigurationError(f"Unknown spambase feature: {name!r}")
