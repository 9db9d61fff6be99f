"""
Abbreviation Table

Known abbreviations that end in a period without ending a sentence.
Entries are stored lowercase and without their trailing period.
"""

import re

ABBREVIATIONS = frozenset({
    # Honorifics
    "mr", "mrs", "ms", "dr", "prof", "sr", "jr",
    # Organizations
    "inc", "ltd", "corp", "co", "llc",
    # Months and days
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "oct", "nov", "dec",
    "mon", "tue", "wed", "thu", "fri", "sat", "sun",
    # Streets
    "st", "ave", "blvd", "rd", "ln",
    # Dotted acronyms (final period stripped)
    "u.s", "u.k", "u.n", "e.u",
    # Latin
    "vs", "etc", "i.e", "e.g", "cf",
    # References
    "no", "p", "pp", "vol", "ch", "sec",
})

_TRAILING_PUNCT = re.compile(r"[.!?]+$")


def is_abbreviation(token: str) -> bool:
    """Check a single token, ignoring case and trailing punctuation."""
    clean = _TRAILING_PUNCT.sub("", token)
    return bool(clean) and clean.lower() in ABBREVIATIONS


def ends_with_abbreviation(text: str) -> bool:
    """Check whether the last whitespace-delimited token is an abbreviation."""
    words = text.split()
    if not words:
        return False
    return is_abbreviation(words[-1])
