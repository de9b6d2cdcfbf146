"""Job-description keyword extraction for the keywords component."""

from __future__ import annotations

import re
from collections import Counter

STOPWORDS = frozenset(
    """
    a about above after again against all also am an and any are as at be because been
    before being below between both but by can could did do does doing down during each
    etc few for from further had has have having he her here hers him his how i if in
    into is it its itself just me more most my no nor not now of off on once only or
    other our ours out over own same she should so some such than that the their them
    then there these they this those through to too under until up very was we were
    what when where which while who whom why will with would you your yours
    able ability across based being best candidate candidates company day days highly
    including join looking make must new one part plus position preferred required
    requirements responsibilities role skills strong team teams well work working
    year years experience job opportunity apply us within like help using use ensure
    """.split()
)

_WORD = re.compile(r"[a-z][a-z+#]{2,}")


def top_keywords(description: str, top_n: int = 20) -> list[str]:
    """Most frequent non-stopword terms of three or more letters.

    Ties break alphabetically so the result is deterministic.
    """
    counts = Counter(w for w in _WORD.findall(description.lower()) if w not in STOPWORDS)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [word for word, _ in ranked[:top_n]]


def keyword_hits(keywords: list[str], text: str) -> list[str]:
    """Keywords that occur in ``text`` as whole words, in input order."""
    lowered = text.lower()
    return [
        kw for kw in keywords
        if re.search(rf"(?<![a-z]){re.escape(kw)}(?![a-z])", lowered)
    ]
