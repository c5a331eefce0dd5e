"""Mixed-script query tokenization and text scoring.

Latin text is split on whitespace. Japanese text has no word separators,
so any query containing Hiragana, Katakana or Kanji is additionally broken
into single characters and 2-4 character n-grams.

The scoring formula is a behavioural contract shared with the search
ranking tests: occurrences, plus a length bonus, plus a whole-word bonus
for non-CJK terms.
"""

import re

CJK_PATTERN = re.compile(r"[\u3040-\u309f\u30a0-\u30ff\u4e00-\u9faf]")

# Latin sentence ends need trailing whitespace so "3.5" or "e.g." stay intact.
SENTENCE_BOUNDARY = re.compile(r"[.!?]\s+|[。！？]\s*")

MIN_NGRAM = 2
MAX_NGRAM = 4
LENGTH_BONUS = 0.1
WORD_BOUNDARY_BONUS = 2


def contains_cjk(text: str) -> bool:
    """Return True if ``text`` contains any Hiragana, Katakana or Kanji."""
    return bool(CJK_PATTERN.search(text))


def extract_search_terms(query: str) -> list[str]:
    """Convert a free-text query into a deduplicated list of search terms.

    Args:
        query: Raw user query.

    Returns:
        Terms in first-seen order: whitespace-separated words longer than
        one character, then (for CJK queries) every CJK character and every
        2-4 character substring starting at a CJK character.
    """
    lowered = query.lower()
    terms = [term for term in lowered.split() if len(term) > 1]

    if contains_cjk(lowered):
        terms.extend(CJK_PATTERN.findall(lowered))

        for start in range(len(lowered) - 1):
            if not CJK_PATTERN.match(lowered[start]):
                continue
            for length in range(MIN_NGRAM, min(MAX_NGRAM, len(lowered) - start) + 1):
                terms.append(lowered[start : start + length])

    return [term for term in dict.fromkeys(terms) if term]


def count_occurrences(text_lower: str, term: str) -> int:
    """Count non-overlapping occurrences of ``term`` scanning left to right."""
    if not term:
        return 0
    return text_lower.count(term)


def count_word_matches(text_lower: str, term: str) -> int:
    """Count hits of ``term`` delimited by word boundaries on both sides.

    Boundaries are ASCII-only, so a Latin term glued to Japanese text
    ("pdfファイル") still counts as a whole word.
    """
    return len(re.findall(rf"\b{re.escape(term)}\b", text_lower, flags=re.ASCII))


def calculate_match_score(text: str, terms: list[str]) -> float:
    """Score a block of text against search terms.

    Each matching term adds its occurrence count and ``0.1 * len(term)``;
    non-CJK terms also add 2 per whole-word hit.

    Args:
        text: Text block to score. Empty text scores 0.
        terms: Terms produced by :func:`extract_search_terms`.

    Returns:
        Non-negative score; 0 when nothing matches.
    """
    if not text:
        return 0.0

    text_lower = text.lower()
    score = 0.0

    for term in terms:
        occurrences = count_occurrences(text_lower, term)
        if occurrences == 0:
            continue

        score += occurrences
        score += len(term) * LENGTH_BONUS

        if not contains_cjk(term):
            score += count_word_matches(text_lower, term) * WORD_BOUNDARY_BONUS

    return score


def split_sentences(text: str) -> list[str]:
    """Split text on Latin and full-width sentence terminators.

    Terminators are consumed; empty pieces are dropped.
    """
    return [sentence for sentence in SENTENCE_BOUNDARY.split(text) if sentence.strip()]


def find_best_snippet(text: str, terms: list[str], max_length: int = 200) -> str:
    """Find the sentence window that best matches the search terms.

    Every sentence is joined with its previous and next neighbour for
    context, truncated to ``max_length`` with an ellipsis, and scored.

    Args:
        text: Document text.
        terms: Search terms.
        max_length: Maximum snippet length before the ellipsis.

    Returns:
        The highest scoring window, or a prefix of ``text`` if no window
        matches.
    """
    sentences = split_sentences(text)
    best_snippet = ""
    best_score = 0.0

    for index, sentence in enumerate(sentences):
        window = [sentence]
        if index > 0:
            window.insert(0, sentences[index - 1])
        if index < len(sentences) - 1:
            window.append(sentences[index + 1])

        snippet = " ".join(window)
        if len(snippet) > max_length:
            snippet = snippet[:max_length] + "..."

        score = calculate_match_score(snippet, terms)
        if score > best_score:
            best_score = score
            best_snippet = snippet

    if best_snippet:
        return best_snippet
    return text[:max_length] + ("..." if len(text) > max_length else "")
