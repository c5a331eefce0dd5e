"""Relevance-ranked full-text search over the active document collection."""

import logging

from ..domain import Document, MatchType, SearchResult
from ..domain.exceptions import InvalidSearchLimitError
from ..domain.utils import truncate
from ..ports.document_store_port import DocumentStorePort
from .tokenizer import calculate_match_score, extract_search_terms, find_best_snippet

logger = logging.getLogger(__name__)


class SearchService:
    """Scores active documents field by field and returns the best matches."""

    # Weights are part of the ranking contract: a title hit must outrank
    # repeated hits buried in the extracted text.
    FIELD_WEIGHTS = {
        MatchType.TITLE: 10,
        MatchType.TAGS: 8,
        MatchType.DESCRIPTION: 5,
        MatchType.CONTENT: 2,
    }

    def __init__(self, store: DocumentStorePort, snippet_max_length: int = 200) -> None:
        """Initialize the search service.

        Args:
            store: Document store to read active documents from.
            snippet_max_length: Maximum length of ``matched_text`` excerpts.
        """
        self.store = store
        self.snippet_max_length = snippet_max_length

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Return the ``limit`` most relevant active documents for ``query``.

        A blank query is not an error: the first ``limit`` active documents
        are returned in store order with a score of 0.

        Args:
            query: Free-text query (Latin, CJK or mixed).
            limit: Maximum number of results.

        Returns:
            Results sorted by descending relevance, ties in store order.

        Raises:
            InvalidSearchLimitError: If ``limit`` is negative.
            DocumentStoreError: If the store cannot be read.
        """
        if limit < 0:
            raise InvalidSearchLimitError(
                "Search limit must not be negative", context={"limit": limit}
            )

        documents = [doc for doc in self.store.list_active() if doc.is_active]

        if not query or not query.strip():
            return [
                SearchResult(document=doc, relevance_score=0.0, match_type=MatchType.CONTENT)
                for doc in documents[:limit]
            ]

        terms = extract_search_terms(query)
        logger.debug("Searching %d documents for terms: %s", len(documents), terms)

        results: list[SearchResult] = []
        for doc in documents:
            try:
                result = self.score_document(doc, terms)
            except (AttributeError, TypeError) as e:
                logger.warning("Skipping malformed document %r: %s", getattr(doc, "doc_id", "?"), e)
                continue
            if result is not None:
                results.append(result)

        # list.sort is stable, so equal scores keep store order
        results.sort(key=lambda r: r.relevance_score, reverse=True)

        logger.debug("Search for %r matched %d documents", query, len(results))
        return results[:limit]

    def score_document(self, doc: Document, terms: list[str]) -> SearchResult | None:
        """Score one document against pre-extracted terms.

        The relevance score aggregates all four weighted fields. The excerpt
        comes from the first matching field in priority order: title, tags,
        description, content.

        Returns:
            A SearchResult, or None if no field matched.
        """
        field_texts = {
            MatchType.TITLE: doc.title,
            MatchType.TAGS: doc.tags_text,
            MatchType.DESCRIPTION: doc.description,
            MatchType.CONTENT: doc.searchable_text,
        }

        total_score = 0.0
        match_type: MatchType | None = None
        matched_text = ""

        for field_type, text in field_texts.items():
            field_score = calculate_match_score(text, terms)
            if field_score <= 0:
                continue

            total_score += field_score * self.FIELD_WEIGHTS[field_type]

            if match_type is None:
                match_type = field_type
                if field_type is MatchType.CONTENT:
                    matched_text = find_best_snippet(text, terms, self.snippet_max_length)
                else:
                    matched_text = truncate(text, self.snippet_max_length)

        if total_score <= 0 or match_type is None:
            return None

        return SearchResult(
            document=doc,
            relevance_score=total_score,
            match_type=match_type,
            matched_text=matched_text,
        )
