"""Unit tests for SearchService ranking."""

from unittest.mock import MagicMock

import pytest

from docchat.core.domain import MatchType
from docchat.core.domain.document import is_extraction_placeholder
from docchat.core.domain.exceptions import DocumentStoreCorruptedError, InvalidSearchLimitError
from docchat.core.services.search_service import SearchService
from tests.conftest import InMemoryDocumentStore, make_document


def _service(*documents, snippet_max_length=200):
    return SearchService(InMemoryDocumentStore(documents), snippet_max_length=snippet_max_length)


class TestRanking:
    """Tests for weighted-field scoring and ordering."""

    @pytest.mark.unit
    def test_title_hit_outranks_repeated_content_hits(self):
        """A title match (weight 10) beats two content matches (weight 2)."""
        doc_a = make_document("a", title="会社規定", text="")
        doc_b = make_document("b", title="無関係", text="会社 会社")

        results = _service(doc_b, doc_a).search("会社")

        assert [r.document.doc_id for r in results] == ["a", "b"]
        assert results[0].relevance_score > results[1].relevance_score
        assert results[0].match_type is MatchType.TITLE
        assert results[1].match_type is MatchType.CONTENT

    @pytest.mark.unit
    def test_results_sorted_descending(self, memory_store):
        results = SearchService(memory_store).search("leave evaluation hr")

        scores = [r.relevance_score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert len(results) == 2

    @pytest.mark.unit
    def test_ties_keep_store_order(self):
        docs = [make_document(f"d{i}", text="policy text") for i in range(4)]

        results = _service(*docs).search("policy")

        assert [r.document.doc_id for r in results] == ["d0", "d1", "d2", "d3"]

    @pytest.mark.unit
    def test_limit_applied_after_sorting(self):
        weak = make_document("weak", text="bonus")
        strong = make_document("strong", title="Bonus", text="bonus bonus")

        results = _service(weak, strong).search("bonus", limit=1)

        assert [r.document.doc_id for r in results] == ["strong"]

    @pytest.mark.unit
    def test_zero_score_documents_excluded(self):
        results = _service(make_document("x", title="Holidays", text="Calendar")).search("bonus")

        assert results == []

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "placeholder",
        [
            "Text extraction not available for this file type",
            "[Text extraction failed]",
            "PDF content extraction requires pdf-parse library",
        ],
    )
    def test_placeholder_text_contributes_nothing(self, placeholder):
        doc = make_document("p", title="Scan", text=placeholder)

        assert _service(doc).search("text extraction") == []
        assert _service(doc).search("pdf library file type") == []

    @pytest.mark.unit
    def test_placeholder_does_not_hide_other_fields(self):
        doc = make_document(
            "p",
            title="Extraction guide",
            text="Text extraction not available for this file type",
        )

        result = _service(doc).search("extraction")[0]

        assert result.match_type is MatchType.TITLE
        # Title only: 1 occurrence + 1.0 length bonus + 2 word bonus, weight 10
        assert result.relevance_score == pytest.approx(40.0)

    @pytest.mark.unit
    def test_real_text_about_extraction_still_matches(self):
        doc = make_document("r", title="Guide", text="Our text extraction pipeline handles PDFs.")

        result = _service(doc).search("text extraction")[0]

        assert result.match_type is MatchType.CONTENT


class TestExtractionPlaceholders:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "text",
        [
            "Text extraction not available for this file type",
            "  [Text extraction failed]  ",
            "PDF text extraction is being processed. Check back later.",
            "Content extraction not supported for this file type",
        ],
    )
    def test_markers_detected(self, text):
        assert is_extraction_placeholder(text)
        assert make_document("d", text=text).searchable_text == ""

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["", "Our text extraction pipeline handles PDFs.", "[Draft]"])
    def test_real_text_kept(self, text):
        assert not is_extraction_placeholder(text)
        assert make_document("d", text=text).searchable_text == text


class TestMatchType:
    """Tests for match type and excerpt selection."""

    @pytest.mark.unit
    def test_title_excerpt_is_title(self):
        doc = make_document("t", title="Bonus Policy", text="The bonus is paid yearly.")

        result = _service(doc).search("bonus")[0]

        assert result.match_type is MatchType.TITLE
        assert result.matched_text == "Bonus Policy"

    @pytest.mark.unit
    def test_tags_take_priority_over_description(self):
        doc = make_document("t", title="Handbook", description="bonus rules", tags=["bonus", "pay"])

        result = _service(doc).search("bonus")[0]

        assert result.match_type is MatchType.TAGS
        assert result.matched_text == "bonus pay"

    @pytest.mark.unit
    def test_description_match(self):
        doc = make_document("t", title="Handbook", description="Explains the bonus")

        result = _service(doc).search("bonus")[0]

        assert result.match_type is MatchType.DESCRIPTION
        assert result.matched_text == "Explains the bonus"

    @pytest.mark.unit
    def test_content_match_uses_best_snippet(self):
        doc = make_document(
            "t", title="Handbook", text="Welcome aboard. The bonus is paid in June. See HR."
        )

        result = _service(doc).search("bonus")[0]

        assert result.match_type is MatchType.CONTENT
        assert "bonus is paid in June" in result.matched_text

    @pytest.mark.unit
    def test_score_aggregates_all_fields(self):
        title_only = make_document("a", title="Bonus")
        everywhere = make_document(
            "b", title="Bonus", description="bonus", tags=["bonus"], text="bonus"
        )

        results = _service(title_only, everywhere).search("bonus")

        assert results[0].document.doc_id == "b"


class TestDegenerateInput:
    """Tests for blank queries, inactive documents and malformed records."""

    @pytest.mark.unit
    def test_blank_query_returns_limit_documents_with_zero_score(self):
        docs = [make_document(f"d{i}", title=f"Doc {i}") for i in range(5)]

        results = _service(*docs).search("", limit=2)

        assert [r.document.doc_id for r in results] == ["d0", "d1"]
        assert all(r.relevance_score == 0 for r in results)
        assert all(r.match_type is MatchType.CONTENT for r in results)

    @pytest.mark.unit
    def test_whitespace_query_is_blank(self):
        docs = [make_document(f"d{i}") for i in range(3)]

        assert len(_service(*docs).search("   ", limit=10)) == 3

    @pytest.mark.unit
    def test_inactive_documents_never_returned(self):
        docs = [make_document(f"a{i}", text="policy") for i in range(3)]
        docs += [make_document(f"i{i}", text="policy", active=False) for i in range(2)]

        results = _service(*docs).search("policy")

        ids = {r.document.doc_id for r in results}
        assert len(results) <= 3
        assert not ids & {"i0", "i1"}

    @pytest.mark.unit
    def test_inactive_documents_filtered_even_if_store_returns_them(self):
        store = MagicMock()
        store.list_active.return_value = [
            make_document("live", text="policy"),
            make_document("gone", text="policy", active=False),
        ]

        results = SearchService(store).search("policy")

        assert [r.document.doc_id for r in results] == ["live"]

    @pytest.mark.unit
    def test_malformed_document_skipped(self):
        broken = make_document("broken", text="policy")
        broken.tags = None
        store = MagicMock()
        store.list_active.return_value = [broken, make_document("ok", text="policy")]

        results = SearchService(store).search("policy")

        assert [r.document.doc_id for r in results] == ["ok"]

    @pytest.mark.unit
    def test_negative_limit_rejected(self, memory_store):
        with pytest.raises(InvalidSearchLimitError):
            SearchService(memory_store).search("leave", limit=-1)

    @pytest.mark.unit
    def test_store_corruption_propagates(self):
        store = MagicMock()
        store.list_active.side_effect = DocumentStoreCorruptedError("bad json")

        with pytest.raises(DocumentStoreCorruptedError):
            SearchService(store).search("policy")
