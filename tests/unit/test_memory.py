"""Unit tests for ConversationMemory and EnhancedConversationMemory."""

import pytest

from docchat.core.domain import ConversationStyle, Role
from docchat.core.domain.exceptions import InvalidRoleError
from docchat.core.services.memory import (
    ConversationMemory,
    EnhancedConversationMemory,
    estimate_tokens,
)


class TestEstimateTokens:
    @pytest.mark.unit
    def test_four_characters_per_token_rounded_up(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2


class TestConversationMemory:
    """Tests for bounded history and context building."""

    @pytest.mark.unit
    def test_keeps_most_recent_turns_in_order(self):
        memory = ConversationMemory(max_turns=3)
        for i in range(5):
            memory.add_turn(Role.USER, f"message {i}")

        assert len(memory.history) == 3
        assert [t.content for t in memory.history] == ["message 2", "message 3", "message 4"]

    @pytest.mark.unit
    def test_role_strings_are_accepted(self):
        memory = ConversationMemory()
        turn = memory.add_turn("Assistant", "hello")

        assert turn.role is Role.ASSISTANT

    @pytest.mark.unit
    def test_unknown_role_rejected(self):
        with pytest.raises(InvalidRoleError):
            ConversationMemory().add_turn("system", "hello")

    @pytest.mark.unit
    def test_context_is_chronological_transcript(self):
        memory = ConversationMemory()
        memory.add_turn(Role.USER, "What is the leave policy?")
        memory.add_turn(Role.ASSISTANT, "Twenty days.")

        assert memory.get_context() == "User: What is the leave policy?\nAssistant: Twenty days.\n"

    @pytest.mark.unit
    def test_context_respects_token_budget(self):
        memory = ConversationMemory(max_turns=20, max_tokens=20)
        for i in range(10):
            memory.add_turn(Role.USER, f"question number {i} about policies")

        context = memory.get_context()

        assert estimate_tokens(context) <= 20
        assert context.endswith("question number 9 about policies\n")

    @pytest.mark.unit
    @pytest.mark.parametrize("max_tokens", [0, 1, -5])
    def test_tiny_budget_yields_empty_context(self, max_tokens):
        memory = ConversationMemory(max_tokens=max_tokens)
        memory.add_turn(Role.USER, "a fairly long question that cannot fit")

        assert memory.get_context() == ""

    @pytest.mark.unit
    def test_budget_does_not_evict_stored_turns(self):
        memory = ConversationMemory(max_turns=5, max_tokens=1)
        for i in range(4):
            memory.add_turn(Role.USER, f"turn {i}")

        memory.get_context()

        assert len(memory) == 4

    @pytest.mark.unit
    def test_recent_document_context_prefers_newest(self):
        memory = ConversationMemory()
        memory.add_turn(Role.USER, "q1", "old context")
        memory.add_turn(Role.ASSISTANT, "a1", "new context")
        memory.add_turn(Role.USER, "q2")

        assert memory.get_recent_document_context() == "new context"

    @pytest.mark.unit
    def test_recent_document_context_only_looks_back_three_turns(self):
        memory = ConversationMemory()
        memory.add_turn(Role.USER, "q1", "stale context")
        for i in range(3):
            memory.add_turn(Role.USER, f"q{i + 2}")

        assert memory.get_recent_document_context() == ""

    @pytest.mark.unit
    def test_summary_lists_user_topics(self):
        memory = ConversationMemory()
        memory.add_turn(Role.USER, "How does paid leave work")
        memory.add_turn(Role.ASSISTANT, "Ignored assistant words")
        memory.add_turn(Role.USER, "How are bonuses calculated")

        assert memory.get_summary() == "Topics discussed: How, does, paid, are, bonuses"

    @pytest.mark.unit
    def test_clear(self):
        memory = ConversationMemory()
        memory.add_turn(Role.USER, "hello")
        memory.clear()

        assert len(memory) == 0
        assert memory.get_context() == ""


class TestEnhancedConversationMemory:
    """Tests for summary context and style inference."""

    @pytest.mark.unit
    def test_short_conversation_uses_plain_context(self):
        memory = EnhancedConversationMemory(summary_threshold=6)
        memory.add_turn(Role.USER, "hello there")

        assert memory.get_summary_context() == memory.get_context()

    @pytest.mark.unit
    def test_long_conversation_prepends_summary(self):
        memory = EnhancedConversationMemory(summary_threshold=2, recent_turns=2)
        for i in range(4):
            memory.add_turn(Role.USER, f"Question about topic{i}")

        context = memory.get_summary_context()

        assert context.startswith("Topics discussed:")
        assert "topic3" in context
        assert "User: Question about topic1" not in context

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("message", "style"),
        [
            ("Could you please explain the policy? Thank you.", ConversationStyle.FORMAL),
            ("hey, gonna need the leave rules lol", ConversationStyle.CASUAL),
            ("leave rules", ConversationStyle.NEUTRAL),
            ("規定を教えてください。お願いします", ConversationStyle.FORMAL),
        ],
    )
    def test_infer_style(self, message, style):
        memory = EnhancedConversationMemory()
        memory.add_turn(Role.USER, message)

        assert memory.infer_style() is style

    @pytest.mark.unit
    def test_style_ignores_assistant_turns(self):
        memory = EnhancedConversationMemory()
        memory.add_turn(Role.ASSISTANT, "Could you please kindly confirm?")

        assert memory.infer_style() is ConversationStyle.NEUTRAL
