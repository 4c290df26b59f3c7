"""Unit tests для TradeStatus state machine та status translation."""

import pytest

from swap_service.domain.swaps.value_objects import (
    UPSTREAM_STATUS_TABLE,
    TradeStatus,
    translate_upstream_status,
)
from swap_service.domain.swaps.value_objects.enums import ACTIVE_STATUSES, TERMINAL_STATUSES


class TestStateMachine:
    """Tests для ALLOWED_TRANSITIONS."""

    @pytest.mark.parametrize(
        "source,target",
        [
            (TradeStatus.CREATED, TradeStatus.WAITING_DEPOSIT),
            (TradeStatus.WAITING_DEPOSIT, TradeStatus.CONFIRMING),
            (TradeStatus.CONFIRMING, TradeStatus.EXCHANGING),
            (TradeStatus.EXCHANGING, TradeStatus.FINISHED),
            (TradeStatus.CREATED, TradeStatus.CONFIRMING),  # skipped WAITING_DEPOSIT
            (TradeStatus.CONFIRMING, TradeStatus.REFUNDED),
            (TradeStatus.EXCHANGING, TradeStatus.FAILED),
            (TradeStatus.WAITING_DEPOSIT, TradeStatus.EXPIRED),
        ],
    )
    def test_forward_moves_allowed(self, source, target):
        assert source.can_transition_to(target) is True

    @pytest.mark.parametrize(
        "source,target",
        [
            (TradeStatus.CONFIRMING, TradeStatus.WAITING_DEPOSIT),
            (TradeStatus.EXCHANGING, TradeStatus.CONFIRMING),
            (TradeStatus.WAITING_DEPOSIT, TradeStatus.CREATED),
            (TradeStatus.CONFIRMING, TradeStatus.EXPIRED),  # deposit already seen
        ],
    )
    def test_backward_moves_rejected(self, source, target):
        assert source.can_transition_to(target) is False

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_states_have_no_exits(self, terminal):
        for target in TradeStatus:
            assert terminal.can_transition_to(target) is False

    def test_same_status_is_not_a_transition(self):
        for status in TradeStatus:
            assert status.can_transition_to(status) is False

    def test_unknown_is_never_a_target(self):
        for status in TradeStatus:
            assert status.can_transition_to(TradeStatus.UNKNOWN) is False

    def test_active_statuses(self):
        assert ACTIVE_STATUSES == {
            TradeStatus.CREATED,
            TradeStatus.WAITING_DEPOSIT,
            TradeStatus.CONFIRMING,
            TradeStatus.EXCHANGING,
        }


class TestStatusTranslation:
    """Tests для upstream vocabulary → TradeStatus."""

    @pytest.mark.parametrize(
        "upstream,expected",
        [
            ("new", TradeStatus.CREATED),
            ("waiting", TradeStatus.WAITING_DEPOSIT),
            ("confirming", TradeStatus.CONFIRMING),
            ("sending", TradeStatus.EXCHANGING),
            ("exchanging", TradeStatus.EXCHANGING),
            ("finished", TradeStatus.FINISHED),
            ("failed", TradeStatus.FAILED),
            ("halted", TradeStatus.FAILED),
            ("refunded", TradeStatus.REFUNDED),
            ("expired", TradeStatus.EXPIRED),
        ],
    )
    def test_known_statuses(self, upstream, expected):
        assert translate_upstream_status(upstream) == expected

    def test_case_and_whitespace_insensitive(self):
        assert translate_upstream_status("  Finished ") == TradeStatus.FINISHED

    @pytest.mark.parametrize("upstream", ["paid_partially", "", None, "FINISHED_LATER"])
    def test_unrecognized_maps_to_unknown(self, upstream):
        assert translate_upstream_status(upstream) == TradeStatus.UNKNOWN

    def test_table_never_maps_to_unknown(self):
        assert TradeStatus.UNKNOWN not in UPSTREAM_STATUS_TABLE.values()
