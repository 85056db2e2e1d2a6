"""Tests for the account activity sync."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.exceptions import ExternalAPIError, NotFoundError
from app.models import SnapTradeActivity, SnapTradeAccount, Trade, User
from app.services.sync import activity_sync
from app.services.sync.activity_sync import sync_account_activities
from tests.factories import make_activity


def _sync(db_session, snaptrade, activities, **kwargs):
    snaptrade.respond(
        snaptrade.account_information.get_account_activities,
        {"data": activities, "pagination": {"offset": 0, "limit": 1000, "total": len(activities)}},
    )
    return sync_account_activities(
        db_session, snaptrade, "st-user", "st-secret", "acc-1", "user-1", **kwargs
    )


class TestScenarios:
    def test_fresh_sync(self, db_session, snaptrade, user):
        result = _sync(db_session, snaptrade, [make_activity("a1")])

        assert result.total_activities_fetched == 1
        assert result.new_activities_stored == 1
        assert result.new_trades_created == 1
        assert result.skipped_activities == 0
        assert result.account_id == "acc-1"
        assert result.sync_batch_id

        activity = db_session.query(SnapTradeActivity).one()
        assert activity.symbol_ticker == "AAPL"
        trade = db_session.query(Trade).one()
        assert trade.trade_type == "BUY"
        assert float(trade.quantity) == 10
        assert float(trade.total_value) == 1500

    def test_resync_does_not_duplicate_trades(self, db_session, snaptrade, user):
        first = _sync(db_session, snaptrade, [make_activity("a1")])
        second = _sync(db_session, snaptrade, [make_activity("a1")])

        assert second.new_activities_stored == 1
        assert second.new_trades_created == 0
        assert second.sync_batch_id != first.sync_batch_id
        assert db_session.query(SnapTradeActivity).count() == 1
        assert db_session.query(Trade).count() == 1
        assert db_session.query(SnapTradeActivity).one().sync_batch_id == second.sync_batch_id

    def test_non_trade_activity(self, db_session, snaptrade, user):
        raw = {"id": "a2", "type": "DIVIDEND", "amount": 12.50}

        result = _sync(db_session, snaptrade, [raw])

        assert result.new_activities_stored == 1
        assert result.new_trades_created == 0
        assert db_session.query(Trade).count() == 0


def test_privacy_defaults_copied(db_session, snaptrade, user):
    user.show_amounts = True
    user.visibility = "private"
    db_session.commit()

    _sync(db_session, snaptrade, [make_activity("a1")])

    trade = db_session.query(Trade).one()
    assert trade.show_amounts is True
    assert trade.show_quantity is False
    assert trade.visibility == "private"
    assert trade.is_public is False


def test_updates_user_last_sync(db_session, snaptrade, user):
    assert user.last_trade_sync_at is None

    _sync(db_session, snaptrade, [])

    assert db_session.get(User, "user-1").last_trade_sync_at is not None


def test_stamps_connection_of_known_account(db_session, snaptrade, user, connection):
    db_session.add(
        SnapTradeAccount(snaptrade_account_id="acc-1", snaptrade_connection_id="conn-1")
    )
    db_session.commit()

    _sync(db_session, snaptrade, [make_activity("a1")])

    assert connection.last_sync_at is not None


def test_activity_without_id_is_skipped(db_session, snaptrade, user):
    result = _sync(
        db_session, snaptrade, [make_activity("a1"), make_activity(None), make_activity("a3")]
    )

    assert result.total_activities_fetched == 3
    assert result.new_activities_stored == 2
    assert result.skipped_activities == 1
    assert db_session.query(SnapTradeActivity).count() == 2


def test_storable_records_are_not_skipped(db_session, snaptrade, user):
    activities = [
        make_activity("a1"),
        make_activity("a2", trade_date=None),
        make_activity("a3", symbol=None),
    ]

    result = _sync(db_session, snaptrade, activities)

    assert result.skipped_activities == 0
    assert result.new_activities_stored == 3
    assert result.new_trades_created == 2
    assert db_session.query(SnapTradeActivity).count() == 3
    traded = {t.description for t in db_session.query(Trade)}
    assert traded == {"BUY AAPL"}
    assert db_session.query(Trade).count() == 2


def test_sub_cent_prices_kept_exactly(db_session, snaptrade, user):
    _sync(
        db_session,
        snaptrade,
        [make_activity("a1", price="0.00001234", units="123.123456789", amount="0.0015")],
    )

    activity = db_session.query(SnapTradeActivity).one()
    assert activity.price == Decimal("0.00001234")
    assert activity.units == Decimal("123.123456789")
    assert activity.amount == Decimal("0.0015")
    trade = db_session.query(Trade).one()
    assert trade.price == Decimal("0.00001234")
    assert trade.quantity == Decimal("123.123456789")


def test_failure_before_commit_persists_nothing(db_session, snaptrade, user):
    with patch.object(
        activity_sync.user_service, "mark_trade_sync", side_effect=RuntimeError("disk full")
    ):
        with pytest.raises(RuntimeError):
            _sync(db_session, snaptrade, [make_activity("a1"), make_activity("a2")])
    db_session.rollback()

    assert db_session.query(SnapTradeActivity).count() == 0
    assert db_session.query(Trade).count() == 0

def test_failed_derivation_rolls_back_activity(db_session, snaptrade, user):
    real_derive = activity_sync.derive_trade_if_applicable

    def flaky_derive(db, stored, normalized, privacy):
        if normalized.activity_id == "a2":
            raise IntegrityError("INSERT INTO trades", {}, Exception("boom"))
        return real_derive(db, stored, normalized, privacy)

    activities = [make_activity("a1"), make_activity("a2"), make_activity("a3")]
    with patch.object(activity_sync, "derive_trade_if_applicable", side_effect=flaky_derive):
        result = _sync(db_session, snaptrade, activities)

    assert result.new_activities_stored == 2
    assert result.new_trades_created == 2
    assert result.skipped_activities == 1
    stored_ids = {a.snaptrade_activity_id for a in db_session.query(SnapTradeActivity)}
    assert stored_ids == {"a1", "a3"}


def test_rerun_recovers_skipped_activity(db_session, snaptrade, user):
    activities = [make_activity("a1"), make_activity("a2")]
    with patch.object(
        activity_sync,
        "derive_trade_if_applicable",
        side_effect=IntegrityError("INSERT INTO trades", {}, Exception("boom")),
    ):
        failed = _sync(db_session, snaptrade, activities)
    assert failed.skipped_activities == 2

    result = _sync(db_session, snaptrade, activities)

    assert result.skipped_activities == 0
    assert result.new_trades_created == 2
    assert db_session.query(Trade).count() == 2


def test_missing_user_is_fatal(db_session, snaptrade):
    with pytest.raises(NotFoundError):
        _sync(db_session, snaptrade, [make_activity("a1")])

    snaptrade.account_information.get_account_activities.assert_not_called()
    assert db_session.query(SnapTradeActivity).count() == 0


def test_fetch_failure_is_fatal(db_session, snaptrade, user):
    snaptrade.account_information.get_account_activities.side_effect = RuntimeError(
        "connection reset"
    )

    with pytest.raises(ExternalAPIError):
        sync_account_activities(
            db_session, snaptrade, "st-user", "st-secret", "acc-1", "user-1"
        )

    assert db_session.query(SnapTradeActivity).count() == 0
    assert db_session.get(User, "user-1").last_trade_sync_at is None
