"""Tests for the /snaptrade endpoints."""

from app.exceptions import ExternalAPIError
from app.models import SnapTradeAccount, SnapTradeConnection, Trade, User
from tests.factories import make_account, make_activity


def _credentials(**extra):
    return {"userId": "st-user", "userSecret": "st-secret", **extra}


class TestSyncAccountActivities:
    def test_sync_returns_summary(self, client, snaptrade, user):
        snaptrade.respond(
            snaptrade.account_information.get_account_activities,
            {"data": [make_activity("a1"), {"id": "a2", "type": "DIVIDEND", "amount": 12.5}]},
        )

        response = client.post(
            "/snaptrade/sync-account-activities",
            json=_credentials(accountId="acc-1", appUserId=user.id),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["totalActivitiesFetched"] == 2
        assert data["newActivitiesStored"] == 2
        assert data["newTradesCreated"] == 1
        assert data["skippedActivities"] == 0
        assert data["accountId"] == "acc-1"
        assert data["fullSync"] is False
        assert data["syncBatchId"]

    def test_missing_fields_rejected(self, client):
        response = client.post(
            "/snaptrade/sync-account-activities", json={"userId": "st-user"}
        )
        assert response.status_code == 422

    def test_unknown_user_is_404(self, client, snaptrade):
        response = client.post(
            "/snaptrade/sync-account-activities",
            json=_credentials(accountId="acc-1", appUserId="nobody"),
        )

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_aggregator_failure_is_502(self, client, snaptrade, user):
        snaptrade.account_information.get_account_activities.side_effect = RuntimeError(
            "down"
        )

        response = client.post(
            "/snaptrade/sync-account-activities",
            json=_credentials(accountId="acc-1", appUserId=user.id),
        )

        assert response.status_code == 502
        assert "SnapTrade" in response.json()["error"]


def test_save_connection(client, db_session, user):
    response = client.post(
        "/snaptrade/save-connection",
        json={
            "userId": user.id,
            "authorizationId": "conn-1",
            "brokerageName": "Fidelity",
            "connectionData": {"id": "conn-1", "type": "read"},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"]["snaptrade_connection_id"] == "conn-1"
    assert data["data"]["brokerage_name"] == "Fidelity"
    assert db_session.query(SnapTradeConnection).count() == 1


def test_save_accounts_reports_each_account(client, db_session, connection):
    response = client.post(
        "/snaptrade/save-accounts",
        json={"connectionId": "conn-1", "accounts": [make_account("acc-1"), {"name": "x"}]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == {"total": 2, "success": 1, "errors": 1}
    assert data["results"][0] == {"accountId": "acc-1", "success": True, "error": None}
    assert data["results"][1]["success"] is False
    assert db_session.query(SnapTradeAccount).count() == 1


def test_save_accounts_unknown_connection(client):
    response = client.post(
        "/snaptrade/save-accounts", json={"connectionId": "missing", "accounts": []}
    )
    assert response.status_code == 404


def test_account_details_saves_when_app_user_given(client, snaptrade, db_session, user):
    snaptrade.respond(
        snaptrade.account_information.get_user_account_details, make_account("acc-1")
    )

    response = client.post(
        "/snaptrade/account-details",
        json=_credentials(accountId="acc-1", appUserId=user.id),
    )

    assert response.status_code == 200
    assert response.json()["id"] == "acc-1"
    account = db_session.query(SnapTradeAccount).one()
    assert account.user_id == user.id
    assert account.snaptrade_user_id == "st-user"


def test_account_details_without_app_user_is_read_only(client, snaptrade, db_session):
    snaptrade.respond(
        snaptrade.account_information.get_user_account_details, make_account("acc-1")
    )

    response = client.post("/snaptrade/account-details", json=_credentials(accountId="acc-1"))

    assert response.status_code == 200
    assert db_session.query(SnapTradeAccount).count() == 0


def test_accounts(client, snaptrade):
    snaptrade.respond(
        snaptrade.account_information.list_user_accounts, [make_account("acc-1")]
    )

    response = client.post("/snaptrade/accounts", json=_credentials())

    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == ["acc-1"]


def test_positions(client, snaptrade):
    snaptrade.respond(
        snaptrade.account_information.get_user_account_positions,
        [{"symbol": {"symbol": {"symbol": "AAPL"}}, "units": 10}],
    )
    snaptrade.respond(snaptrade.options.list_option_holdings, [])

    positions = client.post("/snaptrade/account-positions", json=_credentials(accountId="acc-1"))
    options = client.post("/snaptrade/option-positions", json=_credentials(accountId="acc-1"))

    assert positions.json()[0]["units"] == 10
    assert options.json() == []


def test_connection_portal(client, snaptrade):
    snaptrade.respond(
        snaptrade.authentication.login_snap_trade_user, {"redirectURI": "https://portal"}
    )

    response = client.post(
        "/snaptrade/connection-portal",
        json=_credentials(broker="SCHWAB", immediateRedirect=True),
    )

    assert response.status_code == 200
    assert response.json() == {"redirectURI": "https://portal"}
    kwargs = snaptrade.authentication.login_snap_trade_user.call_args.kwargs
    assert kwargs["broker"] == "SCHWAB"
    assert kwargs["immediate_redirect"] is True


def test_register_user(client, snaptrade):
    snaptrade.respond(
        snaptrade.authentication.register_snap_trade_user,
        {"userId": "st-user", "userSecret": "secret"},
    )

    response = client.post("/snaptrade/register-user", json={"userId": "st-user"})

    assert response.json() == {"userId": "st-user", "userSecret": "secret"}


class TestDeleteUser:
    def test_deletes_snaptrade_and_database(self, client, snaptrade, db_session, user):
        user.snaptrade_user_id = "st-user"
        user.snaptrade_user_secret = "secret"
        db_session.commit()
        snaptrade.respond(
            snaptrade.authentication.delete_snap_trade_user, {"status": "deleted"}
        )

        response = client.post(
            "/snaptrade/delete-user",
            json={"userId": "st-user", "appUserId": user.id, "deleteFromDatabase": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["snapTrade"] == {"success": True, "data": {"status": "deleted"}}
        assert data["database"]["success"] is True
        assert data["overall"]["warnings"] == []
        assert db_session.get(User, user.id).snaptrade_user_id is None

    def test_snaptrade_failure_without_force(self, client, snaptrade):
        snaptrade.authentication.delete_snap_trade_user.side_effect = RuntimeError("nope")

        response = client.post("/snaptrade/delete-user", json={"userId": "st-user"})

        assert response.status_code == 502

    def test_forced_delete_reports_warning(self, client, snaptrade, user):
        snaptrade.authentication.delete_snap_trade_user.side_effect = RuntimeError("nope")

        response = client.post(
            "/snaptrade/delete-user",
            json={
                "userId": "st-user",
                "appUserId": user.id,
                "deleteFromDatabase": True,
                "forceDelete": True,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["snapTrade"]["success"] is False
        assert data["database"]["success"] is True
        assert len(data["overall"]["warnings"]) == 1

    def test_nothing_done_is_500(self, client):
        response = client.post("/snaptrade/delete-user", json={})

        assert response.status_code == 500
        assert response.json()["error"] == "All cleanup operations failed"


def test_list_and_delete_connection(client, snaptrade):
    snaptrade.respond(
        snaptrade.connections.list_brokerage_authorizations, [{"id": "conn-1"}]
    )
    snaptrade.respond(snaptrade.connections.remove_brokerage_authorization, None)

    listed = client.post("/snaptrade/list-connections", json=_credentials())
    deleted = client.request(
        "DELETE",
        "/snaptrade/delete-connection",
        json=_credentials(authorizationId="conn-1"),
    )

    assert listed.json() == [{"id": "conn-1"}]
    assert deleted.status_code == 200
    assert deleted.json()["authorizationId"] == "conn-1"
    snaptrade.connections.remove_brokerage_authorization.assert_called_once_with(
        authorization_id="conn-1", user_id="st-user", user_secret="st-secret"
    )


def test_status_and_list_users(client, snaptrade):
    snaptrade.respond(snaptrade.api_status.check, {"online": True, "version": 151})
    snaptrade.respond(snaptrade.authentication.list_snap_trade_users, ["u1", "u2"])

    assert client.get("/snaptrade/status").json() == {"online": True, "version": 151}
    assert client.get("/snaptrade/list-users").json() == ["u1", "u2"]


def test_assign_to_user(client, db_session, user):
    response = client.post(
        "/snaptrade/assign-to-user",
        json={
            "appUserId": user.id,
            "snapTradeUserId": "st-user",
            "snapTradeUserSecret": "secret",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"]["snaptrade_user_id"] == "st-user"


def test_assign_to_unknown_user(client):
    response = client.post(
        "/snaptrade/assign-to-user",
        json={"appUserId": "nobody", "snapTradeUserId": "a", "snapTradeUserSecret": "b"},
    )
    assert response.status_code == 404


def test_get_users(client, db_session, user):
    db_session.add(User(id="user-2", username="other"))
    db_session.commit()

    response = client.get("/snaptrade/get-users")

    assert response.status_code == 200
    assert {u["id"] for u in response.json()["users"]} == {"user-1", "user-2"}


def test_trades_not_duplicated_across_requests(client, snaptrade, db_session, user):
    snaptrade.respond(
        snaptrade.account_information.get_account_activities, {"data": [make_activity("a1")]}
    )
    body = _credentials(accountId="acc-1", appUserId=user.id, fullSync=True)

    client.post("/snaptrade/sync-account-activities", json=body)
    client.post("/snaptrade/sync-account-activities", json=body)

    assert db_session.query(Trade).count() == 1


def test_external_api_error_message_and_status():
    error = ExternalAPIError("get_account_activities failed", api_name="SnapTrade", status_code=401)
    assert str(error) == "SnapTrade: get_account_activities failed"
    assert error.status_code == 401
