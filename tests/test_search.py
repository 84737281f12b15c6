"""
Tests for the strategy fallback orchestrator.
"""

import pytest

from usersearch.client import TransportError
from usersearch.models import NormalizedUser, StrategyStatus
from usersearch.search import UserSearch
from usersearch.strategies import Strategy, always

from conftest import FakeClient, known_hit, make_response


def ok(*hits):
    return make_response({"results": list(hits)})


EMPTY = {"results": []}


class TestFirstSuccessWins:
    """The first strategy with a usable record answers the search."""

    def test_first_strategy_success(self, quiet_logger):
        client = FakeClient([ok(known_hit(accountId="u1", displayName="Jane Doe"))])
        users = UserSearch(client, logger=quiet_logger).search("jane")

        assert [u.to_dict() for u in users] == [
            {"id": "u1", "name": "Jane Doe", "email": None, "username": None}
        ]
        # strategies 2-4 never invoked
        assert len(client.calls) == 1
        assert client.cqls == ['user.fullname~"jane*"']

    def test_empty_first_then_second(self):
        client = FakeClient([
            make_response(EMPTY),
            ok(known_hit(accountId="u2", displayName="Jane Roe")),
        ])
        outcome = UserSearch(client).search_detailed("jane")

        assert [u.id for u in outcome.users] == ["u2"]
        assert outcome.winner == "user-search"
        assert client.cqls == ['user.fullname~"jane*"', 'user~"jane*"']

    def test_unusable_hits_advance(self):
        client = FakeClient([
            ok({"user": {"type": "anonymous", "accountId": "x", "displayName": "X"}}),
            ok(known_hit(userKey="k2", publicName="Pub")),
        ])
        users = UserSearch(client).search("jane")
        assert users == [NormalizedUser("k2", "Pub", None, None)]
        assert len(client.calls) == 2

    def test_no_merging_across_strategies(self):
        client = FakeClient([
            make_response(status=500, text="oops"),
            ok(known_hit(accountId="a", displayName="A")),
            ok(known_hit(accountId="b", displayName="B")),
        ])
        users = UserSearch(client).search("jane")
        assert [u.id for u in users] == ["a"]
        assert len(client.replies) == 1


class TestFallbackToContentSearch:
    def test_email_query_reaches_content_search(self):
        client = FakeClient([
            make_response(EMPTY),
            make_response(EMPTY),
            make_response(EMPTY),
            ok(known_hit(userKey="u2", username="jdoe")),
        ])
        outcome = UserSearch(client).search_detailed("jane.doe@x.com")

        assert [u.to_dict() for u in outcome.users] == [
            {"id": "u2", "name": "jdoe", "email": None, "username": "jdoe"}
        ]
        assert outcome.winner == "general-search"
        assert client.calls[-1]["path"] == "/wiki/rest/api/search"
        assert client.cqls[2] == 'user.accountid~"jane.doe@x.com*"'

    def test_accountid_strategy_skipped_for_plain_query(self):
        client = FakeClient([
            make_response(EMPTY),
            make_response(EMPTY),
            ok(known_hit(accountId="u3", displayName="Jane")),
        ])
        outcome = UserSearch(client).search_detailed("jane")

        assert [u.id for u in outcome.users] == ["u3"]
        assert [a.status for a in outcome.attempts] == [
            StrategyStatus.EMPTY,
            StrategyStatus.EMPTY,
            StrategyStatus.SKIPPED,
            StrategyStatus.OK,
        ]
        assert not any("accountid" in cql for cql in client.cqls)
        assert len(client.calls) == 3


class TestExhaustion:
    """Strategy-local failures never escape search()."""

    def test_all_strategies_fail(self):
        client = FakeClient([
            TransportError("timeout"),
            make_response(status=410, text="Gone"),
            RuntimeError("boom"),
            make_response(status=503, text="unavailable"),
        ])
        outcome = UserSearch(client).search_detailed("jane.doe@x.com")

        assert outcome.users == []
        assert outcome.exhausted
        assert outcome.winner is None
        assert len(outcome.attempts) == 4
        assert all(a.status is StrategyStatus.ERROR for a in outcome.attempts)

    def test_no_hits_anywhere(self):
        client = FakeClient([make_response(EMPTY)] * 3)
        assert UserSearch(client).search("jane") == []
        assert len(client.calls) == 3

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_makes_no_calls(self, query):
        client = FakeClient()
        assert UserSearch(client).search(query) == []
        assert client.calls == []

    def test_query_is_stripped(self):
        client = FakeClient([ok(known_hit(accountId="u1", displayName="Jane"))])
        UserSearch(client).search("  jane  ")
        assert client.cqls == ['user.fullname~"jane*"']


class TestConfiguration:
    def test_limit_passed_to_every_call(self):
        client = FakeClient([make_response(EMPTY)] * 3)
        UserSearch(client, limit=5).search("jane")
        assert {c["params"]["limit"] for c in client.calls} == {5}

    def test_custom_strategy_list(self):
        only = Strategy("custom", "/custom", lambda q: f"custom~{q}", always)
        client = FakeClient([ok(known_hit(accountId="c", displayName="C"))])
        outcome = UserSearch(client, strategies=[only]).search_detailed("x")

        assert outcome.winner == "custom"
        assert client.calls[0]["path"] == "/custom"


class TestMetrics:
    def test_attempts_recorded(self, quiet_logger):
        client = FakeClient([
            make_response(status=500, text="err"),
            make_response(EMPTY),
            ok(known_hit(accountId="u", displayName="U")),
        ])
        UserSearch(client, logger=quiet_logger).search("jane")
        metrics = quiet_logger.get_metrics()

        assert metrics["strategies_attempted"] == 3
        assert metrics["strategies_succeeded"] == 1
        assert metrics["strategies_failed"] == 2
        assert metrics["strategies_skipped"] == 1
        assert metrics["errors_by_type"] == {"HTTP_500": 1, "EmptyResult": 1}
        assert metrics["strategy_success_rate"]["general-search"]["success_rate"] == 1.0
