"""Tests for courier.request.handler: match, reject, or dispatch."""

import logging

import anyio
import pytest

from courier.dispatch.endpoint import Endpoint, new_router_from_inspecting
from courier.dispatch.invocation import EndpointInvocationHandler
from courier.errors import InvalidUriError
from courier.http.request import Request
from courier.http.response import Response
from courier.request.handler import RequestHandler, RequestRunnable, allow_header
from courier.routing.route import Route
from courier.routing.rule import RuleMatch
from courier.testing import RecordingRequest


def _router():
    return new_router_from_inspecting(
        Route.sync("GET", "/users/<id>", lambda ctx: Response.for_payload(ctx.path_args["id"])),
        Route.sync("PUT", "/users/<id>", lambda ctx: Response.ok()),
    )


class _BrokenRouter:
    def match(self, request: Request) -> RuleMatch[Endpoint] | None:
        raise RuntimeError("router bug")

    def methods_for_valid_rules(self, request: Request) -> frozenset[str]:
        return frozenset()

    def rule_targets(self) -> list[Endpoint]:
        return []


class TestAllowHeader:
    def test_sorted_with_options(self) -> None:
        assert allow_header(frozenset({"PUT", "GET", "HEAD"})) == "GET, HEAD, OPTIONS, PUT"

    def test_options_not_duplicated(self) -> None:
        assert allow_header(frozenset({"OPTIONS"})) == "OPTIONS"


class TestRequestRunnable:
    def _run(self, request: Request) -> tuple[RecordingRequest, list[RuleMatch[Endpoint]]]:
        ongoing = RecordingRequest(request)
        matches: list[RuleMatch[Endpoint]] = []
        RequestRunnable(ongoing, _router()).run(lambda _, match: matches.append(match))
        return ongoing, matches

    def test_match_continues(self) -> None:
        ongoing, matches = self._run(Request.for_uri("/users/7"))
        assert ongoing.replies == []
        assert matches[0].path_arguments == {"id": "7"}

    def test_bad_uri(self) -> None:
        ongoing, matches = self._run(Request.for_uri("/users/%zz"))
        assert matches == []
        assert ongoing.response.status.code == 400

    def test_missing_method(self) -> None:
        ongoing, _ = self._run(Request(method="", uri="/users/1"))
        assert ongoing.response.status.code == 400

    def test_not_found(self) -> None:
        ongoing, _ = self._run(Request.for_uri("/posts/1"))
        assert ongoing.response.status.code == 404
        assert ongoing.response.header("Allow") is None

    def test_method_not_allowed(self) -> None:
        ongoing, _ = self._run(Request.for_uri("/users/1", "DELETE"))
        assert ongoing.response.status.code == 405
        assert ongoing.response.header("Allow") == "GET, HEAD, OPTIONS, PUT"

    def test_options(self) -> None:
        ongoing, _ = self._run(Request.for_uri("/users/1", "OPTIONS"))
        assert ongoing.response.status.code == 204
        assert ongoing.response.header("Allow") == "GET, HEAD, OPTIONS, PUT"

    def test_unexpected_error(self, caplog: pytest.LogCaptureFixture) -> None:
        ongoing = RecordingRequest(Request.for_uri("/x"))
        with caplog.at_level(logging.ERROR, logger="courier.request"):
            RequestRunnable(ongoing, _BrokenRouter()).run(lambda _, match: None)
        assert ongoing.response.status.code == 500
        assert "Exception when handling request" in caplog.text

    def test_invalid_uri_error_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        class _Rejecting(_BrokenRouter):
            def match(self, request: Request) -> RuleMatch[Endpoint] | None:
                raise InvalidUriError("nope")

        ongoing = RecordingRequest(Request.for_uri("/x"))
        with caplog.at_level(logging.WARNING, logger="courier.request"):
            RequestRunnable(ongoing, _Rejecting()).run(lambda _, match: None)
        assert ongoing.response.status.code == 400
        assert "bad uri" in caplog.text


class TestRequestHandler:
    @pytest.mark.anyio
    async def test_dispatches_with_path_args(self) -> None:
        ongoing = RecordingRequest(Request.for_uri("/users/42"))
        async with anyio.create_task_group() as tg:
            RequestHandler(_router(), EndpointInvocationHandler(tg)).handle(ongoing)
        assert ongoing.reply_count == 1
        assert ongoing.response.payload == "42"

    @pytest.mark.anyio
    async def test_rejection_replies_without_dispatch(self) -> None:
        ongoing = RecordingRequest(Request.for_uri("/nowhere"))
        async with anyio.create_task_group() as tg:
            RequestHandler(_router(), EndpointInvocationHandler(tg)).handle(ongoing)
            assert ongoing.reply_count == 1
        assert ongoing.response.status.code == 404
