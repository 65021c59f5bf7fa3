"""Tests for courier.testing doubles."""

import anyio
import pytest

from courier.context import RequestContext
from courier.http.request import Request
from courier.http.response import Response
from courier.testing import DeferredEndpoint, RecordingRequest


class TestRecordingRequest:
    def test_records(self) -> None:
        ongoing = RecordingRequest(Request.for_uri("/"), expired=True)
        ongoing.reply(Response.ok())
        ongoing.drop()
        assert ongoing.reply_count == 1
        assert ongoing.dropped
        assert ongoing.is_expired

    @pytest.mark.anyio
    async def test_wait_times_out(self) -> None:
        ongoing = RecordingRequest(Request.for_uri("/"))
        with pytest.raises(TimeoutError):
            await ongoing.wait_for_reply(timeout=0.01)

    @pytest.mark.anyio
    async def test_wait_wakes_on_reply(self) -> None:
        ongoing = RecordingRequest(Request.for_uri("/"))

        async def reply_later() -> None:
            await anyio.sleep(0)
            ongoing.reply(Response.for_status(204))

        async with anyio.create_task_group() as tg:
            tg.start_soon(reply_later)
            response = await ongoing.wait_for_reply()
        assert response.status.code == 204

    @pytest.mark.anyio
    async def test_concurrent_waiters_all_wake(self) -> None:
        ongoing = RecordingRequest(Request.for_uri("/"))
        seen: list[Response] = []

        async def wait() -> None:
            seen.append(await ongoing.wait_for_reply())

        async with anyio.create_task_group() as tg:
            tg.start_soon(wait)
            tg.start_soon(wait)
            await anyio.sleep(0)
            await anyio.sleep(0)
            ongoing.reply(Response.ok())
        assert seen == [Response.ok(), Response.ok()]


class TestDeferredEndpoint:
    @pytest.mark.anyio
    async def test_complete_before_await(self) -> None:
        endpoint = DeferredEndpoint()
        pending = endpoint.invoke(RequestContext.create(Request.for_uri("/deferred")))
        endpoint.complete("value")
        assert await pending == "value"

    @pytest.mark.anyio
    async def test_fail_after_await_started(self) -> None:
        endpoint = DeferredEndpoint(uri="/x", method="POST")
        assert endpoint.info.name == "POST:/x"
        results: list[BaseException] = []

        async def consume() -> None:
            try:
                await endpoint.invoke(RequestContext.create(Request.for_uri("/x", "POST")))
            except ValueError as exc:
                results.append(exc)

        async with anyio.create_task_group() as tg:
            tg.start_soon(consume)
            await anyio.sleep(0)
            endpoint.fail(ValueError("late"))
        assert [str(exc) for exc in results] == ["late"]

    @pytest.mark.anyio
    async def test_every_pending_invocation_completes(self) -> None:
        endpoint = DeferredEndpoint()
        results: list[Response] = []

        async def consume() -> None:
            results.append(await endpoint.invoke(RequestContext.create(Request.for_uri("/"))))

        async with anyio.create_task_group() as tg:
            tg.start_soon(consume)
            tg.start_soon(consume)
            await anyio.sleep(0)
            await anyio.sleep(0)
            endpoint.complete(Response.ok())
            with anyio.fail_after(1):
                while len(results) < 2:
                    await anyio.sleep(0)
        assert results == [Response.ok(), Response.ok()]
        assert len(endpoint.invocations) == 2
