"""WikiResult composition: outcomes, capture rule, concurrency and ordering."""

from __future__ import annotations

import asyncio

import pytest

from tests.helpers import delayed, gated
from wikigraph.result import SystemFailure, WikiResult
from wikigraph.types import ArticleNotFound, TitleNotFound
from wikigraph.validated import Err, Ok

pytestmark = pytest.mark.unit

NOT_FOUND = ArticleNotFound(1)
NO_TITLE = TitleNotFound("Nowhere")
BOOM = RuntimeError("boom")


# =============================================================================
# Factories and observation
# =============================================================================


def test_resolved_factories_need_no_event_loop() -> None:
    assert WikiResult.successful(3).done()
    assert repr(WikiResult.successful(3)) == "WikiResult(Ok(value=3))"
    assert repr(WikiResult.domain_error(NOT_FOUND)) == (
        "WikiResult(Err(errors=(ArticleNotFound(article_id=1),)))"
    )


def test_pending_result_requires_running_loop() -> None:
    async def _work() -> Ok[int]:
        return Ok(1)

    with pytest.raises(RuntimeError, match="running event loop"):
        WikiResult(_work())


@pytest.mark.asyncio
async def test_factories_resolve_to_their_outcomes() -> None:
    assert await WikiResult.successful("a") == Ok("a")
    assert await WikiResult.domain_error(NOT_FOUND) == Err((NOT_FOUND,))
    assert await WikiResult.system_failure(BOOM) == SystemFailure(BOOM)


@pytest.mark.asyncio
async def test_repeated_observation_yields_same_outcome() -> None:
    result = delayed(Ok(object()), 0.01)

    first = await result
    second = await result.outcome()

    assert first is second
    assert result.done()


@pytest.mark.asyncio
async def test_raising_source_becomes_system_failure() -> None:
    assert await delayed(BOOM) == SystemFailure(BOOM)


@pytest.mark.asyncio
async def test_start_runs_block_on_worker_thread() -> None:
    assert await WikiResult.start(lambda: 6 * 7) == Ok(42)


@pytest.mark.asyncio
async def test_start_captures_exceptions() -> None:
    def _explode() -> int:
        raise BOOM

    assert await WikiResult.start(_explode) == SystemFailure(BOOM)


@pytest.mark.asyncio
async def test_cancelled_observer_does_not_cancel_computation() -> None:
    gate = asyncio.Event()
    result = gated(Ok("done"), gate)

    observer = asyncio.ensure_future(result.outcome())
    await asyncio.sleep(0)
    observer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await observer

    gate.set()
    assert await result == Ok("done")


# =============================================================================
# map / flat_map
# =============================================================================


@pytest.mark.asyncio
async def test_map_transforms_success() -> None:
    assert await delayed(Ok(2)).map(lambda n: n * 10) == Ok(20)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome", [Err((NOT_FOUND,)), SystemFailure(BOOM)], ids=["domain", "system"]
)
async def test_map_passes_failures_through(outcome: object) -> None:
    calls: list[int] = []

    result = delayed(outcome).map(calls.append)

    assert await result == outcome
    assert calls == []


@pytest.mark.asyncio
async def test_exception_in_map_becomes_system_failure() -> None:
    error = ZeroDivisionError("division by zero")

    def _divide(n: int) -> float:
        raise error

    assert await WikiResult.successful(1).map(_divide) == SystemFailure(error)


@pytest.mark.asyncio
async def test_flat_map_adopts_continuation_outcome() -> None:
    result = WikiResult.successful(1).flat_map(
        lambda n: WikiResult.domain_error(ArticleNotFound(n))
    )

    assert await result == Err((ArticleNotFound(1),))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome", [Err((NOT_FOUND,)), SystemFailure(BOOM)], ids=["domain", "system"]
)
async def test_flat_map_never_calls_continuation_on_failure(outcome: object) -> None:
    calls: list[object] = []

    def _next(value: object) -> WikiResult[object]:
        calls.append(value)
        return WikiResult.successful(value)

    assert await delayed(outcome).flat_map(_next) == outcome
    assert calls == []


@pytest.mark.asyncio
async def test_exception_in_flat_map_becomes_system_failure() -> None:
    def _next(value: int) -> WikiResult[int]:
        raise BOOM

    assert await WikiResult.successful(1).flat_map(_next) == SystemFailure(BOOM)


# =============================================================================
# zip
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        (Ok(1), Ok("a"), Ok((1, "a"))),
        (Err((NOT_FOUND,)), Ok("a"), Err((NOT_FOUND,))),
        (Ok(1), Err((NO_TITLE,)), Err((NO_TITLE,))),
        (Err((NOT_FOUND,)), Err((NO_TITLE,)), Err((NOT_FOUND, NO_TITLE))),
        (Err((NO_TITLE,)), Err((NOT_FOUND,)), Err((NO_TITLE, NOT_FOUND))),
    ],
    ids=["ok-ok", "err-ok", "ok-err", "err-err", "err-err-swapped"],
)
async def test_zip_combines_validated_outcomes(
    left: object, right: object, expected: object
) -> None:
    assert await delayed(left, 0.01).zip(delayed(right)) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "other", [Ok(1), Err((NOT_FOUND,))], ids=["with-success", "with-domain-error"]
)
async def test_system_failure_wins_zip_on_either_side(other: object) -> None:
    assert await delayed(BOOM).zip(delayed(other)) == SystemFailure(BOOM)
    assert await delayed(other).zip(delayed(BOOM)) == SystemFailure(BOOM)


@pytest.mark.asyncio
async def test_zip_with_two_failures_surfaces_one_of_them() -> None:
    other = ValueError("other")

    outcome = await delayed(BOOM).zip(delayed(other))

    assert outcome in (SystemFailure(BOOM), SystemFailure(other))


@pytest.mark.asyncio
async def test_zip_runs_both_sides_concurrently() -> None:
    gate = asyncio.Event()

    async def _opener() -> Ok[str]:
        gate.set()
        return Ok("opened")

    waiting = gated(Ok("waited"), gate)
    result = waiting.zip(WikiResult(_opener()))

    assert await asyncio.wait_for(result.outcome(), timeout=1) == Ok(
        ("waited", "opened")
    )


@pytest.mark.asyncio
async def test_zip_resolves_early_on_system_failure() -> None:
    gate = asyncio.Event()
    slow = gated(Ok(1), gate)

    outcome = await asyncio.wait_for(slow.zip(delayed(BOOM)).outcome(), timeout=1)

    assert outcome == SystemFailure(BOOM)
    assert not slow.done()
    gate.set()
    assert await slow == Ok(1)


@pytest.mark.asyncio
async def test_zip_with_itself() -> None:
    result = delayed(Ok(5), 0.01)

    assert await result.zip(result) == Ok((5, 5))


# =============================================================================
# or_else / fallback_to
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("outcome", "expected"),
    [
        (Err((NOT_FOUND,)), Ok("fallback")),
        (Ok("value"), Ok("value")),
        (SystemFailure(BOOM), SystemFailure(BOOM)),
    ],
    ids=["domain", "success", "system"],
)
async def test_or_else(outcome: object, expected: object) -> None:
    assert await delayed(outcome).or_else("fallback") == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome", [Ok("value"), SystemFailure(BOOM)], ids=["success", "system"]
)
async def test_fallback_to_never_evaluates_alternative_unless_domain_error(
    outcome: object,
) -> None:
    evaluated = 0

    def _alternative() -> WikiResult[str]:
        nonlocal evaluated
        evaluated += 1
        return WikiResult.successful("alternative")

    assert await delayed(outcome).fallback_to(_alternative) == outcome
    assert evaluated == 0


@pytest.mark.asyncio
async def test_fallback_to_adopts_alternative_outcome_in_full() -> None:
    recovered = delayed(Err((NOT_FOUND,))).fallback_to(
        lambda: WikiResult.successful("alternative")
    )
    replaced = delayed(Err((NOT_FOUND,))).fallback_to(
        lambda: WikiResult.domain_error(NO_TITLE)
    )

    assert await recovered == Ok("alternative")
    assert await replaced == Err((NO_TITLE,))


@pytest.mark.asyncio
async def test_exception_in_fallback_alternative_becomes_system_failure() -> None:
    def _alternative() -> WikiResult[str]:
        raise BOOM

    result = WikiResult.domain_error(NOT_FOUND).fallback_to(_alternative)

    assert await result == SystemFailure(BOOM)


# =============================================================================
# traverse
# =============================================================================


@pytest.mark.asyncio
async def test_traverse_empty_input() -> None:
    calls: list[int] = []

    def _lookup(n: int) -> WikiResult[int]:
        calls.append(n)
        return WikiResult.successful(n)

    assert await WikiResult.traverse([], _lookup) == Ok(())
    assert calls == []


@pytest.mark.asyncio
async def test_traverse_preserves_input_order_despite_completion_order() -> None:
    items = [1, 2, 3, 4]
    completed: list[int] = []

    def _lookup(n: int) -> WikiResult[int]:
        async def _resolve() -> Ok[int]:
            # Later items finish first.
            await asyncio.sleep(0.01 * (len(items) - n))
            completed.append(n)
            return Ok(n * 10)

        return WikiResult(_resolve())

    assert await WikiResult.traverse(items, _lookup) == Ok((10, 20, 30, 40))
    assert completed == [4, 3, 2, 1]


@pytest.mark.asyncio
async def test_traverse_collects_all_domain_errors_in_input_order() -> None:
    def _lookup(n: int) -> WikiResult[int]:
        if n % 2:
            # Earlier failures finish last.
            return delayed(Err((ArticleNotFound(n),)), 0.01 * (5 - n))
        return delayed(Ok(n))

    outcome = await WikiResult.traverse([1, 2, 3, 4], _lookup)

    assert outcome == Err((ArticleNotFound(1), ArticleNotFound(3)))


@pytest.mark.asyncio
async def test_traverse_system_failure_preempts_domain_errors() -> None:
    branches = {1: Err((NOT_FOUND,)), 2: BOOM, 3: Ok(3)}

    outcome = await WikiResult.traverse(branches, lambda n: delayed(branches[n]))

    assert outcome == SystemFailure(BOOM)


@pytest.mark.asyncio
async def test_traverse_does_not_wait_for_slow_branches_after_failure() -> None:
    gate = asyncio.Event()
    slow = gated(Ok(1), gate)

    result = WikiResult.traverse([slow, delayed(BOOM)], lambda branch: branch)

    assert await asyncio.wait_for(result.outcome(), timeout=1) == SystemFailure(BOOM)
    gate.set()
    assert await slow == Ok(1)


@pytest.mark.asyncio
async def test_exception_in_traverse_function_becomes_system_failure() -> None:
    def _lookup(n: int) -> WikiResult[int]:
        if n == 2:
            raise BOOM
        return WikiResult.successful(n)

    assert await WikiResult.traverse([1, 2, 3], _lookup) == SystemFailure(BOOM)
