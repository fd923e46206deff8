"""BDD step definitions for aggregation and flushing features."""

import asyncio

import pytest
from pytest_bdd import given, parsers, then, when

from influx2hny.core.aggregation import aggregate
from influx2hny.core.config import OutputConfig
from influx2hny.core.models import Sample
from influx2hny.core.scheduler import FlushScheduler, SchedulerState
from tests.features.aggregation.steps_helpers import (
    AggregationScenarioContext,
    make_samples,
    parse_fields,
    parse_names,
    parse_pairs,
    run_async,
)
from tests.helpers import TS


@pytest.fixture
def ctx() -> AggregationScenarioContext:
    """Fresh scenario context for each test."""
    return AggregationScenarioContext()


# --- aggregation.feature ---


@given(parsers.parse('the unprefixed tags "{tags}"'))
def given_unprefixed_tags(ctx: AggregationScenarioContext, tags: str) -> None:
    """Configure tags sent without the name prefix."""
    ctx.unprefixed_tags = frozenset(parse_names(tags))


@given(parsers.parse('a "{name}" sample with tags "{tags}" and fields "{fields}"'))
def given_sample(
    ctx: AggregationScenarioContext, name: str, tags: str, fields: str
) -> None:
    """Add a sample at the shared timestamp."""
    ctx.samples.append(
        Sample(
            name=name,
            timestamp=TS,
            tags=tuple(parse_pairs(tags)),
            fields=parse_fields(fields),
        )
    )


@when("the samples are aggregated")
def when_aggregated(ctx: AggregationScenarioContext) -> None:
    """Run the aggregator over the collected samples."""
    ctx.events = aggregate(ctx.samples, ctx.unprefixed_tags)


@then(parsers.parse("{n:d} events are produced"))
@then(parsers.parse("{n:d} event is produced"))
def then_n_events(ctx: AggregationScenarioContext, n: int) -> None:
    """Check the number of events."""
    assert len(ctx.events) == n


@then(parsers.parse('{n:d} events have the fields "{names}"'))
@then(parsers.parse('{n:d} event has the fields "{names}"'))
def then_events_with_fields(
    ctx: AggregationScenarioContext, n: int, names: str
) -> None:
    """Check how many events carry at least the given fields."""
    expected = parse_names(names)
    matching = [e for e in ctx.events if expected <= set(e.fields)]
    assert len(matching) == n


@then(parsers.parse('{n:d} event has exactly the fields "{names}"'))
def then_event_with_exact_fields(
    ctx: AggregationScenarioContext, n: int, names: str
) -> None:
    """Check how many events carry exactly the given fields."""
    expected = parse_names(names)
    matching = [e for e in ctx.events if set(e.fields) == expected]
    assert len(matching) == n


@then(parsers.parse("{n:d} event has no fields"))
def then_empty_events(ctx: AggregationScenarioContext, n: int) -> None:
    """Check how many events are empty."""
    assert sum(1 for e in ctx.events if e.is_empty()) == n


# --- flushing.feature ---


@given(
    parsers.parse(
        "a scheduler with a flush interval of {interval:d} seconds "
        "and a buffer of {size:d} samples"
    )
)
def given_scheduler(ctx: AggregationScenarioContext, interval: int, size: int) -> None:
    """Create a scheduler over the in-memory emitter."""
    config = OutputConfig(flush_interval=interval, max_buffer_size=size)
    ctx.scheduler = FlushScheduler(ctx.emitter, config)


@when(parsers.parse("{n:d} samples are received"))
def when_samples_received(ctx: AggregationScenarioContext, n: int) -> None:
    """Add samples to the scheduler directly."""
    assert ctx.scheduler is not None
    scheduler = ctx.scheduler

    async def add_all() -> None:
        for sample in make_samples(n):
            await scheduler.add(sample)

    run_async(add_all())


@when(parsers.parse("{n:d} samples are queued"))
def when_samples_queued(ctx: AggregationScenarioContext, n: int) -> None:
    """Collect samples for the next run."""
    ctx.samples.extend(make_samples(n))


@when("the scheduler runs until it is stopped")
def when_run_until_stopped(ctx: AggregationScenarioContext) -> None:
    """Run the scheduler over the queued samples, then stop it."""
    assert ctx.scheduler is not None
    scheduler = ctx.scheduler

    async def run_then_stop() -> None:
        queue: asyncio.Queue[Sample] = asyncio.Queue()
        for sample in ctx.samples:
            queue.put_nowait(sample)
        task = asyncio.create_task(scheduler.run(queue))
        await asyncio.sleep(0.01)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)

    run_async(run_then_stop())


@then(parsers.parse("the emitter has been flushed {n:d} time"))
@then(parsers.parse("the emitter has been flushed {n:d} times"))
def then_flushed_n_times(ctx: AggregationScenarioContext, n: int) -> None:
    """Check the number of emitter flushes."""
    assert ctx.emitter.flush_count == n


@then("the buffer is empty")
def then_buffer_empty(ctx: AggregationScenarioContext) -> None:
    """Check that nothing is left buffered."""
    assert ctx.scheduler is not None
    assert len(ctx.scheduler.buffer) == 0


@then("the scheduler is stopped")
def then_scheduler_stopped(ctx: AggregationScenarioContext) -> None:
    """Check the scheduler reached its final state."""
    assert ctx.scheduler is not None
    assert ctx.scheduler.state is SchedulerState.STOPPED
