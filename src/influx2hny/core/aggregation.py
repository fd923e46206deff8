"""Grouping of samples into the fewest possible events."""

import logging
from collections.abc import Collection, Iterable, Sequence

from influx2hny.core.errors import EventAddError
from influx2hny.core.models import Event, FieldValue, Sample
from influx2hny.core.observers import notify
from influx2hny.core.ports import ErrorObserver
from influx2hny.core.projection import project

logger = logging.getLogger("influx2hny.aggregator")

TimestampGroup = dict[int, dict[str, list[Sample]]]


def group_by_timestamp_and_name(samples: Iterable[Sample]) -> TimestampGroup:
    """Bucket samples by exact timestamp, then by name.

    Insertion order is kept within each bucket.
    """
    groups: TimestampGroup = {}
    for sample in samples:
        groups.setdefault(sample.timestamp, {}).setdefault(sample.name, []).append(
            sample
        )
    return groups


def mergeable(samples: Sequence[Sample]) -> bool:
    """Return True if the samples can share one event without losing data.

    The first sample's tags are the canonical list. Every other sample must
    carry the same tags in the same positions; tag order is assumed stable
    upstream, so this is not a set comparison. Field identifiers, the
    (name, field key) pairs, must not repeat across samples.
    """
    canonical: tuple[tuple[str, str], ...] | None = None
    seen: set[tuple[str, str]] = set()

    for sample in samples:
        if canonical is None:
            canonical = sample.tags
        elif sample.tags != canonical:
            return False

        for key in sample.fields:
            ident = (sample.name, key)
            if ident in seen:
                return False
            seen.add(ident)

    return True


class FewestEventsAggregator:
    """Groups samples into as few unique events as possible per timestamp.

    For each timestamp we want a single "flat" event carrying as many
    metrics as possible. Some metrics arrive more than once per timestamp
    (disk usage is reported once per disk), so samples are bucketed by
    timestamp and name. Every field is prefixed by the sample name, which
    makes samples with different names always mergeable; same-named samples
    are merged only when mergeable() says so and are otherwise sent as
    separate events.
    """

    def __init__(
        self,
        unprefixed_tags: Collection[str] = (),
        on_error: ErrorObserver | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            unprefixed_tags: Tag keys sent without the sample-name prefix.
                Any global tags belong here. "host" is always unprefixed.
            on_error: Called with each EventAddError. Defaults to logging.
        """
        self.unprefixed_tags = frozenset(unprefixed_tags)
        self.on_error = on_error

    def aggregate(self, samples: Iterable[Sample]) -> list[Event]:
        """Return the events for a batch of samples.

        Standalone events for non-mergeable samples come first within each
        timestamp, followed by that timestamp's flat event. The flat event is
        always emitted, even when nothing was merged into it.
        """
        events: list[Event] = []

        for timestamp, by_name in group_by_timestamp_and_name(samples).items():
            flat = Event(timestamp=timestamp)

            for name, bucket in by_name.items():
                if len(bucket) == 1 or mergeable(bucket):
                    for sample in bucket:
                        self._add(flat, sample)
                    continue

                logger.debug(
                    "sending %d %r samples as separate events", len(bucket), name
                )
                for sample in bucket:
                    standalone = Event(timestamp=timestamp)
                    self._add(standalone, sample)
                    events.append(standalone)

            events.append(flat)

        return events

    def data_for(self, sample: Sample) -> dict[str, FieldValue]:
        """Return the projected Honeycomb fields for a sample."""
        return project(sample, self.unprefixed_tags)

    def _add(self, event: Event, sample: Sample) -> None:
        """Add a sample's fields to an event, skipping any that fail."""
        for key, value in self.data_for(sample).items():
            try:
                event.add_field(key, value)
            except EventAddError as exc:
                notify(self.on_error, exc, logger)


def aggregate(
    samples: Iterable[Sample],
    unprefixed_tags: Collection[str] = (),
    on_error: ErrorObserver | None = None,
) -> list[Event]:
    """Aggregate samples with a one-off FewestEventsAggregator."""
    return FewestEventsAggregator(unprefixed_tags, on_error).aggregate(samples)
