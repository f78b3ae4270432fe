"""Timestamped simulation events and timing constraints over them."""

from typing import Any, Iterable, List, NamedTuple, Sequence, Union
import unittest

from absl import logging


Event = Any


class TimestampedEvent(NamedTuple):
    cycle: int
    event: Event


class EdgeEvent(NamedTuple):
    """Simulation event: a one-bit signal toggled."""
    signal: str
    direction: str  # 'rose' or 'fell'


class ExactDelay(NamedTuple):
    """Cycles that must separate the surrounding events."""
    cycles: int


EventConstraints = Iterable[Union[Event, ExactDelay]]


class EventSeries(object):

    def __init__(self):
        super().__init__()
        self._events: List[TimestampedEvent] = []

    @property
    def events(self) -> List[TimestampedEvent]:
        return list(self._events)

    def add(self, cycle: int, event: Event):
        if self._events:
            assert cycle >= self._events[-1].cycle
        self._events.append(TimestampedEvent(cycle, event))

    def ShowEvents(self):
        lines = [f'{len(self._events)} simulation events']
        last = None
        for cycle, e in self._events:
            gap = '' if last is None else f' (+{cycle - last})'
            lines.append(f'  cycle {cycle}{gap}: {e!r}')
            last = cycle
        logging.info('\n'.join(lines))

    def ValidateConstraints(self, tc: unittest.TestCase,
                            expected: EventConstraints):
        """Check the series against events interleaved with delays.

        Consecutive delays add up. Adjacent events with no delay between
        them are not timed. Events after the last expected one are ignored.
        """
        actual_iter = iter(self._events)
        last_cycle = None
        pending = None
        for constraint in expected:
            if isinstance(constraint, ExactDelay):
                pending = (pending or 0) + constraint.cycles
                continue
            actual = next(actual_iter, None)
            tc.assertIsNotNone(actual, f'Missing event {constraint!r}')
            tc.assertEqual(actual.event, constraint)
            if pending is not None:
                tc.assertIsNotNone(last_cycle, 'Delay before the first event')
                tc.assertEqual(actual.cycle - last_cycle, pending,
                               f'Wrong delay before {constraint!r}')
            last_cycle = actual.cycle
            pending = None


def RecordEdges(series: EventSeries, signal: str, trace: Sequence[int],
                first_cycle: int = 0):
    """Add an EdgeEvent to series for every toggle in a sampled trace.

    trace[i] is the value of the signal on cycle first_cycle + i.
    """
    for i in range(1, len(trace)):
        if trace[i] and not trace[i - 1]:
            series.add(first_cycle + i, EdgeEvent(signal, 'rose'))
        elif trace[i - 1] and not trace[i]:
            series.add(first_cycle + i, EdgeEvent(signal, 'fell'))
