"""Cycle-accurate software model of amaranth_pwm.core.pwm.PwmCore.

The model mirrors the gateware register for register and is the reference the
simulation tests compare against. Unlike the gateware it can represent a
register whose value is not yet known: every field of POWER_ON_STATE is None,
and unknown values propagate through ticks the way they would through real
flip-flops until reset defines them.
"""

from typing import Iterable, List, NamedTuple, Optional, Tuple

from absl import logging

from amaranth_pwm.core import pwm


class InvariantViolation(AssertionError):
    """A register left its legal range."""


class UninitializedRegisterError(Exception):
    """A register was read before reset gave it a value."""


class PwmState(NamedTuple):
    """Register contents between two ticks. None marks an unknown value."""
    counter: Optional[int]
    duty_cycle: Optional[int]
    pwm_out: Optional[bool]

    @property
    def initialized(self) -> bool:
        return None not in self


POWER_ON_STATE = PwmState(counter=None, duty_cycle=None, pwm_out=None)
RESET_STATE = PwmState(counter=0, duty_cycle=0, pwm_out=False)


def _CheckSelector(selector: int):
    if isinstance(selector, bool) or not isinstance(selector, int):
        raise TypeError(f'Selector must be an integer, not {selector!r}')


def _CheckReset(reset: bool) -> bool:
    if not isinstance(reset, int) or reset not in (0, 1):
        raise TypeError(f'Reset must be a boolean, not {reset!r}')
    return bool(reset)


def LookupDutyCycle(selector: int) -> int:
    """Map a selector code to a duty cycle, falling back for unknown codes."""
    _CheckSelector(selector)
    if 0 <= selector < len(pwm.DUTY_CYCLE_TABLE):
        return pwm.DUTY_CYCLE_TABLE[selector]
    return pwm.FALLBACK_DUTY_CYCLE


def CheckInvariants(state: PwmState):
    """Raise InvariantViolation if a known register is out of range."""
    if state.counter is not None and not 0 <= state.counter < pwm.PERIOD:
        raise InvariantViolation(f'Counter out of range: {state}')
    if (state.duty_cycle is not None and
            not 0 <= state.duty_cycle <= pwm.MAX_DUTY_CYCLE):
        raise InvariantViolation(f'Duty cycle out of range: {state}')


def Step(state: PwmState, reset: bool, selector: int) -> PwmState:
    """Compute the register contents after one clock edge.

    All three fields are derived from the old state only. In particular the
    output compares the old counter against the old duty cycle.
    """
    reset = _CheckReset(reset)
    _CheckSelector(selector)
    if reset:
        return RESET_STATE
    duty_cycle = LookupDutyCycle(selector)
    if state.counter is None:
        counter = None
    elif state.counter == pwm.PERIOD - 1:
        counter = 0
    else:
        counter = state.counter + 1
    if state.counter is None or state.duty_cycle is None:
        pwm_out = None
    else:
        pwm_out = state.counter < state.duty_cycle
    new_state = PwmState(counter, duty_cycle, pwm_out)
    CheckInvariants(new_state)
    return new_state


class PwmModel(object):
    """A single PWM channel driven one tick at a time.

    Instances own their state and share nothing, so separate channels may be
    ticked independently.
    """

    def __init__(self, state: PwmState = POWER_ON_STATE):
        super().__init__()
        CheckInvariants(state)
        self._state = state

    def __repr__(self) -> str:
        return f'PwmModel({self._state!r})'

    @property
    def state(self) -> PwmState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    def _Read(self, field: str):
        value = getattr(self._state, field)
        if value is None:
            raise UninitializedRegisterError(
                f'PWM register {field} read before reset')
        return value

    @property
    def counter(self) -> int:
        return self._Read('counter')

    @property
    def duty_cycle(self) -> int:
        return self._Read('duty_cycle')

    @property
    def output(self) -> bool:
        return self._Read('pwm_out')

    def tick(self, reset: bool, selector: int) -> Optional[bool]:
        """Advance by one clock edge and return the new output.

        The return value is None only while the output is still unknown. If
        the transition raises, the previous state is kept.
        """
        new_state = Step(self._state, reset, selector)
        if reset:
            logging.vlog(1, 'PWM reset from %s', self._state)
        else:
            logging.vlog(2, 'PWM tick selector=%d: %s -> %s', selector,
                         self._state, new_state)
        self._state = new_state
        return new_state.pwm_out

    def reset(self, cycles: int = 1) -> bool:
        """Hold reset for the given number of ticks."""
        if cycles < 1:
            raise ValueError(f'Reset must last at least one tick, '
                             f'got {cycles}')
        for _ in range(cycles):
            output = self.tick(True, 0)
        return output

    def run(self, inputs: Iterable[Tuple[bool, int]]) -> List[Optional[bool]]:
        """Tick once per (reset, selector) pair and collect the outputs."""
        return [self.tick(reset, selector) for reset, selector in inputs]
