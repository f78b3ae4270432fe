"""Fixed-period pulse-width modulation (PWM) with a selectable duty cycle."""

from typing import List, Optional

from amaranth import *
from amaranth.build import *

from amaranth_pwm.core import util


PERIOD = 10
SELECTOR_WIDTH = 3
# Indexed by selector code; entry i is the number of high ticks per period.
DUTY_CYCLE_TABLE = (1, 2, 3, 4, 5, 6, 7, 8)
FALLBACK_DUTY_CYCLE = 1
MAX_DUTY_CYCLE = max(DUTY_CYCLE_TABLE)

assert len(DUTY_CYCLE_TABLE) == 2**SELECTOR_WIDTH
assert MAX_DUTY_CYCLE < PERIOD


class PwmCore(Elaboratable):
    r"""PWM generator with a fixed ten-cycle period.

    Three registers advance together on every sync clock edge:

      counter     position within the period, wrapping from 9 to 0;
      duty_cycle  high cycles per period, loaded from DUTY_CYCLE_TABLE;
      output      the PWM output.

    Every register is computed from the values the registers held before the
    edge. In particular the output compares the old counter against the old
    duty cycle, so a new selector value first affects the output two edges
    after it is presented:

                   __    __    __    __
      clk       __/  \__/  \__/  \__/  \__
                ____ _____________________
      selector  _a__X_b___________________
                      _____ ______________
      duty_cycle ____X_a___X_b____________
                            _____ ________
      output    ___________X_a'__X_b'_____

    Asserting reset for one edge forces all three registers to zero, which
    holds the output low until the next edge after reset is released.

    If a selector signal is supplied it must be able to represent every
    table index. Codes beyond the table load FALLBACK_DUTY_CYCLE.
    """

    def __init__(self, selector: Optional[Signal] = None, checks: bool = True):
        super().__init__()
        if selector is None:
            selector = Signal(SELECTOR_WIDTH, name='selector')
        self.selector = selector
        self.checks = checks
        if not util.ShapeCovers(selector.shape(),
                                range(len(DUTY_CYCLE_TABLE))):
            raise ValueError(
                f'Selector {selector!r} cannot represent all '
                f'{len(DUTY_CYCLE_TABLE)} duty cycle codes')
        self.reset = Signal()
        self.counter = Signal(range(PERIOD), init=0)
        self.duty_cycle = Signal(range(MAX_DUTY_CYCLE + 1), init=0)
        self.output = Signal(init=0)

    def __repr__(self) -> str:
        return util.ProductRepr(self)

    def elaborate(self, _: Optional[Platform]) -> Module:
        m = Module()
        with m.If(self.reset):
            m.d.sync += [
                self.counter.eq(0),
                self.duty_cycle.eq(0),
                self.output.eq(0),
            ]
        with m.Else():
            with m.Switch(self.selector):
                for code, duty_cycle in enumerate(DUTY_CYCLE_TABLE):
                    with m.Case(code):
                        m.d.sync += self.duty_cycle.eq(duty_cycle)
                with m.Default():
                    m.d.sync += self.duty_cycle.eq(FALLBACK_DUTY_CYCLE)
            with m.If(self.counter == PERIOD - 1):
                m.d.sync += self.counter.eq(0)
            with m.Else():
                m.d.sync += self.counter.eq(self.counter + 1)
            m.d.sync += self.output.eq(self.counter < self.duty_cycle)
        if self.checks:
            m.d.comb += [
                Assert(self.counter < PERIOD, 'PWM counter out of range'),
                Assert(self.duty_cycle <= MAX_DUTY_CYCLE,
                       'PWM duty cycle out of range'),
            ]
        return m


class PwmBank(Elaboratable):
    """Independent PWM channels sharing a reset line.

    Output bit i is driven by channel i, which is controlled by selectors[i].
    """

    def __init__(self, channels: int):
        super().__init__()
        self.channels = channels
        if channels < 1:
            raise ValueError(f'A PWM bank needs at least one channel, '
                             f'got {channels}')
        self.reset = Signal()
        self.selectors: List[Signal] = [
            Signal(SELECTOR_WIDTH, name=f'selector_{i}')
            for i in range(channels)
        ]
        self.outputs = Signal(channels)
        self.cores = [PwmCore(selector) for selector in self.selectors]

    def __repr__(self) -> str:
        return util.ProductRepr(self)

    def elaborate(self, _: Optional[Platform]) -> Module:
        m = Module()
        for i, core in enumerate(self.cores):
            m.submodules[f'channel_{i}'] = core
            m.d.comb += [
                core.reset.eq(self.reset),
                self.outputs[i].eq(core.output),
            ]
        return m
