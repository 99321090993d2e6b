from __future__ import annotations

import math

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_increment(start: float, stop: float, count: int) -> float:
    """Linear-scale tick increment in the 1/2/5 x 10^k family.

    Steps below one are returned as a negative inverse (``-5`` for 0.2) so the
    caller can snap to the grid without accumulating float error.
    """

    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / (10**power)
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    if power >= 0:
        return factor * (10**power)
    return -(10 ** (-power)) / factor


def nice_domain(start: float, stop: float, count: int = 10) -> tuple[float, float]:
    prestep = None
    for _ in range(10):
        step = tick_increment(start, stop, count)
        if step == prestep:
            break
        if step > 0:
            start = math.floor(start / step) * step
            stop = math.ceil(stop / step) * step
        elif step < 0:
            start = math.ceil(start * step) / step
            stop = math.floor(stop * step) / step
        else:
            break
        prestep = step
    return start, stop


def nice_tick_step(max_value: float, count: int = 10) -> float:
    """Spacing of the ticks a linear axis over ``[0, max_value]`` would draw.

    This is the first tick above zero once the domain has been niced.
    """

    if not math.isfinite(max_value) or max_value <= 0 or count <= 0:
        return 0.0
    start, stop = nice_domain(0.0, max_value, count)
    increment = tick_increment(start, stop, count)
    if increment > 0:
        return float(increment)
    return 1.0 / -increment
