"""
Linear parameter sweeps.

A sweep walks a closed interval [lo, hi] in a fixed number of equal
steps. It is used to animate the shape parameter b of a map function
across successive renders:

    sweep = ParameterSweep(2.0, 3.0, 5)     # 2.0, 2.25, 2.5, 2.75, 3.0
    ok = sweep.start()
    while ok:
        ... render with sweep.value ...
        ok = sweep.next()
"""


class ParameterSweep:

    def __init__(self, lo: float, hi: float, steps: int):
        steps = int(steps)
        if steps < 1:
            raise ValueError(f"sweep needs at least one step, got {steps}")
        self.lo = float(lo)
        self.hi = float(hi)
        self.steps = steps
        if steps == 1:
            self.delta = self.hi - self.lo
        else:
            self.delta = (self.hi - self.lo) / (steps - 1)
        self.value = self.lo
        self.position = 0

    def start(self) -> bool:
        self.value = self.lo
        self.position = 1
        return True

    def next(self) -> bool:
        """Advance one step; False once all steps have been used."""
        self.value += self.delta
        self.position += 1
        return self.position <= self.steps

    def values(self) -> list[float]:
        """All values of one pass, restarting the sweep."""
        out = []
        ok = self.start()
        while ok:
            out.append(self.value)
            ok = self.next()
        return out

    def __repr__(self) -> str:
        return f"ParameterSweep({self.lo!r}, {self.hi!r}, {self.steps})"
