"""Factory functions for resilience test data."""


class FakeClock:
    """Manually advanced clock returning epoch-like seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
