class Generation:
    """
    Monotonic counter identifying the latest request in a stream of superseding requests.

    Each call to `next()` hands out a number strictly greater than every number handed
    out before. A result is current only while its number is still the latest one.

    Example:
        ```python
        gen = Generation()

        mine = gen.next()
        result = await slow_call()
        if not gen.is_current(mine):
            return  # superseded while we were waiting
        ```
    """

    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        """Allocate and return a new generation number."""
        self._value += 1
        return self._value

    def is_current(self, generation: int) -> bool:
        return generation == self._value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._value})"
