"""Exception hierarchy for CounterProductive."""


class CounterProductiveError(Exception):
    pass


class MalformedRecord(CounterProductiveError):
    """A line carrying a record date prefix failed structural parsing."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")


class InsufficientData(CounterProductiveError):
    """A statistic needs more events than are available."""

    def __init__(self, metric: str, required: int = 2, available: int = 0):
        self.metric = metric
        self.required = required
        self.available = available
        super().__init__(
            f"{metric} needs at least {required} events, got {available}"
        )


class EmptyLog(CounterProductiveError):
    """The log holds no usable events."""


class DeliveryError(CounterProductiveError):
    pass


class DeliveryRejected(DeliveryError):
    pass


class DeliveryTimeout(DeliveryError):
    pass


class DeliveryUnavailable(DeliveryError):
    pass
