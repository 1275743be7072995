from typing import Any


class InvalidSampleError(Exception):
    """Raised for a sample whose end precedes its start, or a record that cannot become a sample."""

    def __init__(self, message: str, sample: Any = None) -> None:
        super().__init__(message)
        self.sample = sample
