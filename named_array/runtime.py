"""Runtime support imported by generated Python accessors."""
from __future__ import annotations

BOUNDS_ERROR_CODE = "RE2020"


class IndexOutOfRange(IndexError):
    """Raised by a generated accessor for an index outside ``[0, len)``.

    Subclasses ``IndexError`` so callers that already guard list indexing
    keep working. There is no checked variant; bounds-check before indexing
    if failure is not acceptable.
    """

    def __init__(self, length: int, index: int) -> None:
        self.length = length
        self.index = index
        super().__init__(f"index out of bounds: the len is {length} but the index is {index}")
