from __future__ import annotations

from typing import Iterable, Iterator, Optional

import numpy as np


class CandidatePlayback:
    """Step through candidate rows one at a time until exhausted or cancelled.

    The stop flag is checked once per step, before advancing, so a cancelled
    playback keeps ``current`` on the last row it yielded. Timing between
    steps belongs to the caller.
    """

    def __init__(self, rows: Iterable[int]):
        self.rows = [int(r) for r in np.asarray(list(rows), dtype=int).ravel()]
        self.position = -1
        self._cancelled = False

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        if self._cancelled:
            raise StopIteration
        if self.position + 1 >= len(self.rows):
            raise StopIteration
        self.position += 1
        return self.rows[self.position]

    def __len__(self) -> int:
        return len(self.rows)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def current(self) -> Optional[int]:
        if self.position < 0:
            return None
        return self.rows[self.position]

    @property
    def finished(self) -> bool:
        return self._cancelled or self.position + 1 >= len(self.rows)
