from __future__ import annotations

from .punct_sets import DIALOG_CLOSE_TO_OPEN, DIALOG_OPEN_TO_CLOSE


class DialogState:
    """
    Track unclosed dialog quotes across concatenated lines.

    Updates are incremental: callers feed each new line into ``update`` and
    previously processed text is never rescanned. One counter per quote
    family; counters never go below zero. Reset at every paragraph flush.
    """
    __slots__ = ("counts",)

    def __init__(self) -> None:
        self.counts = dict.fromkeys(DIALOG_OPEN_TO_CLOSE.keys(), 0)

    def reset(self) -> None:
        for k in self.counts:
            self.counts[k] = 0

    def update(self, s: str) -> None:
        if not s:
            return
        for ch in s:
            if ch in DIALOG_OPEN_TO_CLOSE:
                self.counts[ch] += 1
            elif ch in DIALOG_CLOSE_TO_OPEN:
                open_ch = DIALOG_CLOSE_TO_OPEN[ch]
                if self.counts[open_ch] > 0:
                    self.counts[open_ch] -= 1

    @property
    def is_unclosed(self) -> bool:
        return any(v > 0 for v in self.counts.values())
