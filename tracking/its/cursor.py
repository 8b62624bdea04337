"""Sequential cursor over the tokens captured by the ITS grammar.

The grammar captures a fixed number of token slots per block. An absent
optional block still occupies its slots, each holding None, so the cursor
always advances by the block's full width. Presence of a block is decided from
its own slots, never from how many tokens happen to remain.
"""

from collections.abc import Sequence

__all__ = ["FieldCursor"]


class FieldCursor:
    """Read position into an ordered token sequence.

    Example:
        >>> cursor = FieldCursor(("NR", "01", "L", None))
        >>> cursor.take(3)
        ('NR', '01', 'L')
        >>> cursor.remaining
        1
    """

    def __init__(self, tokens: Sequence[str | None]) -> None:
        self._tokens = tuple(tokens)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        """Number of token slots not yet consumed."""
        return len(self._tokens) - self._position

    def next(self) -> str | None:
        """Consume one slot; None means the slot's group did not participate."""
        return self.take(1)[0]

    def take(self, count: int) -> tuple[str | None, ...]:
        """Consume ``count`` slots.

        Raises:
            IndexError: If fewer than ``count`` slots remain. The grammar fixes
                the slot count, so this indicates a grammar/extraction mismatch.
        """
        if count > self.remaining:
            raise IndexError(
                f"cannot read {count} tokens at {self._position}, "
                f"{self.remaining} remaining"
            )
        start = self._position
        self._position += count
        return self._tokens[start : self._position]

    def take_block(self, count: int) -> tuple[str, ...] | None:
        """Consume a block of ``count`` slots that is present or absent as a whole.

        Returns:
            The block's tokens, or None if its first slot is absent
        """
        block = self.take(count)
        if block[0] is None:
            return None
        return block  # type: ignore[return-value]

    def has_next(self, count: int = 1) -> bool:
        """Whether the next ``count`` slots exist and are all present."""
        if count > self.remaining:
            return False
        end = self._position + count
        return all(token is not None for token in self._tokens[self._position : end])
