from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


class CapacityExceededError(Exception):
    """Raised when appending to a full CappedOrderedSet."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(f"Capacity of {capacity} reached")


@dataclass
class CappedOrderedSet:
    """
    Fixed-capacity, append-only collection with set semantics.

    Insertion order is preserved; duplicates are ignored; nothing is ever
    removed. Used for the authorized-creator list and rarity pool membership.
    """

    capacity: int
    _items: list[str | int] = field(default_factory=list)

    @classmethod
    def from_iterable(cls, capacity: int, items: Iterable[str | int]) -> "CappedOrderedSet":
        capped = cls(capacity=capacity)
        capped.extend(items)
        return capped

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str | int]:
        return iter(self._items)

    def __getitem__(self, index: int) -> str | int:
        return self._items[index]

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def add(self, item: str | int) -> bool:
        """
        Append an item if it is not already present.

        Returns:
            True if the item was added, False if it was already a member.

        Raises:
            CapacityExceededError: If the item is new and the set is full.
        """
        if item in self._items:
            return False
        if self.is_full:
            raise CapacityExceededError(self.capacity)
        self._items.append(item)
        return True

    def extend(self, items: Iterable[str | int]) -> int:
        """Add every new item in order. Returns how many were added."""
        return sum(1 for item in items if self.add(item))

    def to_list(self) -> list[str | int]:
        return list(self._items)
