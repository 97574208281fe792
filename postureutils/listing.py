"""Resource and control identifiers grouped by scanning status."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from postureutils.statuses import ScanningStatus


def _unique(items: Iterable[str]) -> list[str]:
    """Drop repeated items, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))


def _trim_unique(items: Iterable[str], remove: Iterable[str]) -> list[str]:
    """Drop repeated items and items found in remove, keeping order."""
    excluded = set(remove)
    return [item for item in _unique(items) if item not in excluded]


class AllListsIterator:
    """Iterates failed, passed, skipped then other identifiers."""

    def __init__(self, items: Iterable[str]) -> None:
        self._items = list(items)
        self._index = 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._index >= len(self._items):
            raise StopIteration
        item = self._items[self._index]
        self._index += 1
        return item

    def has_next(self) -> bool:
        return self._index < len(self._items)


class AllLists:
    """Lists of identifiers grouped by status, for internal report handling."""

    def __init__(
        self,
        *,
        passed: Iterable[str] = (),
        failed: Iterable[str] = (),
        skipped: Iterable[str] = (),
        excluded: Iterable[str] = (),
        other: Iterable[str] = (),
    ) -> None:
        self._passed = list(passed)
        self._failed = list(failed)
        self._skipped = list(skipped)
        self._excluded = list(excluded)
        self._other = list(other)

    def failed(self) -> list[str]:
        return self._failed

    def passed(self) -> list[str]:
        """Passed identifiers, followed by excluded ones."""
        return self._passed + self._excluded

    def skipped(self) -> list[str]:
        return self._skipped

    def other(self) -> list[str]:
        return self._other

    def all(self) -> AllListsIterator:
        """Iterate failed, passed, skipped and other identifiers."""
        return AllListsIterator(
            [*self._failed, *self._passed, *self._skipped, *self._other]
        )

    def append(self, status: ScanningStatus, *args: str) -> None:
        """Add identifiers to the list matching status; unknown statuses go to other."""
        if status == ScanningStatus.PASSED:
            self._passed.extend(args)
        elif status == ScanningStatus.SKIPPED:
            self._skipped.extend(args)
        elif status == ScanningStatus.FAILED:
            self._failed.extend(args)
        else:
            self._other.extend(args)

    def update(self, other: AllLists) -> None:
        """Append all identifiers of another AllLists, duplicates included."""
        self._passed.extend(other._passed)
        self._skipped.extend(other._skipped)
        self._failed.extend(other._failed)
        self._other.extend(other._other)

    def to_unique_controls(self) -> None:
        """Remove duplicates within each list."""
        self._failed = _unique(self._failed)
        self._passed = _unique(self._passed)
        self._skipped = _unique(self._skipped)
        self._other = _unique(self._other)

    def to_unique_resources(self) -> None:
        """Remove duplicates so that each identifier keeps only its worst status."""
        self._failed = _unique(self._failed)
        trimmed = list(self._failed)
        self._passed = _trim_unique(self._passed, trimmed)
        trimmed.extend(self._passed)
        self._skipped = _trim_unique(self._skipped, trimmed)
        trimmed.extend(self._skipped)
        self._other = _trim_unique(self._other, trimmed)


def mock_all_lists_for_integration() -> AllLists:
    """A fixed AllLists sample with overlapping and repeated identifiers."""
    return AllLists(
        passed=["a", "b"],
        failed=["a", "e"],
        skipped=["f"],
        other=["i", "g", "h", "i"],
    )