"""Doubly linked list with a search cursor and a running storage-size total."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

Matcher = Callable[[Any, Any], bool]


@dataclass(eq=False, repr=False)
class ListElement:
    """One node of a :class:`LinkedList`."""

    content: Any
    prev: Optional["ListElement"] = None
    next: Optional["ListElement"] = None

    def __repr__(self) -> str:
        return f"ListElement({self.content!r})"


def int_compare(a: int, b: int) -> bool:
    """Match callback comparing two integers by value."""
    return a == b


def string_compare(a: str, b: str) -> bool:
    """Match callback comparing two strings by value."""
    return a == b


class LinkedList:
    """A doubly linked list that remembers the element last found.

    ``size`` accumulates the sizes given to :meth:`append` and :meth:`insert`
    and is reset only by :meth:`clear`.
    """

    def __init__(self) -> None:
        self.first: Optional[ListElement] = None
        self.last: Optional[ListElement] = None
        self.current: Optional[ListElement] = None
        self.count = 0
        self.size = 0

    def __len__(self) -> int:
        return self.count

    def _elements(self) -> Iterator[ListElement]:
        element = self.first
        while element is not None:
            yield element
            element = element.next

    def __iter__(self) -> Iterator[Any]:
        return (element.content for element in self._elements())

    def __reversed__(self) -> Iterator[Any]:
        element = self.last
        while element is not None:
            yield element.content
            element = element.prev

    def append(self, content: Any, size: int = 0) -> ListElement:
        """Add ``content`` at the end and return its element."""
        element = ListElement(content, prev=self.last)
        if self.first is None:
            self.first = element
        else:
            self.last.next = element
        self.last = element
        self.count += 1
        self.size += size
        return element

    def insert(self, content: Any, size: int = 0, before: Optional[ListElement] = None) -> ListElement:
        """Insert ``content`` in front of ``before``; append if ``before`` is None."""
        if before is None:
            return self.append(content, size)
        element = ListElement(content, prev=before.prev, next=before)
        before.prev = element
        if element.prev is not None:
            element.prev.next = element
        else:
            self.first = element
        self.count += 1
        self.size += size
        return element

    @staticmethod
    def _matches(candidate: Any, content: Any, match: Optional[Matcher]) -> bool:
        if match is None:
            return candidate is content
        return bool(match(candidate, content))

    def find(self, content: Any, match: Optional[Matcher] = None) -> Optional[ListElement]:
        """Return the first element matching ``content``, or None.

        Without ``match`` elements are compared by identity. The cursor is
        tried first; a successful search moves the cursor to the result.
        """
        if self.current is not None and self._matches(self.current.content, content, match):
            return self.current
        for element in self._elements():
            if self._matches(element.content, content, match):
                self.current = element
                return element
        return None

    def remove(self, content: Any, match: Optional[Matcher] = None) -> bool:
        """Unlink the element matching ``content``; return whether one was found."""
        saved = self.current
        target = self.find(content, match)
        if target is None:
            return False
        if target.prev is None:
            self.first = target.next
        else:
            target.prev.next = target.next
        if target.next is None:
            self.last = target.prev
        else:
            target.next.prev = target.prev
        self.current = target.next if saved is target else saved
        target.prev = target.next = None
        self.count -= 1
        return True

    def pop_head(self) -> Any:
        """Remove the first element and return its content."""
        first = self.first
        if first is None:
            raise IndexError("pop from empty list")
        if self.current is first:
            self.current = first.next
        if self.last is first:
            self.last = None
        self.first = first.next
        if self.first is not None:
            self.first.prev = None
        first.next = None
        self.count -= 1
        return first.content

    def pop_tail(self) -> Any:
        """Remove the last element and return its content."""
        last = self.last
        if last is None:
            raise IndexError("pop from empty list")
        if self.current is last:
            self.current = last.prev
        if self.first is last:
            self.first = None
        self.last = last.prev
        if self.last is not None:
            self.last.next = None
        last.prev = None
        self.count -= 1
        return last.content

    def clear(self) -> None:
        """Remove every element and reset the counters."""
        self.first = self.last = self.current = None
        self.count = 0
        self.size = 0

    def next_element(self, pos: Optional[ListElement]) -> Optional[ListElement]:
        """Element after ``pos``; the first element when ``pos`` is None."""
        return self.first if pos is None else pos.next

    def prev_element(self, pos: Optional[ListElement]) -> Optional[ListElement]:
        """Element before ``pos``; the last element when ``pos`` is None."""
        return self.last if pos is None else pos.prev