"""
Indexed binary min-heap used as Dijkstra's priority queue.

Besides the usual array layout the heap keeps a vertex -> slot index so a
queued vertex's distance can be lowered in O(log n) instead of pushing a
duplicate entry. The array and the index are only ever changed together,
inside ``_swap`` and the public operations.

Complexity:
    insert       O(log n)
    extract_min  O(log n)
    decrease_key O(log n)
"""

import logging
import math
from typing import Dict, List

logger = logging.getLogger(__name__)


class HeapEntry:
    __slots__ = ('vertex', 'distance')

    def __init__(self, vertex: int = -1, distance: float = math.inf):
        self.vertex = vertex
        self.distance = distance

    def is_empty(self) -> bool:
        return self.vertex == -1

    def __eq__(self, other):
        if not isinstance(other, HeapEntry):
            return NotImplemented
        return self.vertex == other.vertex and self.distance == other.distance

    def __repr__(self):
        return f"HeapEntry({self.vertex}, {self.distance:.2f})"


def empty_entry() -> HeapEntry:
    """Sentinel returned by extract_min on an empty heap"""
    return HeapEntry(-1, math.inf)


class MinHeap:
    def __init__(self):
        self._heap: List[HeapEntry] = []
        self._positions: Dict[int, int] = {}

    @staticmethod
    def _parent(i: int) -> int:
        return (i - 1) // 2

    @staticmethod
    def _left_child(i: int) -> int:
        return 2 * i + 1

    @staticmethod
    def _right_child(i: int) -> int:
        return 2 * i + 2

    def _swap(self, i: int, j: int):
        heap = self._heap
        self._positions[heap[i].vertex] = j
        self._positions[heap[j].vertex] = i
        heap[i], heap[j] = heap[j], heap[i]

    def _sift_up(self, i: int):
        heap = self._heap
        while i > 0 and heap[self._parent(i)].distance > heap[i].distance:
            parent = self._parent(i)
            logger.debug(f"Sift up: vertex {heap[i].vertex} above {heap[parent].vertex}")
            self._swap(i, parent)
            i = parent

    def _sift_down(self, i: int):
        heap = self._heap
        size = len(heap)
        while True:
            smallest = i
            left = self._left_child(i)
            right = self._right_child(i)

            # strict "<" keeps the left child on equal priority
            if left < size and heap[left].distance < heap[smallest].distance:
                smallest = left
            if right < size and heap[right].distance < heap[smallest].distance:
                smallest = right

            if smallest == i:
                return
            logger.debug(f"Sift down: vertex {heap[i].vertex} below {heap[smallest].vertex}")
            self._swap(i, smallest)
            i = smallest

    def insert(self, vertex: int, distance: float):
        """Append a vertex and restore heap order"""
        if vertex in self._positions:
            raise ValueError(f"Vertex {vertex} is already in the heap, use decrease_key")
        logger.debug(f"Heap insert: vertex {vertex} with distance {distance:.2f}")
        self._heap.append(HeapEntry(vertex, distance))
        index = len(self._heap) - 1
        self._positions[vertex] = index
        self._sift_up(index)

    def extract_min(self) -> HeapEntry:
        """Remove and return the minimum entry.

        An empty heap is not an error: the sentinel from ``empty_entry()`` is
        returned and callers check ``entry.is_empty()``.
        """
        if not self._heap:
            return empty_entry()

        heap = self._heap
        min_entry = heap[0]
        last = heap.pop()
        del self._positions[min_entry.vertex]

        if heap:
            heap[0] = last
            self._positions[last.vertex] = 0
            self._sift_down(0)

        logger.debug(f"Heap extract: vertex {min_entry.vertex} with distance {min_entry.distance:.2f}")
        return min_entry

    def decrease_key(self, vertex: int, new_distance: float):
        """Lower a vertex's distance, inserting it when it is not queued"""
        index = self._positions.get(vertex)
        if index is None:
            self.insert(vertex, new_distance)
            return

        entry = self._heap[index]
        if new_distance > entry.distance:
            raise ValueError(
                f"decrease_key cannot raise vertex {vertex} from {entry.distance} to {new_distance}"
            )
        if new_distance == entry.distance:
            return

        logger.debug(f"Heap decrease key: vertex {vertex} from {entry.distance:.2f} to {new_distance:.2f}")
        entry.distance = new_distance
        # priorities only shrink, so sifting up is enough
        self._sift_up(index)

    def peek(self) -> HeapEntry:
        if not self._heap:
            return empty_entry()
        top = self._heap[0]
        return HeapEntry(top.vertex, top.distance)

    def contains(self, vertex: int) -> bool:
        return vertex in self._positions

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self):
        return len(self._heap)

    def __contains__(self, vertex):
        return self.contains(vertex)

    def __repr__(self):
        entries = ", ".join(f"({e.vertex}:{e.distance:.2f})" for e in self._heap)
        return f"MinHeap([{entries}])"
