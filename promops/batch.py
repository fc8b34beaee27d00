"""Ordered batch of operations"""
from typing import Iterable, Iterator, List, Optional, Tuple

from .models import Operation


class PrometheusOperations:
    """Append-only sequence of operations.

    Insertion order is the replay order. Nothing is deduplicated: two
    operations against the same series are both kept.
    """

    def __init__(self, operations: Iterable[Operation] = ()):
        self._operations: List[Operation] = []
        self.extend(operations)

    def push(self, operation: Operation) -> None:
        """Append one operation"""
        self._operations.append(operation)

    def extend(self, operations: Iterable[Operation]) -> None:
        """Append operations in order, same as pushing them one at a time"""
        # Snapshot first, the source may be this batch
        self._operations.extend(list(operations))

    @property
    def operations(self) -> Tuple[Operation, ...]:
        return tuple(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __eq__(self, other):
        if not isinstance(other, PrometheusOperations):
            return NotImplemented
        return self._operations == other._operations

    def __repr__(self) -> str:
        return f"PrometheusOperations({len(self._operations)} operations)"

    def to_bytes(self) -> bytes:
        """Serialize to the protobuf wire format"""
        from .codec import encode_batch
        return encode_batch(self)

    @classmethod
    def from_bytes(cls, data: bytes, strict: Optional[bool] = None) -> "PrometheusOperations":
        """Parse protobuf wire data produced by ``to_bytes``.

        ``strict`` defaults to the ``strict_decode`` setting.
        """
        from .codec import decode_batch
        return decode_batch(data, strict=strict)
