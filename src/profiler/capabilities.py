"""
Explicit declarations of the operations an object exposes to the profiler.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional


class ProfilerConfigurationError(ValueError):
    """Raised when a capability set cannot be used for profiling."""
    pass


@dataclass(frozen=True)
class Operation:
    """One operation of a capability set."""
    name: str
    profiled: bool = False


class CapabilitySet:
    """
    Named set of operations, each explicitly marked as profiled or not.

    A proxy built from a capability set exposes exactly these operations,
    whatever else the wrapped object may offer.
    """

    def __init__(self, name: str, operations: Iterable[Operation]):
        self.name = name
        self._operations: Dict[str, Operation] = {}

        for operation in operations:
            if not operation.name.isidentifier() or operation.name.startswith('_'):
                raise ProfilerConfigurationError(
                    f"{name}: {operation.name!r} is not a valid public operation name")
            if operation.name in self._operations:
                raise ProfilerConfigurationError(f"{name}: operation {operation.name!r} declared twice")
            self._operations[operation.name] = operation

    @classmethod
    def declare(cls, name: str, profiled: Iterable[str] = (),
                forwarded: Iterable[str] = ()) -> 'CapabilitySet':
        """Build a capability set from lists of profiled and plain operation names."""
        operations = [Operation(op, profiled=True) for op in profiled]
        operations += [Operation(op) for op in forwarded]
        return cls(name, operations)

    def get(self, name: str) -> Optional[Operation]:
        return self._operations.get(name)

    @property
    def profiled_operations(self) -> List[str]:
        return [op.name for op in self._operations.values() if op.profiled]

    def __contains__(self, name: str) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f"CapabilitySet({self.name!r}, profiled={self.profiled_operations})"
