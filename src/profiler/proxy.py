"""
Forwarding proxy that times the profiled operations of a wrapped object.
"""

import functools
from typing import Any, Callable

from .capabilities import CapabilitySet, ProfilerConfigurationError
from .ledger import OperationKey, ProfiledLedger
from ..utils.clock import Clock


class ProfilerInvocationError(RuntimeError):
    """Raised when the proxy cannot dispatch a call to its target."""
    pass


class ProfilingProxy:
    """
    Exposes the operations of a capability set and forwards them to a target.

    Calls to profiled operations are timed with the injected clock and the
    elapsed time is recorded in the ledger whether the call returns or
    raises. Exceptions raised by the target reach the caller unchanged.
    Plain operations are forwarded untouched.
    """

    def __init__(self, capabilities: CapabilitySet, target: Any, clock: Clock, ledger: ProfiledLedger):
        if not capabilities.profiled_operations:
            raise ProfilerConfigurationError(
                f"{capabilities.name} doesn't declare any profiled operations")

        self._capabilities = capabilities
        self._target = target
        self._clock = clock
        self._ledger = ledger

    def __getattr__(self, name: str) -> Callable:
        # Only reached for names not set in __init__
        if name.startswith('_'):
            raise AttributeError(name)

        operation = self._capabilities.get(name)
        if operation is None:
            raise AttributeError(f"{self._capabilities.name} has no operation {name!r}")

        try:
            member = getattr(self._target, name)
        except AttributeError as e:
            raise ProfilerInvocationError(
                f"{type(self._target).__qualname__} does not implement {self._capabilities.name}.{name}"
            ) from e

        if not callable(member):
            raise ProfilerInvocationError(
                f"{type(self._target).__qualname__}.{name} is not callable")

        if not operation.profiled:
            return member

        return self._timed(OperationKey(type(self._target), name), member)

    def _timed(self, key: OperationKey, method: Callable) -> Callable:
        clock = self._clock
        ledger = self._ledger

        @functools.wraps(method)
        def invoke(*args, **kwargs):
            start = clock.now()
            try:
                return method(*args, **kwargs)
            finally:
                ledger.record(key, clock.now() - start)

        return invoke

    def __dir__(self):
        return sorted(op.name for op in self._capabilities)

    def __repr__(self) -> str:
        return f"<ProfilingProxy {self._capabilities.name} -> {self._target!r}>"
