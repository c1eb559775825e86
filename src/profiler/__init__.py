"""
Call profiling for the web crawler system.
"""

from .capabilities import CapabilitySet, Operation, ProfilerConfigurationError
from .ledger import LedgerEntry, OperationKey, ProfiledLedger
from .proxy import ProfilingProxy, ProfilerInvocationError
from .profiler import Profiler

__all__ = [
    'CapabilitySet', 'Operation', 'ProfilerConfigurationError',
    'LedgerEntry', 'OperationKey', 'ProfiledLedger',
    'ProfilingProxy', 'ProfilerInvocationError',
    'Profiler'
]
