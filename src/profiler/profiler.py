"""
Profiler facade: wraps objects in timing proxies and writes the report.
"""

import logging
from pathlib import Path
from typing import Any, TextIO, Union

from .capabilities import CapabilitySet
from .ledger import ProfiledLedger
from .proxy import ProfilingProxy
from .report import render_report
from ..utils.clock import Clock


class Profiler:
    """
    Times profiled operations of wrapped objects into one shared ledger.

    Every proxy created by the same profiler records into the same ledger,
    so timings from different targets and threads end up in one report.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self.ledger = ProfiledLedger()
        self.start_time = clock.now()
        self.logger = logging.getLogger(__name__)

    def wrap(self, capabilities: CapabilitySet, target: Any) -> Any:
        """
        Wrap ``target`` in a proxy exposing ``capabilities``.

        Raises:
            ProfilerConfigurationError: if no operation is declared profiled
        """
        proxy = ProfilingProxy(capabilities, target, self.clock, self.ledger)
        self.logger.debug(f"Profiling {type(target).__qualname__} as {capabilities}")
        return proxy

    def render(self) -> str:
        """Render the current report text."""
        return render_report(self.start_time, self.ledger.snapshot())

    def write_data(self, path: Union[str, Path]):
        """
        Write the report to a file, replacing any previous content.

        I/O failures are logged and re-raised.
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as sink:
                self.write_to(sink)
        except OSError as e:
            self.logger.error(f"Failed to write profile data to {path}: {e}")
            raise
        self.logger.info(f"Profile data written to {path}")

    def write_to(self, sink: TextIO):
        """Write the report to an open text stream."""
        sink.write(self.render())
        sink.flush()
