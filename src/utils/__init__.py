"""
Utility modules for the web crawler system.
"""

from .config import Config, ConfigManager, load_config, get_config
from .clock import Clock, SystemClock, FakeClock

__all__ = ['Config', 'ConfigManager', 'load_config', 'get_config', 'Clock', 'SystemClock', 'FakeClock']
