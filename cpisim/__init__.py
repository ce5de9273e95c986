"""Cycles-per-instruction estimation on a simulated two-level cache hierarchy."""
from .cache import (MemoryHierarchy, Cache, CacheLine, MainMemory, ConfigurationError,
                    READ, WRITE, HIT, MISS)
from .prng import PseudoRandomStream
from .generators import (AddressStream, SequentialStream, StridedStream, RandomStream,
                         default_generators)
from .config import load_config, DEFAULT_CONFIG
from .driver import simulate, sweep, SimulationResult

__version__ = '0.1.0'

__all__ = ['MemoryHierarchy', 'Cache', 'CacheLine', 'MainMemory', 'ConfigurationError',
           'READ', 'WRITE', 'HIT', 'MISS', 'PseudoRandomStream', 'AddressStream',
           'SequentialStream', 'StridedStream', 'RandomStream', 'default_generators',
           'load_config', 'DEFAULT_CONFIG', 'simulate', 'sweep', 'SimulationResult']
