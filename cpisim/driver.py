"""Instruction-mix driver turning address streams into CPI numbers."""
import logging
from collections import namedtuple

import pandas as pd

from cpisim.cache import MemoryHierarchy, READ, WRITE
from cpisim.config import ITERATIONS, MEMORY_PROBABILITY, WRITE_PROBABILITY

log = logging.getLogger(__name__)

SimulationResult = namedtuple(
    'SimulationResult',
    ['iterations', 'memory_instructions', 'total_cycles', 'cpi', 'hierarchy'])


def simulate(address_source, l1_line_size, rng, iterations=None, config=None,
             memory_probability=None, write_probability=None):
    """
    Run *iterations* simulated instructions and return a SimulationResult.

    :param address_source: AddressStream providing the memory addresses
    :param l1_line_size: L1 cacheline size in bytes
    :param rng: shared PseudoRandomStream, also handed to the hierarchy
    :param iterations: number of instructions
    :param config: configuration dictionary, its machine sections describe the
                   hierarchy and its simulation section supplies iterations
                   and probabilities not given as arguments
    :param memory_probability: share of instructions accessing memory
    :param write_probability: share of memory instructions that are writes

    Anything neither passed nor configured falls back to the defaults. A fresh
    hierarchy is built on every call, the stream and the address source keep
    their state across calls. Non-memory instructions cost one cycle.
    """
    config = config or {}
    sim = config.get('simulation', {})
    if iterations is None:
        iterations = sim.get('iterations', ITERATIONS)
    if memory_probability is None:
        memory_probability = sim.get('memory_probability', MEMORY_PROBABILITY)
    if write_probability is None:
        write_probability = sim.get('write_probability', WRITE_PROBABILITY)

    if iterations <= 0:
        raise ValueError("iterations must be positive, got {!r}".format(iterations))
    hierarchy = MemoryHierarchy.from_dict(config, l1_line_size, rng=rng)

    total_cycles = 0
    memory_instructions = 0
    for _ in range(iterations):
        if rng.random() <= memory_probability:
            addr = address_source.next()
            kind = WRITE if rng.random() < write_probability else READ
            total_cycles += hierarchy.memory_access(addr, kind)
            memory_instructions += 1
        else:
            total_cycles += 1

    cpi = total_cycles / iterations
    log.debug("%r line_size=%d: %d cycles, %d memory instructions, CPI %.4f",
              address_source, l1_line_size, total_cycles, memory_instructions, cpi)
    return SimulationResult(iterations, memory_instructions, total_cycles, cpi, hierarchy)


def sweep(generators, line_sizes, rng, iterations=None, config=None, callback=None):
    """
    Simulate every generator with every L1 line size.

    :param generators: mapping (or list of pairs) of name to AddressStream
    :param line_sizes: L1 line sizes to simulate
    :param iterations: instructions per run, see simulate() for the fallbacks
    :param callback: called as callback(name, line_size, result) after each run

    Generators form the outer loop, so each generator's counters continue
    from one line size to the next. Returns a pandas DataFrame with one row
    per run.
    """
    if hasattr(generators, 'items'):
        generators = generators.items()

    data = []
    for name, source in generators:
        log.info("simulating %s", name)
        for line_size in line_sizes:
            result = simulate(source, line_size, rng, iterations=iterations, config=config)
            l1 = result.hierarchy.first_level
            l2 = result.hierarchy.last_level
            data.append({'generator': name,
                         'line_size': line_size,
                         'cpi': result.cpi,
                         'memory_instructions': result.memory_instructions,
                         'total_cycles': result.total_cycles,
                         'l1_hit_rate': l1.hit_rate(),
                         'l2_hit_rate': l2.hit_rate(),
                         'average_access_time': result.hierarchy.average_access_time()})
            if callback is not None:
                callback(name, line_size, result)
    return pd.DataFrame(data, columns=['generator', 'line_size', 'cpi', 'memory_instructions',
                                       'total_cycles', 'l1_hit_rate', 'l2_hit_rate',
                                       'average_access_time'])
