#!/usr/bin/env python
"""Two-level Cache Latency Model."""
import sys

from cpisim.prng import PseudoRandomStream

READ = 0
WRITE = 1

MISS = 0
HIT = 1

L1_SIZE = 16 * 1024
L1_ASSOCIATIVITY = 4
L1_HIT_LATENCY = 1
L2_SIZE = 128 * 1024
L2_LINE_SIZE = 64
L2_ASSOCIATIVITY = 8
L2_HIT_LATENCY = 10
DRAM_SIZE = 64 * 1024 * 1024
DRAM_PENALTY = 50


class ConfigurationError(ValueError):
    """Raised on invalid cache geometry or configuration."""


def is_power2(num):
    """Return True if num is a power of two."""
    return num > 0 and (num & (num - 1)) == 0


class MemoryHierarchy(object):
    """
    L1, L2 and DRAM composed into one latency model.

    Write-back, non-inclusive. Evicted lines are never moved between levels,
    a dirty victim is only charged the latency of the level it would be
    written to.
    """

    def __init__(self, l1_line_size, rng=None,
                 l1_size=L1_SIZE, l1_associativity=L1_ASSOCIATIVITY,
                 l1_hit_latency=L1_HIT_LATENCY,
                 l2_size=L2_SIZE, l2_line_size=L2_LINE_SIZE,
                 l2_associativity=L2_ASSOCIATIVITY, l2_hit_latency=L2_HIT_LATENCY,
                 dram_penalty=DRAM_PENALTY):
        """
        Create hierarchy with the given L1 line size.

        :param l1_line_size: L1 cacheline size in bytes (the swept parameter)
        :param rng: shared PseudoRandomStream used for victim selection in
                    both levels, a default-seeded one is created if None
        :param dram_penalty: cycles charged for a request served by DRAM and
                             again for writing a dirty L2 victim

        All other parameters describe the fixed L1 and L2 geometry.
        """
        if rng is None:
            rng = PseudoRandomStream()
        self.rng = rng
        self.first_level = Cache("L1", l1_size, l1_line_size, l1_associativity,
                                 l1_hit_latency, rng=rng)
        self.last_level = Cache("L2", l2_size, l2_line_size, l2_associativity,
                                l2_hit_latency, rng=rng)
        self.main_memory = MainMemory(dram_penalty, self.last_level)

        self.total_accesses = 0
        self.total_cycles = 0

    @classmethod
    def from_dict(cls, d, l1_line_size, rng=None):
        """
        Create hierarchy from configuration dictionary.

        *d* uses the layout of :data:`cpisim.config.DEFAULT_CONFIG`, missing
        sections or keys fall back to the default constants.
        """
        l1 = d.get('L1', {})
        l2 = d.get('L2', {})
        dram = d.get('DRAM', {})
        return cls(l1_line_size, rng=rng,
                   l1_size=l1.get('size', L1_SIZE),
                   l1_associativity=l1.get('associativity', L1_ASSOCIATIVITY),
                   l1_hit_latency=l1.get('hit_latency', L1_HIT_LATENCY),
                   l2_size=l2.get('size', L2_SIZE),
                   l2_line_size=l2.get('line_size', L2_LINE_SIZE),
                   l2_associativity=l2.get('associativity', L2_ASSOCIATIVITY),
                   l2_hit_latency=l2.get('hit_latency', L2_HIT_LATENCY),
                   dram_penalty=dram.get('penalty', DRAM_PENALTY))

    @property
    def dram_penalty(self):
        return self.main_memory.penalty

    def memory_access(self, addr, kind=READ):
        """
        Access one address and return its cost in cycles.

        :param addr: byte address
        :param kind: READ or WRITE
        """
        l1 = self.first_level
        l2 = self.last_level

        cycles = l1.hit_latency
        outcome, writeback = l1.access(addr, kind)
        if outcome != HIT:
            if writeback:
                # dirty L1 victim written down to L2
                cycles += l2.hit_latency
            cycles += l2.hit_latency
            # refills are reads at L2, a write only dirties the L1 line
            outcome, writeback = l2.access(addr, READ)
            if outcome != HIT:
                cycles += self.main_memory.penalty
                if writeback:
                    cycles += self.main_memory.penalty

        self.total_accesses += 1
        self.total_cycles += cycles
        return cycles

    def average_access_time(self):
        """Return mean cycles per memory access, 0 if nothing was accessed yet."""
        if self.total_accesses == 0:
            return 0
        return self.total_cycles / self.total_accesses

    def reset(self):
        """Invalidate all cache lines and reset all counters."""
        for c in self.levels(with_mem=False):
            c.reset()
        self.total_accesses = 0
        self.total_cycles = 0

    def levels(self, with_mem=True):
        """Return cache levels, optionally including main memory."""
        yield self.first_level
        yield self.last_level
        if with_mem:
            yield self.main_memory

    def stats(self):
        """Collect all stats from all levels."""
        for c in self.levels():
            yield c.stats()

    def print_stats(self, header=True, file=sys.stdout):
        """Pretty print stats table."""
        if header:
            print("LEVEL {:*^10} {:*^10} {:*^10} {:*^10}".format(
                "HIT", "MISS", "WRITEBACK", "HIT-RATE"), file=file)
        for s in self.stats():
            print("{name:>5} {HIT_count:>10} {MISS_count:>10} {WRITEBACK_count:>10} "
                  "{hit_rate:>10.4f}".format(**s), file=file)
        print("AMAT  {:.4f} cycles over {} accesses".format(
            self.average_access_time(), self.total_accesses), file=file)

    def __repr__(self):
        """Return string representation of object."""
        return 'MemoryHierarchy({!r}, {!r}, {!r})'.format(
            self.first_level, self.last_level, self.main_memory)


class CacheLine(object):
    """One cache slot. Only presence and state are modeled, never data."""

    __slots__ = ('valid', 'tag', 'dirty')

    def __init__(self):
        self.invalidate()

    def invalidate(self):
        self.valid = False
        self.tag = 0
        self.dirty = False

    def __repr__(self):
        return 'CacheLine(valid={!r}, tag={:#x}, dirty={!r})'.format(
            self.valid, self.tag, self.dirty)


class Cache(object):
    """Set-associative cache level with random replacement."""

    def __init__(self, name, size, line_size, associativity, hit_latency, rng=None):
        """
        Create one cache level out of given geometry.

        :param name: level name used in reports, e.g. "L1"
        :param size: total capacity in bytes
        :param line_size: bytes per cacheline, must be a power of two
        :param associativity: number of ways per set
        :param hit_latency: cycles charged for an access to this level
        :param rng: PseudoRandomStream for victim selection, a default-seeded
                    one is created if None

        The number of sets is size/(line_size*associativity) and has to be a
        power of two, so that set index and tag can be taken from bit fields
        of the block address.
        """
        for param, value in [('size', size), ('line_size', line_size),
                             ('associativity', associativity)]:
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    "{}: {} needs to be a positive integer, got {!r}.".format(name, param, value))
        if not isinstance(hit_latency, int) or hit_latency < 0:
            raise ConfigurationError(
                "{}: hit_latency needs to be a non-negative integer, got {!r}.".format(
                    name, hit_latency))
        if size % (line_size * associativity) != 0:
            raise ConfigurationError(
                "{}: size ({}) needs to be a multiple of line_size*associativity ({}).".format(
                    name, size, line_size * associativity))
        if not is_power2(line_size):
            raise ConfigurationError(
                "{}: line_size needs to be a power of two, got {}.".format(name, line_size))
        sets = size // (line_size * associativity)
        if not is_power2(sets):
            raise ConfigurationError(
                "{}: number of sets needs to be a power of two, got {}.".format(name, sets))

        self.name = name
        self.size = size
        self.line_size = line_size
        self.associativity = associativity
        self.hit_latency = hit_latency
        self.sets = sets
        self.offset_bits = line_size.bit_length() - 1
        self.set_bits = sets.bit_length() - 1
        self.rng = rng if rng is not None else PseudoRandomStream()

        self.lines = [[CacheLine() for _ in range(associativity)] for _ in range(sets)]
        self.hits = 0
        self.misses = 0
        self.writebacks = 0

    def decompose(self, addr):
        """Return (set index, tag) of *addr*."""
        block = addr >> self.offset_bits
        return block & (self.sets - 1), block >> self.set_bits

    def access(self, addr, kind=READ):
        """
        Look up *addr*, allocating it on a miss.

        Returns a tuple (outcome, writeback_needed), where outcome is HIT or
        MISS and writeback_needed tells whether a dirty line got evicted.
        """
        set_index, tag = self.decompose(addr)
        ways = self.lines[set_index]

        for line in ways:
            if line.valid and line.tag == tag:
                if kind == WRITE:
                    line.dirty = True
                self.hits += 1
                return HIT, False

        self.misses += 1
        writeback = False
        for line in ways:
            if not line.valid:
                victim = line
                break
        else:
            victim = ways[self.rng.next() % self.associativity]
            if victim.dirty:
                writeback = True
                self.writebacks += 1

        victim.valid = True
        victim.tag = tag
        victim.dirty = kind == WRITE
        return MISS, writeback

    def contains(self, addr):
        """Return True if *addr* is cached, without touching any state."""
        set_index, tag = self.decompose(addr)
        return any(l.valid and l.tag == tag for l in self.lines[set_index])

    @property
    def cached(self):
        """Set of first addresses of all cached lines."""
        return {((l.tag << self.set_bits) | set_index) << self.offset_bits
                for set_index, ways in enumerate(self.lines)
                for l in ways if l.valid}

    def count_invalid_entries(self):
        """Return number of invalid lines."""
        return sum(1 for ways in self.lines for l in ways if not l.valid)

    def hit_rate(self):
        """Return hits/(hits+misses), 0 if nothing was accessed yet."""
        accesses = self.hits + self.misses
        if accesses == 0:
            return 0
        return self.hits / accesses

    def reset(self):
        """Mark all lines invalid and reset stats."""
        for ways in self.lines:
            for l in ways:
                l.invalidate()
        self.hits = 0
        self.misses = 0
        self.writebacks = 0

    def stats(self):
        """Return dictionay with all stats at this level."""
        return {'name': self.name,
                'HIT_count': self.hits,
                'MISS_count': self.misses,
                'WRITEBACK_count': self.writebacks,
                'hit_rate': self.hit_rate()}

    def __repr__(self):
        """Return string representation of object."""
        return ('Cache(name={!r}, size={!r}, line_size={!r}, associativity={!r}, '
                'hit_latency={!r})').format(
            self.name, self.size, self.line_size, self.associativity, self.hit_latency)


class MainMemory(object):
    """Main memory object. Last level of hierarchy, able to hit on all requests."""

    def __init__(self, penalty, last_level, name=None):
        """
        Create main memory behind *last_level*.

        :param penalty: cycles charged per DRAM transfer
        :param last_level: the last cache level, all its misses load from here
                           and all its writebacks store to here
        """
        assert isinstance(last_level, Cache), \
            "last_level needs to be a Cache object."
        if not isinstance(penalty, int) or penalty < 0:
            raise ConfigurationError(
                "DRAM penalty needs to be a non-negative integer, got {!r}.".format(penalty))
        self.name = "MEM" if name is None else name
        self.penalty = penalty
        self.last_level = last_level

    def stats(self):
        """Return dictionay with all stats at this level."""
        # everything is derived from the last level cache, nothing to reset here
        loads = self.last_level.misses
        return {'name': self.name,
                'LOAD_count': loads,
                'STORE_count': self.last_level.writebacks,
                'HIT_count': loads,
                'MISS_count': 0,
                'WRITEBACK_count': 0,
                'hit_rate': 1.0 if loads else 0}

    def __repr__(self):
        """Return string representation of object."""
        return 'MainMemory(penalty={!r}, last_level={})'.format(self.penalty, self.last_level.name)
