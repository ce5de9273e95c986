"""Multiply-with-carry pseudo-random stream."""
import time

DEFAULT_W = 0xABABAB55
DEFAULT_Z = 0x05080902

MASK32 = 0xFFFFFFFF


class PseudoRandomStream(object):
    """
    Deterministic 32-bit random source (Marsaglia's multiply-with-carry).

    One instance is meant to be shared by every consumer of randomness in a
    simulation (victim selection, address generation, instruction mix). The
    produced sequence only depends on the seed and on the order of draws, so
    reordering calls between consumers changes every subsequent outcome.

    Not safe for concurrent callers.
    """

    def __init__(self, w=DEFAULT_W, z=DEFAULT_Z):
        """
        Create stream with given seed words.

        :param w: first 32-bit seed word, 0 is replaced by the default
        :param z: second 32-bit seed word, 0 is replaced by the default
        """
        self.seed(w, z)

    @classmethod
    def from_time(cls):
        """Create stream seeded from wall-clock time."""
        now = time.time()
        return cls(int(now) & MASK32, int(now * 1000000) & MASK32)

    def seed(self, w, z):
        """Reset state. Zero words would degenerate the stream, so defaults are used instead."""
        w &= MASK32
        z &= MASK32
        self.w = w if w != 0 else DEFAULT_W
        self.z = z if z != 0 else DEFAULT_Z

    def next(self):
        """Advance state and return next unsigned 32-bit value."""
        self.z = (36969 * (self.z & 0xFFFF) + (self.z >> 16)) & MASK32
        self.w = (18000 * (self.w & 0xFFFF) + (self.w >> 16)) & MASK32
        return ((self.z << 16) + self.w) & MASK32

    def random(self):
        """Return next value scaled to [0, 1)."""
        return self.next() / 4294967296.0

    def __iter__(self):
        return self

    __next__ = next

    def __repr__(self):
        return 'PseudoRandomStream(w={:#010x}, z={:#010x})'.format(self.w, self.z)
