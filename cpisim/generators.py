"""Synthetic address streams."""
from collections import OrderedDict

from cpisim.cache import ConfigurationError


class AddressStream(object):
    """
    Base class of all address sources.

    Every stream produces unsigned addresses in [0, bound). Streams are
    iterators, so ``next(stream)`` and ``stream.next()`` are equivalent.
    """

    def __init__(self, bound):
        if not isinstance(bound, int) or bound <= 0:
            raise ConfigurationError(
                "address space bound must be a positive integer, got {!r}".format(bound))
        self.bound = bound

    def next(self):
        """Return next address."""
        raise NotImplementedError("next() method not implemented")

    def __iter__(self):
        return self

    def __next__(self):
        return self.next()


class SequentialStream(AddressStream):
    """Byte-by-byte sequential walk, wrapping at bound. First address is 0."""

    def __init__(self, bound):
        super(SequentialStream, self).__init__(bound)
        self.counter = 0

    def next(self):
        addr = self.counter % self.bound
        self.counter += 1
        return addr

    def __repr__(self):
        return 'SequentialStream(bound={!r})'.format(self.bound)


class StridedStream(AddressStream):
    """
    Walk advancing by a fixed stride, wrapping at bound.

    The counter is advanced before it is returned, so the first address is
    *stride* (not 0).
    """

    def __init__(self, stride, bound):
        super(StridedStream, self).__init__(bound)
        if not isinstance(stride, int) or stride <= 0:
            raise ConfigurationError(
                "stride must be a positive integer, got {!r}".format(stride))
        self.stride = stride
        self.counter = 0

    def next(self):
        self.counter += self.stride
        return self.counter % self.bound

    def __repr__(self):
        return 'StridedStream(stride={!r}, bound={!r})'.format(self.stride, self.bound)


class RandomStream(AddressStream):
    """Uniform random addresses drawn from the shared pseudo-random stream."""

    def __init__(self, rng, bound):
        super(RandomStream, self).__init__(bound)
        self.rng = rng

    def next(self):
        return self.rng.next() % self.bound

    def __repr__(self):
        return 'RandomStream(bound={!r})'.format(self.bound)


def default_generators(rng, dram_size):
    """
    Return the standard set of address streams, keyed by name.

    :param rng: shared PseudoRandomStream, used by the random streams
    :param dram_size: size of the full address range in bytes
    """
    return OrderedDict([
        ('seq-full', SequentialStream(dram_size)),
        ('rand-24K', RandomStream(rng, 24 * 1024)),
        ('rand-full', RandomStream(rng, dram_size)),
        ('seq-4K', SequentialStream(4 * 1024)),
        ('stride-32', StridedStream(32, 64 * 16 * 1024)),
    ])
