#!/usr/bin/env python
import time
import cProfile

from cpisim import MemoryHierarchy, PseudoRandomStream, default_generators, simulate


def do_cprofile(func):
    """Originally from https://zapier.com/engineering/profiling-python-boss/"""
    def profiled_func(*args, **kwargs):
        profile = cProfile.Profile()
        try:
            profile.enable()
            result = func(*args, **kwargs)
            profile.disable()
            return result
        finally:
            profile.print_stats()
    return profiled_func


class Timer:
    def __enter__(self):
        self.start = time.monotonic()
        return self

    def __exit__(self, *args):
        self.end = time.monotonic()
        self.interval = self.end - self.start


class TimingTests:
    def _access(self, generator, n):
        rng = PseudoRandomStream()
        src = default_generators(rng, 64 * 1024 * 1024)[generator]
        mh = MemoryHierarchy(64, rng=rng)
        with Timer() as t:
            for _ in range(n):
                mh.memory_access(src.next())
        return t.interval

    def time_access10000_seq(self):
        return self._access('seq-4K', 10000)

    def time_access100000_seq(self):
        return self._access('seq-4K', 100000)

    def time_access100000_random(self):
        return self._access('rand-full', 100000)

    def time_access100000_stride(self):
        return self._access('stride-32', 100000)

    @do_cprofile
    def time_simulate1000000(self):
        rng = PseudoRandomStream()
        src = default_generators(rng, 64 * 1024 * 1024)['rand-24K']
        with Timer() as t:
            simulate(src, 64, rng, iterations=1000000)
        return t.interval

    def run(self):
        print("{:>40} | {:<10}".format("Function", "Time (s)"))
        print("-"*40+" | "+"-"*10)
        for k, f in sorted(self.__class__.__dict__.items()):
            if k.startswith('time_'):
                ret = f(self)
                if ret:
                    print("{:>40} | {:>10.4f}".format(k, ret))
                else:
                    print("{:>40} | {:>10}".format(k, "ERROR"))


if __name__ == '__main__':
    TimingTests().run()
