#!/usr/bin/env python3
"""Example hierarchies and runs that can be simulated."""
from cpisim import (MemoryHierarchy, PseudoRandomStream, SequentialStream, StridedStream,
                    RandomStream, load_config, simulate, READ, WRITE)

# ==========================
# Default two-level hierarchy
# ==========================
rng = PseudoRandomStream()

mh = MemoryHierarchy(l1_line_size=64, rng=rng)  # 16kB 4-way L1, 128kB 8-way L2, 50 cycle DRAM

print(mh.memory_access(0x1000, READ))   # cold: 1 + 10 + 50
print(mh.memory_access(0x1000, WRITE))  # hit, line becomes dirty
mh.print_stats()

# ====================================
# Direct mapped L1 with a slower DRAM
# ====================================
mh = MemoryHierarchy(l1_line_size=32, rng=rng,
                     l1_size=8 * 1024, l1_associativity=1,
                     dram_penalty=120)

# ===============================
# Hierarchy from a configuration
# ===============================
config = load_config("machines/default.yml")
mh = MemoryHierarchy.from_dict(config, l1_line_size=128, rng=rng)

# ===================================
# CPI of a few synthetic access shapes
# ===================================
for name, source in [('sequential', SequentialStream(4 * 1024)),
                     ('strided', StridedStream(32, 1024 * 1024)),
                     ('random', RandomStream(rng, 64 * 1024 * 1024))]:
    result = simulate(source, 64, rng, config=config)  # iterations from the configuration
    print("{:<10} CPI {:.4f}".format(name, result.cpi))
