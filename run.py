"""Entry point for the cache simulator.

Usage:
    python run.py -c 1 -b 4 -a 1 < trace.txt   # replay a trace
    python run.py --demo                       # short built-in trace
"""
import sys
from cachesim.cli import main

DEMO_TRACE = [
    "1 0x0 0xAAAA",
    "0 0x400",
    "0 0x0",
]


def demo():
    # direct-mapped 1KiB cache, 4-byte blocks: 0x0 and 0x400 share set 0
    from cachesim.core.config import CacheConfig
    from cachesim.simulation import Simulation
    sim = Simulation(CacheConfig(1, 4, 1), flush_at_end=True)
    sim.run(DEMO_TRACE)
    s = sim.stats
    print('Accesses:', s.accesses)
    print('Misses:', s.misses)
    print('Read misses:', s.read_misses)
    print('Write misses:', s.write_misses)
    print('Dirty evictions:', s.dirty_evictions)
    print('Miss rate: %.2f%%' % s.miss_rate)


if __name__ == '__main__':
    if '--demo' in sys.argv:
        demo()
    else:
        sys.exit(main())
