"""Simulation wrapper used by the command line.

Builds a Cache from a CacheConfig, replays the trace lines and hands the
finished engine to the reporter / exporters.
"""
from typing import Iterable, Optional, Tuple

from ..core.cache import Cache
from ..core.config import CacheConfig
from ..core.ram import RAM
from ..core.simulator import CacheSimulator
from ..data.stats_export import Exporter, Statistics, export_chart_json, export_chart_pdf
from .report import render_report


class Simulation:
    def __init__(self, config: CacheConfig, *, flush_at_end: bool, ram: Optional[RAM] = None,
                 record_history: bool = True):
        self.config = config
        self.cache = Cache(config, ram=ram, stats=Statistics(record_history=record_history))
        self.sim = CacheSimulator(self.cache, flush_at_end=flush_at_end)

    @property
    def stats(self) -> Statistics:
        return self.cache.stats

    def run(self, lines: Iterable[str]) -> Statistics:
        self.sim.load_trace(lines)
        return self.sim.run_all()

    def report(self, memory_window: Optional[Tuple[int, int]] = None) -> str:
        return render_report(self.cache, memory_window)

    def export(self, csv_path: Optional[str] = None, json_path: Optional[str] = None,
               chart_path: Optional[str] = None):
        if csv_path:
            Exporter.export_stats_csv(csv_path, self.stats)
        if json_path:
            export_chart_json(self.stats.miss_rate_history, self.stats.as_dict(), json_path)
        if chart_path:
            title = (f"{self.config.capacity_kb}KiB, {self.config.block_size}B blocks, "
                     f"{self.config.associativity}-way: miss rate per access")
            export_chart_pdf(self.stats.miss_rate_history, chart_path, title)
