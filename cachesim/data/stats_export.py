"""Statistics and exporter.
"""
import csv
import json
from typing import Dict, List


def export_chart_json(miss_rate_history: List[float], stats: Dict[str, float], fpath: str) -> str:
    """Export miss-rate history and stats to a JSON file. Returns the saved path.
    """
    data = {
        'miss_rate_history': list(miss_rate_history),
        'stats': stats
    }
    with open(fpath, 'w', encoding='utf-8') as fh:
        json.dump(data, fh, indent=2)
    return fpath


def export_chart_pdf(miss_rate_history: List[float], fpath: str, title: str = "") -> str:
    """Plot the running miss rate (percent) after each access to a PDF.

    The final miss rate is drawn as a dashed reference line. Returns the saved
    file path.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    rates = list(miss_rate_history)
    accesses = range(1, len(rates) + 1)
    fig, ax = plt.subplots(figsize=(7, 3))
    if rates:
        ax.step(accesses, rates, where="post", color="#1f77b4", linewidth=1.2, label="running miss rate")
        ax.axhline(rates[-1], color="#d62728", linestyle="--", linewidth=1,
                   label=f"final {rates[-1]:.2f}%")
        ax.set_xlim(1, max(len(rates), 2))
        ax.legend(loc="upper right", fontsize="small")
    ax.set_ylim(0, 105)
    ax.set_xlabel("Trace access #")
    ax.set_ylabel("Miss rate (%)")
    ax.set_title(title or f"Miss rate over {len(rates)} accesses")
    fig.tight_layout()
    fig.savefig(fpath, format="pdf")
    plt.close(fig)
    return fpath


def _percent(part: int, whole: int) -> float:
    return (part * 100.0 / whole) if whole else 0.0


class Statistics:
    FIELDS = [
        'accesses', 'reads', 'writes', 'hits', 'misses', 'read_misses', 'write_misses',
        'dirty_evictions', 'memory_reads', 'memory_writes', 'flushed_blocks',
        'malformed_records', 'rejected_records',
    ]

    def __init__(self, record_history: bool = True):
        # counters start from zero; a new replay gets a new Statistics
        # the per-access miss-rate series only feeds the chart/JSON exports
        self.record_history = record_history
        self.accesses = 0
        self.reads = 0
        self.writes = 0
        self.hits = 0
        self.misses = 0
        self.read_misses = 0
        self.write_misses = 0
        self.dirty_evictions = 0
        self.memory_reads = 0
        self.memory_writes = 0
        self.flushed_blocks = 0
        self.malformed_records = 0
        self.rejected_records = 0
        self.miss_rate_history: List[float] = []

    def record_access(self, hit: bool):
        # call this once per completed read or write
        self.accesses += 1
        if hit:
            self.hits += 1
        else:
            self.misses += 1
        if self.record_history:
            self.miss_rate_history.append(self.miss_rate)

    @property
    def hit_rate(self):
        return _percent(self.hits, self.accesses)

    @property
    def miss_rate(self):
        return _percent(self.misses, self.accesses)

    @property
    def read_miss_rate(self):
        return _percent(self.read_misses, self.reads)

    @property
    def write_miss_rate(self):
        return _percent(self.write_misses, self.writes)

    def as_dict(self) -> Dict[str, float]:
        d = {name: getattr(self, name) for name in self.FIELDS}
        d.update(
            hit_rate=self.hit_rate,
            miss_rate=self.miss_rate,
            read_miss_rate=self.read_miss_rate,
            write_miss_rate=self.write_miss_rate,
        )
        return d


class Exporter:
    @staticmethod
    def export_stats_csv(path: str, stats: Statistics):
        row = stats.as_dict()
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(list(row.keys()))
            writer.writerow(list(row.values()))
