"""Compare window policies side-by-side on the same scenario.

Usage:
    python scripts/compare_policies.py --tasks 500 --rate-limit 700 --seed 42
"""

import argparse
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich.console import Console
from rich.table import Table

from ratesched.metrics.collector import MetricsCollector, TimelineReport
from ratesched.models.batch import RatePolicy, TaskBatch
from ratesched.simulator.engine import schedule_batch
from ratesched.simulator.generator import ScenarioGenerator
from ratesched.utils.logging import setup_logging

console = Console()


def run_with_policy(batch: TaskBatch, policy: RatePolicy) -> TimelineReport:
    """Schedule `batch` under `policy` and return the metrics report."""
    batch = batch.model_copy(update={"policy": policy})
    records = schedule_batch(batch)
    return MetricsCollector(console=console).calculate(batch, records)


COMPARED_METRICS = [
    # (label, report field, higher value is worse)
    ("Makespan (ms)", "makespan", True),
    ("Utilization", "utilization", False),
    ("Avg wait (ms)", "avg_wait", True),
    ("P95 wait (ms)", "p95_wait", True),
    ("Max wait (ms)", "max_wait", True),
    ("Delayed tasks", "delayed_tasks", True),
    ("Peak window usage (ms)", "peak_window_usage", True),
    ("Deadline misses", "deadline_misses", True),
]


def _change(admission, strict, higher_is_worse: bool) -> str:
    if not admission:
        return "-"
    pct = (strict - admission) / admission * 100
    worse = pct > 0 if higher_is_worse else pct < 0
    return f"[{'red' if worse else 'green'}]{pct:+.1f}%[/]"


def print_comparison(admission: TimelineReport, strict: TimelineReport):
    """Print both reports with the change from admission to strict."""
    table = Table(title="Admission vs Strict", border_style="cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Admission", justify="right")
    table.add_column("Strict", justify="right")
    table.add_column("Change", justify="right")

    for label, attr, higher_is_worse in COMPARED_METRICS:
        a, s = getattr(admission, attr), getattr(strict, attr)
        if attr == "utilization":
            shown = (f"{a:.1%}", f"{s:.1%}")
        elif isinstance(a, float):
            shown = (f"{a:.2f}", f"{s:.2f}")
        else:
            shown = (str(a), str(s))
        table.add_row(label, *shown, _change(a, s, higher_is_worse))

    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Compare admission vs strict window policies")
    parser.add_argument("--tasks", type=int, default=200, help="Number of tasks (default: 200)")
    parser.add_argument("--rate-limit", type=int, default=700, help="rateLimitMs (default: 700)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--arrival-spread", type=int, default=20000,
                        help="Tasks arrive within [0, spread] ms (default: 20000)")
    parser.add_argument("--deadline-slack", type=float, default=None,
                        help="Give tasks deadlines of created_at + duration * slack")
    parser.add_argument("--log-level", type=str, default="WARNING")

    args = parser.parse_args()
    setup_logging(args.log_level)

    gen = ScenarioGenerator(seed=args.seed)
    batch = gen.generate_batch(
        num_tasks=args.tasks,
        rate_limit_ms=args.rate_limit,
        max_arrival_spread=args.arrival_spread,
        deadline_slack=args.deadline_slack,
    )

    console.print(
        f"[bold]Scenario:[/bold] {len(batch.tasks)} tasks, "
        f"limit {batch.rate_limit_ms}ms/{batch.window_ms}ms, seed={args.seed}\n"
    )

    print_comparison(
        run_with_policy(batch, RatePolicy.ADMISSION),
        run_with_policy(batch, RatePolicy.STRICT),
    )


if __name__ == "__main__":
    main()
