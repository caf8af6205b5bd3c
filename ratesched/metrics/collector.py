"""Metrics Collector — measures a computed timeline."""

from dataclasses import dataclass
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ratesched.metrics.checks import peak_window_usage
from ratesched.models.batch import TaskBatch
from ratesched.models.task import ExecutionRecord


@dataclass
class TimelineReport:
    """Container for all computed metrics."""
    policy: str = ""
    rate_limit_ms: int = 0
    window_ms: int = 0
    total_tasks: int = 0
    makespan: int = 0
    busy_time: int = 0
    utilization: float = 0.0
    avg_wait: float = 0.0
    p95_wait: int = 0
    max_wait: int = 0
    delayed_tasks: int = 0
    peak_window_usage: int = 0
    overlong_tasks: int = 0
    deadline_misses: int = 0


class MetricsCollector:
    """Computes and reports timeline metrics."""

    def __init__(self, console: Optional[Console] = None):
        self.report: Optional[TimelineReport] = None
        self.console = console or Console()

    def calculate(
        self,
        batch: TaskBatch,
        records: Sequence[ExecutionRecord],
    ) -> TimelineReport:
        """Compute all metrics for `records` scheduled from `batch`."""
        report = TimelineReport(
            policy=batch.policy.value,
            rate_limit_ms=batch.rate_limit_ms,
            window_ms=batch.window_ms,
            total_tasks=len(records),
        )
        tasks = batch.task_map()

        if records:
            report.makespan = records[-1].end - batch.start_time
            report.busy_time = sum(r.duration for r in records)
            if report.makespan > 0:
                report.utilization = report.busy_time / report.makespan

            # Wait = start - max(created_at, start_time): time spent ready but not running
            waits = sorted(
                r.start - max(tasks[r.id].created_at, batch.start_time)
                for r in records
            )
            report.avg_wait = sum(waits) / len(waits)
            report.max_wait = waits[-1]
            p95_index = int(len(waits) * 0.95)
            report.p95_wait = waits[min(p95_index, len(waits) - 1)]
            report.delayed_tasks = sum(1 for w in waits if w > 0)

            report.peak_window_usage = peak_window_usage(records, batch.window_ms)
            report.overlong_tasks = sum(1 for r in records if r.duration > batch.rate_limit_ms)
            report.deadline_misses = sum(
                1 for r in records
                if tasks[r.id].deadline is not None and r.end > tasks[r.id].deadline
            )

        self.report = report
        return report

    def print_report(self) -> None:
        """Print formatted metrics report."""
        if self.report is None:
            self.console.print("No metrics calculated yet. Run calculate() first.")
            return

        r = self.report
        self.console.print(Panel(
            f"[bold cyan]ratesched — Timeline Report[/bold cyan]\n"
            f"Policy: [bold yellow]{r.policy}[/bold yellow]  "
            f"Limit: [bold]{r.rate_limit_ms}ms / {r.window_ms}ms[/bold]",
            border_style="cyan",
        ))

        table = Table(title="Timeline Metrics", border_style="green")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Tasks", str(r.total_tasks))
        table.add_row("Makespan", f"{r.makespan}ms")
        table.add_row("Busy Time", f"{r.busy_time}ms")
        table.add_row("Utilization", f"{r.utilization:.1%}")
        table.add_row("Avg Wait", f"{r.avg_wait:.1f}ms")
        table.add_row("P95 Wait", f"{r.p95_wait}ms")
        table.add_row("Max Wait", f"{r.max_wait}ms")
        table.add_row("Delayed Tasks", str(r.delayed_tasks))
        table.add_row(
            "Peak Window Usage",
            f"[{'red' if r.peak_window_usage > r.rate_limit_ms else 'green'}]"
            f"{r.peak_window_usage}ms[/]"
        )
        table.add_row("Overlong Tasks", f"[yellow]{r.overlong_tasks}[/yellow]")
        table.add_row(
            "Deadline Misses",
            f"[{'red' if r.deadline_misses else 'green'}]{r.deadline_misses}[/]"
        )
        self.console.print(table)

    def print_timeline(
        self,
        batch: TaskBatch,
        records: Sequence[ExecutionRecord],
        width: int = 40,
        limit: Optional[int] = 50,
    ) -> None:
        """Print one row per record with a bar placing it on the timeline."""
        tasks = batch.task_map()
        shown = records if limit is None else records[:limit]

        table = Table(title="Execution Timeline", border_style="blue")
        table.add_column("Task", style="bold")
        table.add_column("Priority", justify="right")
        table.add_column("Created", justify="right")
        table.add_column("Start", justify="right")
        table.add_column("End", justify="right")
        table.add_column("Timeline")

        if records:
            origin = batch.start_time
            span = max(records[-1].end - origin, 1)
            for rec in shown:
                task = tasks[rec.id]
                lead = int((rec.start - origin) / span * width)
                bar_len = max(1, int(rec.duration / span * width))
                bar = "░" * lead + "█" * bar_len
                bar = bar[:width].ljust(width, "░")
                table.add_row(
                    rec.id, str(task.priority), str(task.created_at),
                    str(rec.start), str(rec.end), bar,
                )
        self.console.print(table)

        if limit is not None and len(records) > limit:
            self.console.print(f"[dim]… {len(records) - limit} more records not shown[/dim]")
