import os
import shlex
from datetime import datetime, timezone

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kdbg.types import PodInfo, PodTarget

# Global consoles for UI functions
_console = Console()
_err_console = Console(stderr=True)

# Plain output for terminals and log collectors that don't render box drawing
_use_simple_ui = os.getenv("KDBG_SIMPLE_UI") == "1"

# Echo every kubectl command before running it
_debug = os.getenv("KDBG_DEBUG") == "1"

UNKNOWN_AGE = "unknown"

_STATUS_STYLES = {
    "Running": "green",
    "Pending": "yellow",
    "Failed": "red",
    "Succeeded": "blue",
}


# ===== Age formatting =====


def format_age(seconds: int) -> str:
    """Format an age in seconds as 45s, 12m, 3h or 2d (truncated, not rounded)."""
    seconds = max(int(seconds), 0)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def pod_age(pod: PodInfo, now: datetime | None = None) -> str:
    if pod.created_at is None:
        return UNKNOWN_AGE
    now = now or datetime.now(timezone.utc)
    return format_age(int((now - pod.created_at).total_seconds()))


# ===== Tables =====


def _styled_status(status: str) -> str:
    style = _STATUS_STYLES.get(status)
    return f"[{style}]{status}[/{style}]" if style else status


def render_pods_table(
    pods: list[PodInfo], verbose: bool = False, now: datetime | None = None
):
    if _use_simple_ui:
        _render_pods_plain(pods, verbose, now)
    else:
        table = Table(title="Pods", title_style="cyan bold", title_justify="left")

        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Namespace", style="dim", no_wrap=True)
        table.add_column("Status", no_wrap=True)
        if verbose:
            table.add_column("Restarts", justify="right")
            table.add_column("Age", justify="right")

        for pod in pods:
            row = [pod.name, pod.namespace, _styled_status(pod.status)]
            if verbose:
                row += [str(pod.restart_count), pod_age(pod, now)]
            table.add_row(*row)

        _console.print(table)

    _console.print(f"\nTotal: {len(pods)} pods")


def _render_pods_plain(pods: list[PodInfo], verbose: bool, now: datetime | None):
    header = f"{'NAME':<40} {'NAMESPACE':<15} {'STATUS':<10}"
    if verbose:
        header += f" {'RESTARTS':<10} {'AGE':<10}"

    _console.print("Pods:", markup=False)
    _console.print(header, markup=False, soft_wrap=True)
    _console.print("-" * len(header), markup=False, soft_wrap=True)
    for pod in pods:
        line = f"{pod.name:<40} {pod.namespace:<15} {pod.status:<10}"
        if verbose:
            line += f" {pod.restart_count:<10} {pod_age(pod, now):<10}"
        _console.print(line, markup=False, highlight=False, soft_wrap=True)


def render_candidates(candidates: list[PodTarget]):
    print_info("Multiple pods found:")
    for target in candidates:
        _console.print(
            f"  - [cyan]{escape(target.name)}[/cyan] "
            f"(namespace: [dim]{escape(target.namespace)}[/dim])"
        )


# ===== Messages =====


def print_success(message: str, prefix: str = "✅"):
    """Print a success message."""
    _console.print(f"[green]{prefix}[/green] {message}")


def print_info(message: str, prefix: str = "ℹ️"):
    """Print an info message."""
    _console.print(f"[blue]{prefix}[/blue]  {message}")


def print_step(message: str, prefix: str = "🔧"):
    """Print a step/progress message."""
    _console.print(f"[cyan]{prefix}[/cyan] {message}")


def print_warning(message: str, prefix: str = "⚠️"):
    """Print a warning message to stderr."""
    _err_console.print(f"[yellow]{prefix}[/yellow]  {message}")


def print_rule():
    if _use_simple_ui:
        _console.print("-" * 75, markup=False)
    else:
        _console.rule(style="dim")


def print_target(action: str, target: PodTarget):
    """Print the header shown before running a command against a pod."""
    print_step(
        f"{action} pod [cyan bold]{escape(target.name)}[/cyan bold] "
        f"(namespace: [dim]{escape(target.namespace)}[/dim])"
    )


def print_command(cmd: list[str]):
    if _debug:
        _console.print(f"[dim]$ {escape(shlex.join(cmd))}[/dim]", highlight=False)
