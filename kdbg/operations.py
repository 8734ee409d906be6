"""Pod resolution and kubectl actions for kdbg."""

import shlex
import time
from collections.abc import Callable, Sequence
from typing import Any

import typer

from kdbg.errors import ActionError, AmbiguousPodError, KdbgError, PodNotFoundError
from kdbg.kubernetes import list_pods, namespace_args, run_interactive
from kdbg.types import PodInfo, PodTarget
from kdbg.ui import print_info, render_candidates

SHELLS = ("/bin/bash", "/bin/sh")
DEFAULT_DEBUG_IMAGE = "busybox"
DEFAULT_DEBUG_NAMESPACE = "default"


# ===== Pod resolution =====


def find_pod(pattern: str, namespace: str | None) -> PodTarget:
    """Resolve a name fragment to exactly one pod.

    Any pod whose name contains pattern (case-sensitive) is a match. There is
    no best-match ranking: zero or several matches are both errors.

    Raises:
        PodNotFoundError: If no pod name contains pattern
        AmbiguousPodError: If more than one pod name contains pattern
        QueryError: If listing pods fails
    """
    matches = [
        PodTarget(name=pod.name, namespace=pod.namespace)
        for pod in list_pods(namespace)
        if pattern in pod.name
    ]

    if not matches:
        raise PodNotFoundError(pattern)
    if len(matches) > 1:
        raise AmbiguousPodError(pattern, matches)
    return matches[0]


def find_pod_handler(pattern: str, namespace: str | None) -> PodTarget:
    try:
        return find_pod(pattern, namespace)
    except AmbiguousPodError as e:
        render_candidates(e.candidates)
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    except KdbgError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)


def list_pods_handler(namespace: str | None) -> list[PodInfo]:
    try:
        return list_pods(namespace)
    except KdbgError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)


def run_action_handler(action: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run an action, turning kdbg errors and Ctrl+C into a CLI exit."""
    try:
        return action(*args, **kwargs)
    except KdbgError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        print_info("Interrupted.")
        raise typer.Exit(code=130)


# ===== Pod actions =====


def _run(args: list[str], failure: str) -> None:
    if run_interactive(args) != 0:
        raise ActionError(failure)


def show_logs(target: PodTarget, tail: int = 100, follow: bool = False) -> None:
    args = ["logs", target.name, "-n", target.namespace, "--tail", str(tail)]
    if follow:
        args.append("-f")
    _run(args, "Failed to get logs")


def exec_in_pod(target: PodTarget, command: str = "/bin/sh") -> None:
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise ActionError(f"Invalid command: {e}") from e
    if not argv:
        raise ActionError("No command given to execute")
    _run(
        ["exec", "-it", target.name, "-n", target.namespace, "--", *argv],
        "Failed to exec into pod",
    )


def describe_pod(target: PodTarget) -> None:
    _run(
        ["describe", "pod", target.name, "-n", target.namespace],
        "Failed to describe pod",
    )


def show_top(namespace: str | None) -> bool:
    """Show pod CPU/memory usage. Returns False if kubectl top failed."""
    return run_interactive(["top", "pods", *namespace_args(namespace)]) == 0


def port_forward(target: PodTarget, local_port: int, pod_port: int) -> None:
    _run(
        [
            "port-forward",
            target.name,
            f"{local_port}:{pod_port}",
            "-n",
            target.namespace,
        ],
        "Port forwarding failed",
    )


def open_shell(target: PodTarget, shells: Sequence[str] = SHELLS) -> str:
    """Open an interactive shell, trying each shell in order.

    Errors are hidden for every attempt except the last one. Returns the
    shell that succeeded.
    """
    for idx, shell in enumerate(shells):
        is_last = idx == len(shells) - 1
        code = run_interactive(
            ["exec", "-it", target.name, "-n", target.namespace, "--", shell],
            show_errors=is_last,
        )
        if code == 0:
            return shell

    tried = ", ".join(shell.rsplit("/", 1)[-1] for shell in shells)
    raise ActionError(f"Failed to open shell (tried {tried})")


def debug_pod_name(now: float | None = None) -> str:
    return f"debug-{int(time.time() if now is None else now)}"


def run_debug_pod(
    name: str,
    image: str = DEFAULT_DEBUG_IMAGE,
    namespace: str = DEFAULT_DEBUG_NAMESPACE,
) -> None:
    """Start a throwaway pod with a shell; kubectl deletes it on exit (--rm)."""
    _run(
        [
            "run",
            name,
            "--image",
            image,
            "-n",
            namespace,
            "--restart=Never",
            "--rm",
            "-it",
            "--",
            "/bin/sh",
        ],
        "Failed to create debug pod",
    )


def restart_pod(target: PodTarget) -> None:
    _run(
        ["delete", "pod", target.name, "-n", target.namespace],
        "Failed to delete pod",
    )


def show_events(target: PodTarget) -> None:
    _run(
        [
            "get",
            "events",
            "-n",
            target.namespace,
            "--field-selector",
            f"involvedObject.name={target.name}",
            "--sort-by",
            ".lastTimestamp",
        ],
        "Failed to get events",
    )
