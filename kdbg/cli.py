import typer
from rich.markup import escape

from kdbg.operations import (
    DEFAULT_DEBUG_IMAGE,
    DEFAULT_DEBUG_NAMESPACE,
    debug_pod_name,
    describe_pod,
    exec_in_pod,
    find_pod_handler,
    list_pods_handler,
    open_shell,
    port_forward,
    restart_pod,
    run_action_handler,
    run_debug_pod,
    show_events,
    show_logs,
    show_top,
)
from kdbg.ui import (
    print_info,
    print_rule,
    print_step,
    print_success,
    print_target,
    print_warning,
    render_pods_table,
)

app = typer.Typer(
    help="Kubernetes Pod Debugger - fast kubectl wrapper.",
    no_args_is_help=True,
)

_POD_HELP = "Pod name, or any part of it."
_NAMESPACE_HELP = "Namespace to search. Defaults to all namespaces."


@app.command("list", help="List pods.")
def list_(
    namespace: str = typer.Option(
        None, "--namespace", "-n", help="Namespace to list. Defaults to all namespaces."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Also show restart counts and age."
    ),
):
    pod_list = list_pods_handler(namespace)
    render_pods_table(pod_list, verbose=verbose)


@app.command(help="Show pod logs.")
def logs(
    pod: str = typer.Argument(..., help=_POD_HELP),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
    follow: bool = typer.Option(False, "--follow", "-f", help="Stream new log lines."),
    tail: int = typer.Option(100, "--tail", min=0, help="Number of lines to show."),
):
    target = find_pod_handler(pod, namespace)
    print_target("Logs for", target)
    print_rule()
    run_action_handler(show_logs, target, tail=tail, follow=follow)


@app.command("exec", help="Execute a command in a pod.")
def exec_(
    pod: str = typer.Argument(..., help=_POD_HELP),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
    command: str = typer.Option(
        "/bin/sh", "--command", "-c", help="Command to run in the pod."
    ),
):
    target = find_pod_handler(pod, namespace)
    print_target("Executing in", target)
    print_info(f"Command: [yellow]{escape(command)}[/yellow]")
    print_rule()
    run_action_handler(exec_in_pod, target, command)


@app.command(help="Describe a pod.")
def describe(
    pod: str = typer.Argument(..., help=_POD_HELP),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
):
    target = find_pod_handler(pod, namespace)
    print_target("Describing", target)
    print_rule()
    run_action_handler(describe_pod, target)


@app.command(help="Show pod CPU and memory usage.")
def top(
    namespace: str = typer.Option(
        None, "--namespace", "-n", help="Namespace to show. Defaults to all namespaces."
    ),
):
    print_step("Pod resource usage")
    print_rule()
    if not run_action_handler(show_top, namespace):
        print_warning(
            "Failed to get resource usage (metrics-server may not be installed)"
        )


@app.command(help="Forward a local port to a pod.")
def forward(
    pod: str = typer.Argument(..., help=_POD_HELP),
    local_port: int = typer.Argument(..., min=1, max=65535, help="Local port."),
    pod_port: int = typer.Argument(..., min=1, max=65535, help="Port in the pod."),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
):
    target = find_pod_handler(pod, namespace)
    print_step(
        f"Port forwarding: [cyan]localhost:{local_port}[/cyan] -> "
        f"[cyan bold]{escape(target.name)}[/cyan bold]:{pod_port} "
        f"(namespace: [dim]{escape(target.namespace)}[/dim])"
    )
    print_info("Press Ctrl+C to stop.")
    print_rule()
    run_action_handler(port_forward, target, local_port, pod_port)


@app.command(help="Open an interactive shell in a pod (bash, falling back to sh).")
def shell(
    pod: str = typer.Argument(..., help=_POD_HELP),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
):
    target = find_pod_handler(pod, namespace)
    print_target("Opening shell in", target)
    print_rule()
    run_action_handler(open_shell, target)


@app.command(help="Start a throwaway debug pod and open a shell in it.")
def debug(
    image: str = typer.Option(
        DEFAULT_DEBUG_IMAGE, "--image", "-i", help="Container image to run."
    ),
    namespace: str = typer.Option(
        DEFAULT_DEBUG_NAMESPACE, "--namespace", "-n", help="Namespace to run in."
    ),
):
    name = debug_pod_name()
    print_step(
        f"Creating debug pod [cyan bold]{name}[/cyan bold] "
        f"(image: [yellow]{escape(image)}[/yellow], "
        f"namespace: [dim]{escape(namespace)}[/dim])"
    )
    print_info("The pod is deleted when you exit the shell.")
    print_rule()
    run_action_handler(run_debug_pod, name, image=image, namespace=namespace)


@app.command(help="Restart a pod by deleting it so its controller recreates it.")
def restart(
    pod: str = typer.Argument(..., help=_POD_HELP),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
):
    target = find_pod_handler(pod, namespace)
    print_target("Restarting", target)
    print_info("This deletes the pod and lets its controller recreate it.")
    print_rule()
    run_action_handler(restart_pod, target)
    print_success("Pod deleted. Waiting for recreation...")


@app.command(help="Show events for a pod.")
def events(
    pod: str = typer.Argument(..., help=_POD_HELP),
    namespace: str = typer.Option(None, "--namespace", "-n", help=_NAMESPACE_HELP),
):
    target = find_pod_handler(pod, namespace)
    print_target("Events for", target)
    print_rule()
    run_action_handler(show_events, target)


if __name__ == "__main__":
    app()
