"""kubectl invocation and pod listing for kdbg."""

import json
import os
import subprocess
from datetime import datetime, timezone
from typing import Any

from kdbg.errors import DecodeError, TransportError
from kdbg.types import PodInfo
from kdbg.ui import print_command

_KUBECTL = os.getenv("KDBG_KUBECTL", "kubectl")

UNKNOWN = "unknown"
UNKNOWN_PHASE = "Unknown"


# ===== Running kubectl =====


def kubectl_command(args: list[str]) -> list[str]:
    return [_KUBECTL, *args]


def namespace_args(namespace: str | None) -> list[str]:
    """Scope a kubectl call to one namespace, or to all of them when None."""
    if namespace:
        return ["-n", namespace]
    return ["--all-namespaces"]


def run_kubectl(args: list[str]) -> subprocess.CompletedProcess[str]:
    cmd = kubectl_command(args)
    print_command(cmd)
    try:
        return subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        raise TransportError(f"Could not run {cmd[0]}: {e}") from e


def run_interactive(args: list[str], show_errors: bool = True) -> int:
    """Run kubectl attached to the current terminal and return its exit code.

    When show_errors is False, kubectl's stderr is discarded.
    """
    cmd = kubectl_command(args)
    print_command(cmd)
    try:
        result = subprocess.run(
            cmd,
            stderr=None if show_errors else subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        raise TransportError(f"Could not run {cmd[0]}: {e}") from e
    return result.returncode


# ===== Pod listing =====


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp such as 2025-01-01T10:00:00Z.

    Returns None for missing or malformed values.
    """
    if not isinstance(value, str) or not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _restart_count(status: dict[str, Any]) -> int:
    container_statuses = status.get("containerStatuses")
    if not isinstance(container_statuses, list) or not container_statuses:
        return 0

    count = _as_dict(container_statuses[0]).get("restartCount")
    # bool is an int subclass
    if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
        return count
    return 0


def decode_pod(item: dict[str, Any]) -> PodInfo:
    metadata = _as_dict(item.get("metadata"))
    status = _as_dict(item.get("status"))

    return PodInfo(
        name=metadata.get("name") or UNKNOWN,
        namespace=metadata.get("namespace") or UNKNOWN,
        status=status.get("phase") or UNKNOWN_PHASE,
        restart_count=_restart_count(status),
        created_at=parse_timestamp(metadata.get("creationTimestamp")),
    )


def decode_pods(payload: Any) -> list[PodInfo]:
    """Turn a `kubectl get pods -o json` document into PodInfo records.

    Raises:
        DecodeError: If the document is not a JSON object
    """
    if not isinstance(payload, dict):
        raise DecodeError("kubectl returned JSON that is not a pod list object.")

    items = payload.get("items") or []
    if not isinstance(items, list):
        raise DecodeError("kubectl returned a pod list whose 'items' is not a list.")

    return [decode_pod(_as_dict(item)) for item in items]


def list_pods(namespace: str | None) -> list[PodInfo]:
    """List pods in one namespace, or in every namespace when namespace is None.

    Raises:
        TransportError: If kubectl cannot be run or exits non-zero
        DecodeError: If kubectl's output is not valid JSON
    """
    result = run_kubectl(["get", "pods", *namespace_args(namespace), "-o", "json"])

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        message = f"kubectl get pods failed with exit code {result.returncode}"
        if stderr:
            message = f"{message}: {stderr}"
        raise TransportError(message, returncode=result.returncode)

    try:
        payload = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Could not decode kubectl output as JSON: {e}") from e

    return decode_pods(payload)
