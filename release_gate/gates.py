"""Quality gates: tests, formatting, lint and docs, run in order.

Gates share build and cache artifacts, so they run one at a time. The
first failure stops the run; later gates are never started.
"""

from __future__ import annotations

from collections.abc import Sequence

from .config import GateConfig
from .errors import GateFailure
from .models import GateResult
from .shell import check_command, info, step


def run_gate(gate: GateConfig) -> GateResult:
    """Run a single gate command and report whether it passed."""
    step(f"Gate: {gate.name}")
    diagnostic = check_command(gate.command)
    if diagnostic is None:
        return GateResult(name=gate.name, passed=True)
    return GateResult(name=gate.name, passed=False, message=diagnostic)


def run_gates(
    gates: Sequence[GateConfig], results: list[GateResult] | None = None
) -> list[GateResult]:
    """Run all gates sequentially, fail-fast.

    Args:
        gates: Gates in execution order.
        results: Optional list to append each result to as it completes,
                 so the failing gate is recorded even when this raises.

    Returns:
        The results list.

    Raises:
        GateFailure: For the first gate that fails.
    """
    if results is None:
        results = []
    for gate in gates:
        result = run_gate(gate)
        results.append(result)
        if not result.passed:
            raise GateFailure(gate.name, result.message)
        info(f"{gate.name} passed ✓")
    return results
