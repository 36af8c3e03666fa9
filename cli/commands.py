"""Typer CLI for exercising singleton registries.

Commands:
* ``strategies`` - list registered strategies
* ``stress``     - race many threads against a fresh registry and check that
                   exactly one construction happened
* ``bench``      - time the warm accessor of each strategy
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from singleton_registry.config import settings
from singleton_registry.registry import available_strategies, create_registry
from singleton_registry.utils.exceptions import ConstructionError, SingletonError
from singleton_registry.utils.logging import configure_logging

logger = logging.getLogger(__name__)

console = Console()

# Strategies that build from a factory callable (import_holder needs a module)
FACTORY_STRATEGIES = ("double_checked", "synchronized", "eager")


# --------------------------------------------------------------------------- #
# Runners (also used directly by tests)                                       #
# --------------------------------------------------------------------------- #
@dataclass
class StressResult:
    strategy: str
    threads: int
    constructions: int
    identities: int
    failures: int
    elapsed: float

    @property
    def ok(self) -> bool:
        return self.constructions == 1 and self.identities == 1


class _Payload:
    pass


def run_stress(threads: int, strategy: str, fail_first: bool = False) -> StressResult:
    """Start *threads* callers at the same moment against a fresh registry."""
    strategy = strategy.lower()
    if strategy not in FACTORY_STRATEGIES:
        raise ValueError(f"stress supports {FACTORY_STRATEGIES}, got {strategy!r}")
    if fail_first and strategy == "eager":
        raise ValueError("--fail-first cannot be combined with the eager strategy")

    attempts: List[int] = []
    constructions: List[_Payload] = []

    def factory() -> _Payload:
        attempts.append(1)
        if fail_first and len(attempts) == 1:
            time.sleep(0.01)
            raise RuntimeError("deliberate first-attempt failure")
        payload = _Payload()
        constructions.append(payload)
        return payload

    registry = create_registry(factory, strategy=strategy, name=f"stress-{strategy}")
    barrier = threading.Barrier(threads)
    seen: List[int] = []
    failures: List[BaseException] = []

    def worker() -> None:
        barrier.wait()
        try:
            seen.append(id(registry.get_instance()))
        except ConstructionError as exc:
            failures.append(exc)

    start = time.perf_counter()
    with concurrent.futures.ThreadPoolExecutor(max_workers=threads) as ex:
        futs = [ex.submit(worker) for _ in range(threads)]
        for fut in concurrent.futures.as_completed(futs):
            fut.result()
    # Callers that only saw the failed attempt; the next call must succeed.
    seen.append(id(registry.get_instance()))
    elapsed = time.perf_counter() - start

    logger.info("stress %s: %d constructions, %d failures", strategy, len(constructions), len(failures))
    return StressResult(
        strategy=strategy,
        threads=threads,
        constructions=len(constructions),
        identities=len(set(seen)),
        failures=len(failures),
        elapsed=elapsed,
    )


def run_bench(threads: int, calls: int, strategies: Optional[List[str]] = None) -> dict:
    """Return mean seconds per warm ``get_instance`` call for each strategy."""
    results = {}
    for strategy in strategies or FACTORY_STRATEGIES:
        registry = create_registry(_Payload, strategy=strategy, name=f"bench-{strategy}")
        registry.get_instance()
        barrier = threading.Barrier(threads)

        def worker() -> None:
            barrier.wait()
            get = registry.get_instance
            for _ in range(calls):
                get()

        start = time.perf_counter()
        with concurrent.futures.ThreadPoolExecutor(max_workers=threads) as ex:
            for fut in [ex.submit(worker) for _ in range(threads)]:
                fut.result()
        results[strategy] = (time.perf_counter() - start) / (threads * calls)
    return results


# --------------------------------------------------------------------------- #
# Typer app - entry-point is exposed in pyproject.toml as "singleton-registry" #
# --------------------------------------------------------------------------- #
app = typer.Typer(help="Inspect and stress-test singleton registries.")


@app.callback(invoke_without_command=False)
def _root_options(
    log_level: str = typer.Option(
        settings.log_level,
        "--log-level",
        help="Logging level for the run.",
        show_default=True,
        case_sensitive=False,
    ),
):
    """Shared option processed before any sub-command executes."""
    configure_logging(level=log_level, log_to_file=settings.log_to_file, log_dir=settings.log_dir)


@app.command("strategies")
def _strategies():
    """List registered registry strategies."""
    for name in available_strategies():
        marker = " (default)" if name == settings.strategy else ""
        typer.echo(f"{name}{marker}")


@app.command("stress")
def _stress(
    threads: int = typer.Option(100, "--threads", "-t", min=1, help="Concurrent callers."),
    strategy: str = typer.Option(settings.strategy, "--strategy", "-s", help="Registry strategy."),
    fail_first: bool = typer.Option(False, "--fail-first", help="Make the first construction attempt fail."),
):
    """Race THREADS callers against a fresh registry."""
    try:
        result = run_stress(threads, strategy, fail_first=fail_first)
    except (ValueError, SingletonError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)

    table = Table(title=f"stress: {result.strategy}")
    table.add_column("Threads", justify="right")
    table.add_column("Constructions", justify="right")
    table.add_column("Identities", justify="right")
    table.add_column("Failed calls", justify="right")
    table.add_column("Elapsed", justify="right")
    table.add_row(
        str(result.threads),
        str(result.constructions),
        str(result.identities),
        str(result.failures),
        f"{result.elapsed * 1000:.1f} ms",
    )
    console.print(table)

    if not result.ok:
        console.print("[bold red]Single-instance invariant violated[/bold red]")
        raise typer.Exit(1)
    console.print("[green]OK[/green]")


@app.command("bench")
def _bench(
    threads: int = typer.Option(8, "--threads", "-t", min=1, help="Concurrent callers."),
    calls: int = typer.Option(10_000, "--calls", "-n", min=1, help="Calls per thread."),
):
    """Time warm get_instance() calls for each strategy."""
    results = run_bench(threads, calls)
    table = Table(title=f"bench: {threads} threads x {calls} calls")
    table.add_column("Strategy", style="cyan")
    table.add_column("ns / call", justify="right", style="green")
    for strategy, seconds in results.items():
        table.add_row(strategy, f"{seconds * 1e9:.0f}")
    console.print(table)
