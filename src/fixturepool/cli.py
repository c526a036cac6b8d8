#!/usr/bin/env python3
"""
Command line reporters and admin actions for the fixture pool.

Usage:
    # Pool totals for the active environment (TEST_ENV, default qa)
    fixturepool status

    # Reset every fixture to available, then print totals
    fixturepool cleanup --env dev

    # Seeded data of every environment
    fixturepool environments

    # Acquire and release one user and one product per environment
    fixturepool smoke --env qa --env dev

    # Run a test command in three parallel workers
    fixturepool run-parallel --workers 3 -- pytest tests/e2e

    # Serve the admin API
    fixturepool serve
"""

import argparse
import os
import subprocess
import sys
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import IO, TextIO

import structlog

from fixturepool.catalog.environments import get_catalog, list_environments
from fixturepool.config.logging import configure_logging
from fixturepool.config.settings import get_settings
from fixturepool.core.exceptions import FixturePoolError
from fixturepool.core.pool_manager import ResourcePoolManager
from fixturepool.data.models.fixture import TypeStatus
from fixturepool.data.store import PoolStoreFile, store_path_for
from fixturepool.testing import WORKER_ID_ENV

log = structlog.get_logger()


def _data_dir(args: argparse.Namespace) -> Path:
    return args.data_dir if args.data_dir is not None else get_settings().data_dir


def _print_status(status: dict[str, TypeStatus]) -> None:
    for fixture_type, info in status.items():
        print(f"\n{fixture_type.upper()}:")
        print(f"  Total:     {info.total}")
        print(f"  Available: {info.available}")
        print(f"  In Use:    {info.in_use}")


def cmd_status(args: argparse.Namespace) -> int:
    """Print per-type totals for one environment."""
    manager = ResourcePoolManager(args.env, data_dir=_data_dir(args))
    print(f"\nData Pool Status [{manager.environment.upper()}]")
    print("=" * 40)
    _print_status(manager.status())
    return 0


def cmd_cleanup(args: argparse.Namespace) -> int:
    """Reset the pool of one environment."""
    print("Cleaning up test data pool...\n")
    try:
        manager = ResourcePoolManager(args.env, data_dir=_data_dir(args))
        manager.cleanup()
        print("\nData Pool Status After Cleanup:")
        print("=" * 40)
        _print_status(manager.status())
    except FixturePoolError as e:
        print(f"\n[FAIL] Cleanup failed: {e}", file=sys.stderr)
        return 1

    print("\n[OK] Cleanup completed successfully!")
    return 0


def cmd_environments(args: argparse.Namespace) -> int:
    """Show the persisted store of every environment without creating any."""
    data_dir = _data_dir(args)
    print("\nMulti-Environment Test Data Summary\n")
    print("=" * 80)

    for environment in list_environments():
        store_file = PoolStoreFile(store_path_for(data_dir, environment))
        if not store_file.exists():
            print(f"\n[--] {environment.upper()} environment not initialized")
            continue

        store = store_file.read()
        users = store.pools.get("users", [])
        products = store.pools.get("products", [])

        print(f"\n{environment.upper()} Environment")
        print("-" * 80)
        print(f"  Name:      {store.environment_name}")
        print(f"  Base URL:  {store.base_url}")
        print(f"  API URL:   {store.api_url}")
        print(f"  Users:     {len(users)} users")
        print(f"  Products:  {len(products)} products")
        print("\n   Users:")
        for i, user in enumerate(users, start=1):
            attrs = user.attributes
            print(f"      {i}. {attrs.get('username')} ({attrs.get('role')}) - {user.status.value}")
        print("\n   Products:")
        for i, product in enumerate(products, start=1):
            attrs = product.attributes
            print(f"      {i}. {attrs.get('name')} - ${attrs.get('price')} ({attrs.get('sku')})")

    print("\n" + "=" * 80)
    print("\nUsage:")
    for environment in list_environments():
        print(f"   TEST_ENV={environment} pytest")
    return 0


def _smoke_environment(environment: str, data_dir: Path) -> None:
    # A fresh manager per environment; managers are never re-pointed.
    manager = ResourcePoolManager(environment, data_dir=data_dir)
    config = manager.environment_config
    holder = f"test-worker-{environment}"

    print(f"\n{'=' * 80}")
    print(f"Testing {environment.upper()} Environment")
    print("=" * 80)
    print("\nEnvironment Details:")
    print(f"   Name: {config.display_name}")
    print(f"   Code: {manager.environment}")
    print(f"   Base URL: {config.base_url}")
    print(f"   API URL: {config.api_url}")

    with manager.lease("users", holder) as user, manager.lease("products", holder) as product:
        print(f"\n   Acquired user: {user.attributes.get('username')} (ID: {user.id})")
        print(f"   Acquired product: {product.attributes.get('name')} (ID: {product.id})")
        status = manager.status()
        print("\nPool Status While Held:")
        for fixture_type in ("users", "products"):
            info = status[fixture_type]
            print(f"   {fixture_type}: {info.available} available ({info.in_use} in use)")

    final = manager.status()
    print("\nFinal Pool Status:")
    for fixture_type in ("users", "products"):
        print(f"   {fixture_type}: {final[fixture_type].available} available")


def cmd_smoke(args: argparse.Namespace) -> int:
    """Acquire and release fixtures in each environment in turn."""
    environments = args.env or list_environments()
    data_dir = _data_dir(args)
    failed: list[str] = []

    for environment in environments:
        try:
            _smoke_environment(environment, data_dir)
            print(f"\n[OK] {environment.upper()} environment test PASSED")
        except FixturePoolError as e:
            print(f"\n[FAIL] {environment.upper()} environment test FAILED: {e}", file=sys.stderr)
            failed.append(environment)

    print(f"\n{'=' * 80}")
    for environment in environments:
        result = "FAILED" if environment in failed else "PASSED"
        print(f"   {get_catalog(environment).display_name}: {result}")
    return 1 if failed else 0


def _pump(worker_id: str, stream: IO[str], sink: TextIO) -> None:
    for line in iter(stream.readline, ""):
        sink.write(f"[{worker_id}] {line}")
        sink.flush()
    stream.close()


def run_parallel(command: Sequence[str], workers: int) -> int:
    """Run `command` in `workers` processes, each with its own worker id.

    Returns:
        0 if every worker succeeded, otherwise the first non-zero exit code.
    """
    procs: list[tuple[str, subprocess.Popen[str]]] = []
    pumps: list[threading.Thread] = []

    for i in range(1, workers + 1):
        worker_id = f"worker-{i}"
        print(f"Starting {worker_id}...")
        proc = subprocess.Popen(
            list(command),
            env={**os.environ, WORKER_ID_ENV: worker_id},
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        procs.append((worker_id, proc))
        for stream, sink in ((proc.stdout, sys.stdout), (proc.stderr, sys.stderr)):
            pump = threading.Thread(target=_pump, args=(worker_id, stream, sink), daemon=True)
            pump.start()
            pumps.append(pump)

    codes: list[int] = []
    for worker_id, proc in procs:
        code = proc.wait()
        codes.append(code)
        print(f"{worker_id} finished with code {code}")
    for pump in pumps:
        pump.join()

    log.info("parallel_run_finished", workers=workers, exit_codes=codes)
    return next((code for code in codes if code != 0), 0)


def cmd_run_parallel(args: argparse.Namespace) -> int:
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print("run-parallel: a command is required after --", file=sys.stderr)
        return 2
    if args.workers < 1:
        print("run-parallel: --workers must be at least 1", file=sys.stderr)
        return 2
    return run_parallel(command, args.workers)


def cmd_serve(_args: argparse.Namespace) -> int:
    from fixturepool.main import main as serve  # noqa: PLC0415

    serve()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fixturepool",
        description="Test fixture pool administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory of pool store files (default: DATA_DIR setting)",
    )
    sub = parser.add_subparsers(dest="command_name", required=True)

    status = sub.add_parser("status", help="Show pool totals")
    status.add_argument("--env", default=None, help="Environment (default: TEST_ENV)")
    status.set_defaults(func=cmd_status)

    cleanup = sub.add_parser("cleanup", help="Mark every fixture available")
    cleanup.add_argument("--env", default=None, help="Environment (default: TEST_ENV)")
    cleanup.set_defaults(func=cmd_cleanup)

    environments = sub.add_parser("environments", help="Show seeded environment data")
    environments.set_defaults(func=cmd_environments)

    smoke = sub.add_parser("smoke", help="Acquire/release smoke test per environment")
    smoke.add_argument(
        "--env",
        action="append",
        default=None,
        help="Environment to test; repeatable (default: all)",
    )
    smoke.set_defaults(func=cmd_smoke)

    parallel = sub.add_parser("run-parallel", help="Run a command in parallel workers")
    parallel.add_argument("--workers", type=int, default=3, help="Number of workers (default: 3)")
    parallel.add_argument("command", nargs=argparse.REMAINDER, help="Command to run, after --")
    parallel.set_defaults(func=cmd_run_parallel)

    serve = sub.add_parser("serve", help="Serve the admin API")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging()
    try:
        return args.func(args)
    except FixturePoolError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
