#!/usr/bin/env python3
"""Run the test suite on the Qt offscreen platform.

Usage:
  python scripts/run_tests_offscreen.py [--timeout SECONDS] [--uv] [--] [pytest args...]

Examples:
  python scripts/run_tests_offscreen.py tests/test_bindings.py::test_two_way_pushes_once_per_change
  python scripts/run_tests_offscreen.py -- -k watch -q
"""

from __future__ import annotations

import argparse
import os
import shlex
import subprocess
import sys


def build_command(args: argparse.Namespace) -> list[str]:
    runner = ["uv", "run", "python"] if args.uv else [sys.executable]
    cmd = [*runner, "-m", "pytest"]
    if not args.verbose:
        cmd += ["-q", "-x", "--maxfail=1"]
    # Per-test limit via pytest-timeout; the whole run is bounded by --timeout below.
    cmd.append(f"--timeout={min(60, args.timeout)}")
    cmd += [a for a in args.pytest_args if a != "--"]
    return cmd


def main() -> int:
    p = argparse.ArgumentParser(description="Run pytest with QT_QPA_PLATFORM=offscreen")
    p.add_argument("--timeout", type=int, default=300, help="Maximum seconds for the whole pytest run")
    p.add_argument("--verbose", action="store_true", help="Don't use -q (quiet)")
    p.add_argument("--uv", action="store_true", help="Run pytest through 'uv run'")
    p.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Additional pytest args")
    args = p.parse_args()

    env = os.environ.copy()
    env.setdefault("QT_QPA_PLATFORM", "offscreen")
    env.setdefault("MODELBIND_LOG_LEVEL", "warning")

    cmd = build_command(args)
    print("Running:", " ".join(shlex.quote(c) for c in cmd))
    try:
        completed = subprocess.run(cmd, env=env, check=False, timeout=args.timeout)
    except subprocess.TimeoutExpired:
        print(f"pytest run timed out after {args.timeout} seconds", file=sys.stderr)
        return 124
    return completed.returncode


if __name__ == "__main__":
    raise SystemExit(main())
