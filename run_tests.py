#!/usr/bin/env python
"""Test runner for Inkstream."""

import argparse
import subprocess
import sys

SUITES = {
    "unit": "tests/unit",
    "integration": "tests/integration",
}


def build_command(args) -> list:
    cmd = ["pytest"]

    suites = [path for name, path in SUITES.items() if getattr(args, name)]
    cmd.extend(suites)

    if args.fast:
        cmd.extend(["-m", "not slow"])
    if args.keyword:
        cmd.extend(["-k", args.keyword])
    if args.verbose:
        cmd.append("-vv")
    if args.coverage:
        cmd.extend([
            "--cov=inkstream",
            "--cov-report=term-missing",
            "--cov-report=html",
        ])
    return cmd


def main():
    """Run the suites selected on the command line (all of them by default)."""
    parser = argparse.ArgumentParser(description="Run Inkstream tests")
    parser.add_argument("--unit", action="store_true", help="Run unit tests")
    parser.add_argument("--integration", action="store_true", help="Run end-to-end tests over the httpx transport")
    parser.add_argument("--coverage", action="store_true", help="Generate coverage report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--fast", action="store_true", help="Skip slow tests")
    parser.add_argument("-k", dest="keyword", help="Only run tests matching this expression")

    cmd = build_command(parser.parse_args())
    print(f"Running: {' '.join(cmd)}")
    return subprocess.run(cmd, cwd=".").returncode


if __name__ == "__main__":
    sys.exit(main())
