"""
CLI script for running the maintenance scans.

Usage:
    # Run both scans
    uv run python -m maintenance.run_scans

    # Only the bug scan
    uv run python -m maintenance.run_scans --bugs
"""

import argparse
import sys

from maintenance.bug_scanner import run_bug_scan
from maintenance.security_scanner import run_security_scan
from shared.utils import print_summary


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run maintenance scans")
    parser.add_argument("--bugs", action="store_true", help="Run the bug scan")
    parser.add_argument("--security", action="store_true", help="Run the security scan")
    args = parser.parse_args(argv)

    run_all = not args.bugs and not args.security
    exit_code = 0

    if args.bugs or run_all:
        result = run_bug_scan()
        if "error" in result:
            print(f"✗ Bug scan failed: {result['error']}")
            exit_code = 1
        else:
            print_summary("Bug Scan Complete", result["summary"])

    if args.security or run_all:
        result = run_security_scan()
        if "error" in result:
            print(f"✗ Security scan failed: {result['error']}")
            exit_code = 1
        else:
            print_summary("Security Scan Complete", result["summary"])

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
