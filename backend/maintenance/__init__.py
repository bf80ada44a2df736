"""Scheduled maintenance scans over the backing store."""

from .bug_scanner import run_bug_scan
from .security_scanner import run_security_scan

__all__ = ["run_bug_scan", "run_security_scan"]
