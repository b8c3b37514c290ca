"""Background jobs."""

from .reconciliation import register_scheduler, run_reconciliation_once

__all__ = ["register_scheduler", "run_reconciliation_once"]
