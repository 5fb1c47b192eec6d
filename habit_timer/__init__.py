"""Daily habit timer: allowance reconciliation, action log and per-day series.

Modules: config, errors, days, models, actions, reconcile, series, countdown, codec,
store, session.
"""

__all__ = [
    "config",
    "errors",
    "days",
    "models",
    "actions",
    "reconcile",
    "series",
    "countdown",
    "codec",
    "store",
    "session",
]
