"""Cache invalidation bus — pluggable delivery of UI refresh signals."""

import os

_bus_instance = None


def get_bus():
    """Return the configured invalidation bus (singleton).

    Uses the in-process bus by default; select another with the
    INVALIDATION_BUS environment variable.
    """
    global _bus_instance
    if _bus_instance is None:
        kind = os.environ.get("INVALIDATION_BUS", "memory")
        if kind == "memory":
            from logistics.signals.bus import InvalidationBus

            _bus_instance = InvalidationBus()
        else:
            raise ValueError(f"Unknown invalidation bus: {kind}")
    return _bus_instance


def reset_bus():
    """Drop the bus singleton (used between tests)."""
    global _bus_instance
    _bus_instance = None
