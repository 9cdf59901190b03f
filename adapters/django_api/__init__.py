"""
Till Django HTTP adapter.
Thin framework glue over the ledger runtime.
"""

from adapters.django_api.wiring import get_runtime, install_runtime, reset_runtime

__all__ = [
    "get_runtime",
    "install_runtime",
    "reset_runtime",
]
