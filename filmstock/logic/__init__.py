"""Core business logic layer.

Subpackages:
- grouping: product-level aggregates and filters over the ledger
- loading: camera load/unload state machine and the camera registry
- reconciliation: merge-or-create of added and imported films, manufacturers
- reporting: inventory statistics

The application service in ``inventory_service`` wires these together.
"""
__all__ = ["grouping", "loading", "reconciliation", "reporting", "inventory_service"]
