"""
Shared, cross-cutting code for the client.

`core/` holds the small building blocks every feature uses (HTTP wiring,
query cache, mutations, toasts, settings, logging). Keep endpoint paths,
payload schemas and invalidation rules in the corresponding feature package
(e.g. `items/`).
"""
