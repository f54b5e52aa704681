"""
Items Service package for the Read-Aside stack.

Serves item lookups through a cache-aside read path and seeds the store
for load testing. It provides:

- app.main: API surface (GET /items) and health.
- app.models: The Item entity and its cache encoding.
- app.access: The cache-aside coordinator.
- app.cache: Redis gateway with TTL writes.
- app.persistence: PostgreSQL gateway (point insert, point lookup).
- app.loader: Concurrent bulk loader for synthetic items.

Guidelines:
- The service is stateless; the store is authoritative.
- Cache failures degrade latency, never correctness.
"""
