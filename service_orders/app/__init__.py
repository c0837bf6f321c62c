"""
Orders Service package for the Orders Access Layer.

Structure:
- app.main: FastAPI app, routes and component wiring.
- app.store: Order store adapters (DynamoDB, in-memory).
- app.pagination: Page fetching, chain resolution and cursor prefetch.
- app.caching: Cursor cache backends, degrading manager and invalidation.
"""
