"""API routers package: one module per endpoint group."""
