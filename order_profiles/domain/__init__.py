"""
Domain layer: orders, shipments, profiles and order types.

Independent of persistence and of the batch infrastructure.
"""
