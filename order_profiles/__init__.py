"""
Order Profile Migration.

Switches order types from one shared customer profile type to separate
billing and shipping profile types and migrates existing orders.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("order-profile-migration")
except PackageNotFoundError:
    __version__ = "0.1.0"
