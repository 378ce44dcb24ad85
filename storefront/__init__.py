"""Storefront API: catalog, customers and order capture for a retail shop."""

__version__ = "1.0.0"
