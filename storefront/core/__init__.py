"""
Core package for shared utilities.

Configuration and logging shared by the API, services and storage layers.
"""
