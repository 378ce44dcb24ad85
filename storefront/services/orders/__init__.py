"""
Order service package initialization.

Kept import-free: the database models import the order status enum from
this package.
"""
