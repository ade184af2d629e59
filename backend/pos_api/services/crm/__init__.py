"""
CRM Services - read-only customer lookups for dispatch auto-fill.
"""

from .customer_directory import CustomerDirectory, InMemoryCustomerDirectory

__all__ = [
    "CustomerDirectory",
    "InMemoryCustomerDirectory",
]
