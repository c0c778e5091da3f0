"""
Database access: connection pool, table gateway and row dataclasses.
"""

from .gateway import TableGateway, translate_errors

__all__ = ["TableGateway", "translate_errors"]
