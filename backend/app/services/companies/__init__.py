"""
companies package — Company records, dimensional grouping and hierarchy.

Expose the service and its errors so the API layer and scripts can import
without reaching into individual modules.
"""

from .errors import CompanyAlreadyExistsError, CompanyNotFoundError
from .service import CompanyService

__all__ = [
    "CompanyAlreadyExistsError",
    "CompanyNotFoundError",
    "CompanyService",
]
