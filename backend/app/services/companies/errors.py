"""
errors.py — Domain Exceptions for Company Services

The API layer maps these onto HTTP status codes; services never raise
HTTPException directly.
"""


class CompanyServiceError(Exception):
    """Base class for company service failures."""


class CompanyNotFoundError(CompanyServiceError, LookupError):
    def __init__(self, company_code: str) -> None:
        super().__init__(f"Company with code {company_code} not found")
        self.company_code = company_code


class CompanyAlreadyExistsError(CompanyServiceError):
    def __init__(self, company_code: str) -> None:
        super().__init__(f"Company with code {company_code} already exists")
        self.company_code = company_code
