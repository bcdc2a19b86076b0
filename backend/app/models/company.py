"""
company.py — ORM Model for Company Entities

Purpose:
- Represent a company tracked by the dashboard.
- `company_code` is the primary key: globally unique, immutable once created.

Fields:
- company_code: Primary key (e.g., "C0")
- company_name: Display name
- level: Hierarchy level (small positive integer, nullable)
- country / city: Location (nullable)
- year_founded: Founding year stored as text (e.g., "2010")
- annual_revenue: Large integer (nullable)
- employees: Headcount (nullable)

Important Design Rule:
- Parent/child structure is NOT stored here. It lives in the relationship
  side file (see app/services/companies/relationships.py).
"""

from sqlalchemy import BigInteger, Column, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Company(Base):
    __tablename__ = "companies"

    # Primary key
    company_code = Column(String(255), primary_key=True)

    # Display Metadata
    company_name = Column(String(255), nullable=False)

    # Grouping dimensions
    level = Column(Integer, nullable=True)
    country = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)

    # Range-filtered attributes
    year_founded = Column(String(50), nullable=True)
    annual_revenue = Column(BigInteger, nullable=True)
    employees = Column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_companies_level", "level"),
        Index("idx_companies_country", "country"),
    )

    def __repr__(self):
        return f"<Company {self.company_code} | {self.company_name}>"
