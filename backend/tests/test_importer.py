"""
Tests for the CSV company importer.
"""

import pytest

from app.services.companies.importer import import_companies_csv, parse_company_row
from app.services.companies.repository import CompanyRepository
from app.services.companies.service import all_key

HEADER = "company_code,company_name,level,country,city,founded_year,annual_revenue,employees\n"


def test_parse_company_row_blank_cells_become_none():
    values = parse_company_row({
        "company_code": "C5",
        "company_name": "Five",
        "level": "",
        "country": " ",
        "city": "Osaka",
        "founded_year": "1999",
        "annual_revenue": "1000000.0",
        "employees": "",
    })
    assert values == {
        "company_code": "C5",
        "company_name": "Five",
        "level": None,
        "country": None,
        "city": "Osaka",
        "year_founded": "1999",
        "annual_revenue": 1_000_000,
        "employees": None,
    }


def test_parse_company_row_requires_code_and_name():
    with pytest.raises(ValueError):
        parse_company_row({"company_code": "C5", "company_name": ""})


def test_import_skips_duplicates_and_bad_rows(tmp_path, db, seed, cache):
    seed([{"company_code": "C1", "company_name": "Existing"}])
    cache.set(all_key(), ["stale"])
    path = tmp_path / "companies.csv"
    path.write_text(
        HEADER
        + "C1,Duplicate,1,Japan,Tokyo,1990,10,5\n"
        + "C2,Second,2,Japan,Osaka,1991,20,6\n"
        + "C3,Broken,two,Japan,Kyoto,1992,30,7\n"
        + "C2,Repeated,2,Japan,Osaka,1991,20,6\n",
        encoding="utf-8",
    )
    repo = CompanyRepository(db)

    summary = import_companies_csv(path, repo, cache=cache)

    assert summary["processed"] == 4
    assert summary["inserted"] == 1
    assert summary["skipped"] == 2
    assert [e["line"] for e in summary["errors"]] == [4]
    assert repo.find_by_code("C1").company_name == "Existing"
    assert repo.find_by_code("C2").level == 2
    assert repo.find_by_code("C3") is None
    assert cache.get(all_key()) is None


def test_import_missing_file_raises(tmp_path, db):
    with pytest.raises(FileNotFoundError):
        import_companies_csv(tmp_path / "missing.csv", CompanyRepository(db))


def test_parse_company_row_keeps_large_integers_exact():
    values = parse_company_row({
        "company_code": "C6",
        "company_name": "Six",
        "annual_revenue": "9007199254740993",
        "employees": "1200.0",
    })
    assert values["annual_revenue"] == 9_007_199_254_740_993
    assert values["employees"] == 1200


@pytest.mark.parametrize("revenue", ["1e999", "99999999999999999999", "12.5", "nan", "lots"])
def test_parse_company_row_rejects_unusable_numbers(revenue):
    with pytest.raises((ValueError, ArithmeticError)):
        parse_company_row({"company_code": "C6", "company_name": "Six", "annual_revenue": revenue})


def test_import_counts_out_of_range_rows_and_keeps_going(tmp_path, db):
    path = tmp_path / "companies.csv"
    path.write_text(
        HEADER
        + "A,Good,1,Japan,Tokyo,1990,10,1\n"
        + "B,Infinite,1,Japan,Tokyo,1990,1e999,1\n"
        + "C,Huge,1,Japan,Tokyo,1990,99999999999999999999,1\n"
        + "D,Also Good,1,Japan,Tokyo,1990,20,1\n",
        encoding="utf-8",
    )
    repo = CompanyRepository(db)

    summary = import_companies_csv(path, repo)

    assert summary["inserted"] == 2
    assert [e["line"] for e in summary["errors"]] == [3, 4]
    assert repo.find_by_code("A") is not None
    assert repo.find_by_code("D") is not None


def test_import_row_rejected_by_database_does_not_drop_other_rows(tmp_path, db, seed, monkeypatch):
    seed([{"company_code": "C1", "company_name": "Existing"}])
    path = tmp_path / "companies.csv"
    path.write_text(
        HEADER
        + "A,First,1,Japan,Tokyo,1990,10,1\n"
        + "C1,Clash,1,Japan,Tokyo,1990,10,1\n"
        + "B,Second,1,Japan,Tokyo,1990,20,1\n",
        encoding="utf-8",
    )
    repo = CompanyRepository(db)
    # Another writer inserted C1 after the duplicate check ran
    monkeypatch.setattr(repo, "existing_codes", lambda codes: set())

    summary = import_companies_csv(path, repo)

    assert summary["inserted"] == 2
    assert [e["line"] for e in summary["errors"]] == [3]
    assert repo.find_by_code("A").company_name == "First"
    assert repo.find_by_code("B").company_name == "Second"
    assert repo.find_by_code("C1").company_name == "Existing"
