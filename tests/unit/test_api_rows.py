import json
import pytest
from bursa_announcements.extract.api_rows import ApiRowsExtractor, parse_page, records_total
from bursa_announcements.extract.base import ParseError

ORIGIN = "https://www.bursamalaysia.com"

def api_row(n, date="06 Oct 2025", company="ABC BHD", title="Quarterly rpt on consolidated results"):
    return [
        n,
        f"<div class='d-lg-none'>06/10/2025</div><div class='d-lg-inline-block d-none'>{date}</div>",
        f"<a href='/market_information/equities_prices?stock_code=000{n}'>{company}</a>",
        f"<a href='/market_information/announcements/company_announcement/announcement_details?ann_id={n}'>{title}</a>",
    ]

def api_page(rows, total=None):
    return json.dumps({"recordsTotal": len(rows) if total is None else total, "data": rows})

class TestApiRowsExtractor:
    """Unit tests for the search API page reader"""

    def test_rows_become_records(self):
        records = ApiRowsExtractor(origin=ORIGIN).extract(api_page([api_row(1), api_row(2, company="XYZ BERHAD")]))
        assert len(records) == 2
        first = records[0]
        assert first.announcement_date == "06 Oct 2025"
        assert first.company == "ABC BHD"
        assert first.memo == "Quarterly rpt on consolidated results"
        assert first.download_link == (
            "https://www.bursamalaysia.com/market_information/announcements/"
            "company_announcement/announcement_details?ann_id=1"
        )
        assert records[1].company == "XYZ BERHAD"

    def test_malformed_rows_are_skipped(self):
        rows = [{"not": "a row"}, [1, "only", "three"], api_row(3, title=""), api_row(4)]
        records = ApiRowsExtractor(origin=ORIGIN).extract(api_page(rows))
        assert [r.download_link.rsplit("=", 1)[-1] for r in records] == ["4"]

    def test_company_without_link(self):
        row = api_row(5)
        row[2] = "<span>PLAIN BHD</span>"
        records = ApiRowsExtractor(origin=ORIGIN).extract(api_page([row]))
        assert records[0].company == "PLAIN BHD"

    def test_max_records_per_page(self):
        rows = [api_row(i) for i in range(1, 6)]
        records = ApiRowsExtractor(origin=ORIGIN, max_records=2).extract(api_page(rows))
        assert len(records) == 2

    def test_no_usable_rows(self):
        with pytest.raises(ParseError):
            ApiRowsExtractor(origin=ORIGIN).extract(api_page([]))

    def test_invalid_json(self):
        with pytest.raises(ParseError) as exc_info:
            parse_page("<html>Just a moment...</html>")
        assert "Just a moment" in str(exc_info.value)

    def test_missing_data_array(self):
        with pytest.raises(ParseError):
            parse_page(json.dumps({"recordsTotal": 3}))
        with pytest.raises(ParseError):
            parse_page(json.dumps([1, 2, 3]))

    def test_records_total(self):
        assert records_total({"recordsTotal": 450, "data": []}) == 450
        assert records_total({"recordsTotal": "12", "data": []}) == 12
        assert records_total({"data": []}) == 0
        assert records_total({"recordsTotal": "n/a", "data": []}) == 0
