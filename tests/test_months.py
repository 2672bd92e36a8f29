from datetime import datetime

import pytest

from card_scraper.models import MonthAnchor
from card_scraper.months import build_transactions_url, effective_start, month_anchors

NOW = datetime(2024, 5, 17, 9, 30)


def test_effective_start_clamps_to_one_year():
    assert effective_start(datetime(2020, 1, 1), NOW) == datetime(2023, 5, 17, 9, 30)
    assert effective_start(None, NOW) == datetime(2023, 5, 17, 9, 30)
    assert effective_start(datetime(2024, 2, 1), NOW) == datetime(2024, 2, 1)


def test_effective_start_leap_day():
    assert effective_start(None, datetime(2024, 2, 29)) == datetime(2023, 2, 28)


def test_month_anchors_are_chronological_with_current_last():
    anchors = month_anchors(datetime(2024, 2, 10), NOW)
    assert anchors == [
        MonthAnchor(2024, 2),
        MonthAnchor(2024, 3),
        MonthAnchor(2024, 4),
        MonthAnchor.current(),
    ]


def test_month_anchors_cross_year_boundary():
    anchors = month_anchors(effective_start(None, NOW), NOW)
    assert len(anchors) == 13
    assert anchors[0] == MonthAnchor(2023, 5)
    assert anchors[7] == MonthAnchor(2023, 12)
    assert anchors[8] == MonthAnchor(2024, 1)
    assert anchors[-1].is_current


def test_month_anchors_start_in_current_month_only_open_cycle():
    assert month_anchors(datetime(2024, 5, 1), NOW) == [MonthAnchor.current()]


def test_build_url_for_month():
    assert build_transactions_url(MonthAnchor(2024, 3)) == (
        "https://online.leumi-card.co.il/Registred/Transactions/ChargesDeals.aspx"
        "?ActionType=2&MonthCharge=202403&Index=-2"
    )


def test_build_url_for_current_cycle_omits_month_charge():
    url = build_transactions_url(MonthAnchor.current(), base_url="https://portal.test/")
    assert url == "https://portal.test/Registred/Transactions/ChargesDeals.aspx?ActionType=1&Index=-2"


@pytest.mark.parametrize(("year", "month"), [(2024, None), (None, 3), (2024, 13), (2024, 0)])
def test_month_anchor_validation(year, month):
    with pytest.raises(ValueError):
        MonthAnchor(year, month)
