from datetime import date

import pytest

from timekeeper.holidays.calendar import easter_sunday, get_holiday, holidays_for_month, is_holiday


@pytest.mark.parametrize("year,expected", [
    (2024, date(2024, 3, 31)),
    (2025, date(2025, 4, 20)),
    (2026, date(2026, 4, 5)),
])
def test_easter_sunday(year, expected):
    assert easter_sunday(year) == expected


def test_movable_holidays_follow_easter():
    assert get_holiday(date(2025, 4, 17)).name == "Holy Thursday"
    assert get_holiday(date(2025, 4, 18)).name == "Good Friday"
    assert get_holiday(date(2025, 4, 21)).type == "regional"
    assert get_holiday(date(2025, 3, 4)).name == "Carnival Tuesday"


def test_fixed_holidays():
    assert is_holiday(date(2025, 12, 25))
    assert get_holiday(date(2025, 10, 12)).type == "national"
    assert not is_holiday(date(2025, 12, 24))


def test_holidays_for_month_are_sorted():
    april = holidays_for_month(2025, 4)

    assert [h.date for h in april] == sorted(h.date for h in april)
    assert all(h.date.month == 4 for h in april)


def test_holidays_endpoint(client, employee, auth_headers):
    response = client.get("/api/v1/holidays/", params={"year": 2025, "month": 12}, headers=auth_headers(employee))

    assert response.status_code == 200
    assert {"date": "2025-12-25", "name": "Christmas Day", "type": "national"} in response.json()

    invalid = client.get("/api/v1/holidays/", params={"year": 2025, "month": 13}, headers=auth_headers(employee))
    assert invalid.status_code == 422
