"""Tests for dashboard aggregates and the calendar."""

from datetime import datetime, timedelta

from services.stats import calendar_month, dashboard_stats, upcoming_meetings

NOW = datetime(2024, 6, 15, 12, 0, 0)


class TestDashboardStats:
    def test_totals_and_breakdowns(self):
        items = [
            {"project_stage": "In Progress", "platform": "LinkedIn", "status": "Meeting", "project_value": 15000},
            {"project_stage": "In Progress", "platform": "Upwork", "status": "New", "project_value": 5000},
            {"project_stage": "Completed", "platform": "LinkedIn", "status": "Closed", "project_value": 12000},
            {"project_stage": "", "platform": None, "status": "New"},
        ]
        stats = dashboard_stats(items, total_users=3)

        assert stats["total_clients"] == 4
        assert stats["total_users"] == 3
        assert stats["total_value"] == 32000
        assert stats["clients_by_stage"] == {"In Progress": 2, "Completed": 1, "Unknown": 1}
        assert stats["clients_by_platform"] == {"LinkedIn": 2, "Upwork": 1, "Unknown": 1}
        assert stats["clients_by_status"] == {"Meeting": 1, "New": 2, "Closed": 1}
        assert stats["value_by_stage"] == {"In Progress": 20000, "Completed": 12000, "Unknown": 0}

    def test_empty(self):
        stats = dashboard_stats([], total_users=0)
        assert stats["total_clients"] == 0
        assert stats["total_value"] == 0
        assert stats["clients_by_stage"] == {}


class TestUpcomingMeetings:
    def test_window_order_and_limit(self):
        items = [
            {"id": "past", "meeting_date": NOW - timedelta(hours=1)},
            {"id": "d3", "meeting_date": NOW + timedelta(days=3)},
            {"id": "h2", "meeting_date": NOW + timedelta(hours=2)},
            {"id": "d10", "meeting_date": NOW + timedelta(days=10)},
            {"id": "none", "meeting_date": None},
        ]
        assert [c["id"] for c in upcoming_meetings(items, NOW)] == ["h2", "d3"]
        assert [c["id"] for c in upcoming_meetings(items, NOW, days=30)] == ["h2", "d3", "d10"]
        assert [c["id"] for c in upcoming_meetings(items, NOW, days=30, limit=1)] == ["h2"]


class TestCalendarMonth:
    def test_groups_by_day(self):
        items = [
            {"id": "a", "meeting_date": datetime(2024, 6, 3, 15, 0)},
            {"id": "b", "meeting_date": datetime(2024, 6, 3, 9, 0)},
            {"id": "c", "meeting_date": datetime(2024, 6, 20, 10, 0)},
            {"id": "other-month", "meeting_date": datetime(2024, 7, 3, 10, 0)},
            {"id": "other-year", "meeting_date": datetime(2023, 6, 3, 10, 0)},
            {"id": "none", "meeting_date": None},
        ]
        days = calendar_month(items, 2024, 6)
        assert [day["day"] for day in days] == [3, 20]
        assert [c["id"] for c in days[0]["meetings"]] == ["b", "a"]
        assert [c["id"] for c in days[1]["meetings"]] == ["c"]

    def test_empty_month(self):
        assert calendar_month([], 2024, 2) == []
