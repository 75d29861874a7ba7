"""Unit tests for analytics_service."""
import pytest
from unittest.mock import MagicMock

from eventportal.services.analytics_service import get_dashboard_metrics, get_event_analytics
from eventportal.services.api_client import ApiResponse, NetworkFailure
from eventportal.utils.exceptions import ApiError

DASHBOARD = {
    "cards": {
        "total_registrations": 40,
        "upcoming_meetings": 3,
        "registrations_last_7_days": 11,
        "reports_last_month": 2,
    },
    "daily": {"labels": ["2025-11-14", "2025-11-15"], "counts": [4, 7]},
    "speciality": {"labels": ["Cardiology"], "counts": [9]},
}


@pytest.fixture
def client():
    return MagicMock()


class TestDashboardMetrics:
    """Test get_dashboard_metrics."""

    def test_with_non_staff_totals(self, client):
        client.dashboard_metrics.return_value = ApiResponse(200, DASHBOARD)
        client.non_staff_users.return_value = ApiResponse(
            200, {"users": {"count_total": 25}, "joins": {"total": 30}, "events": {"live_now": 1}}
        )

        metrics = get_dashboard_metrics(client)

        assert metrics.total_registrations == 40
        assert metrics.daily_counts == [4, 7]
        assert metrics.users_total == 25
        assert metrics.live_now == 1

    def test_non_staff_failure_is_tolerated(self, client):
        client.dashboard_metrics.return_value = ApiResponse(200, DASHBOARD)
        client.non_staff_users.return_value = NetworkFailure("down")

        metrics = get_dashboard_metrics(client)

        assert metrics.upcoming_meetings == 3
        assert metrics.users_total == 0
        assert metrics.joins_total == 0

    def test_dashboard_failure_raises(self, client):
        client.dashboard_metrics.return_value = ApiResponse(500, {})

        with pytest.raises(ApiError, match="Failed to load dashboard data"):
            get_dashboard_metrics(client)

        client.non_staff_users.assert_not_called()


class TestEventAnalyticsService:
    """Test get_event_analytics."""

    def test_loads(self, client):
        client.event_analytics.return_value = ApiResponse(
            200, {"event": {"code": "HF2025"}, "attempts": {"total": 4, "success": 2}}
        )

        analytics = get_event_analytics(client, "HF2025")

        assert analytics.event_code == "HF2025"
        assert analytics.success_rate() == 50
        client.event_analytics.assert_called_once_with("HF2025")

    def test_failure(self, client):
        client.event_analytics.return_value = ApiResponse(404, {"detail": "Not found."})

        with pytest.raises(ApiError, match="Not found."):
            get_event_analytics(client, "NOPE")
