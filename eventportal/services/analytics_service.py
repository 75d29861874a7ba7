"""Analytics service for the admin dashboard and per-event analytics."""
import logging

from eventportal.models.analytics import DashboardMetrics, EventAnalytics
from eventportal.services.api_client import ApiClient, require_ok

logger = logging.getLogger(__name__)


def get_dashboard_metrics(client: ApiClient) -> DashboardMetrics:
    """
    Load dashboard cards and series, plus non-staff user totals.

    The non-staff block is optional: if that call fails the dashboard still
    renders with zeroes for it.

    Raises:
        ApiError: If the dashboard call fails
    """
    dashboard = require_ok(client.dashboard_metrics(), "Failed to load dashboard data")

    non_staff_result = client.non_staff_users()
    if non_staff_result.ok:
        non_staff = non_staff_result.data
    else:
        logger.warning("Non-staff totals unavailable (status %s)", non_staff_result.status)
        non_staff = {}

    return DashboardMetrics.from_api(dashboard if isinstance(dashboard, dict) else {}, non_staff)


def get_event_analytics(client: ApiClient, code: str) -> EventAnalytics:
    """
    Load analytics for one event.

    Raises:
        ApiError: If the request fails
    """
    body = require_ok(client.event_analytics(code), "Failed to load analytics data")
    return EventAnalytics.from_api(body if isinstance(body, dict) else {})
