"""
API views for dashboard app.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.terminal.utils import get_terminal_session
from .services import DashboardService


@api_view(["GET"])
def dashboard_summary(request):
    """
    Operational dashboard figures for the terminal.
    """
    session = getattr(request, "pos_session", None) or get_terminal_session()
    return Response(DashboardService.get_summary(session.ledger, session.history))
