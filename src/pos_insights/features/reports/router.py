import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ..auth.models import User as AuthUser
from ..auth.permissions import Action, Module
from ..auth.security import get_current_active_user, require_permission
from . import service as report_service
from .executor import QueryExecutor, get_query_executor
from .periods import Clock, request_window, system_clock
from .schemas import DashboardReport, ReportQuery

logger = logging.getLogger(__name__)


def get_clock() -> Clock:
    """Overridden in tests to pin "now"."""
    return system_clock


router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    # Apply auth dependency to all routes in this router
    dependencies=[Depends(get_current_active_user)],
    responses={
        400: {"description": "Invalid reporting period"},
        503: {"description": "A dashboard sub-query failed, retry later"},
    },
)


@router.get("/dashboard", response_model=DashboardReport, response_model_by_alias=True)
async def get_dashboard_report(
    current_user: Annotated[AuthUser, Depends(require_permission(Module.DASHBOARD, Action.VIEW))],
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
    clock: Annotated[Clock, Depends(get_clock)],
    query: ReportQuery = Depends(),
):
    now = clock()
    window = request_window(query.period, query.start, query.end, now)
    logger.debug(f"{current_user.username} requested the dashboard for {window.start}..{window.end}")
    return await report_service.generate_dashboard_report(
        executor,
        window.start,
        window.end,
        year=query.year if query.year is not None else now.year,
        compare_to_previous=query.compare_to_previous,
    )
