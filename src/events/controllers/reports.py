from django.http import HttpResponse
from ninja import Query
from ninja_extra import api_controller, route

from common.authentication import ContextJWTAuth
from events import schema
from events.service import report_service
from events.service.policy import Capability

from .permissions import HasCapability
from .user_aware_controller import UserAwareController


@api_controller(
    "/reports",
    auth=ContextJWTAuth(),
    tags=["Reports"],
    permissions=[HasCapability(Capability.VIEW_REPORTS)],
)
class ReportController(UserAwareController):
    @route.get("/dashboard", url_name="report_dashboard", response=schema.DashboardSchema)
    def dashboard(self) -> schema.DashboardSchema:
        """Summaries of the membership, registrations and attendance reports."""
        return report_service.dashboard(self.user())

    @route.get("/{report_type}", url_name="get_report", response=schema.ReportSchema)
    def get_report(
        self,
        report_type: schema.ReportType,
        filters: schema.ReportFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> schema.ReportSchema | HttpResponse:
        """Build a report. With ``format=csv`` the rows are returned as a CSV download."""
        report = report_service.build_report(self.user(), report_type, filters)
        if filters.format == "csv":
            filename = f"{report_type}-report-{report.generated_at:%Y%m%d-%H%M%S}.csv"
            response = HttpResponse(report_service.export_csv(report), content_type="text/csv")
            response["Content-Disposition"] = f'attachment; filename="{filename}"'
            return response
        return report
