"""
Human assistance escalation tool
"""
from tableside.models.tool_args import RequestHumanAssistanceArgs
from tableside.services.notification_service import StaffNotifier
from tableside.tools.base import ToolContext, ToolResult


class AssistanceTools:
    def __init__(self, notifier: StaffNotifier):
        self.notifier = notifier

    async def request_human_assistance(self, context: ToolContext, args: RequestHumanAssistanceArgs) -> ToolResult:
        # Always acknowledged; delivery problems are logged by the notifier
        await self.notifier.notify(context.session_id, context.table_id, args.reason)
        return ToolResult.ok(
            "A server has been notified and will be with you shortly.",
            estimatedWait="2-3 minutes",
        )
