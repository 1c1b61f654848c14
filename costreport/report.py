from typing import Optional, Sequence

from .schemas import (
    Attachment, AttachmentField, DateRange, GroupedBilling, GroupingMode,
    ReportMessage, RootMessage, ThreadMessage, TotalBilling,
)

TOTAL_COLOR = "#ff8c00"
DETAIL_COLOR = "#ffd700"
PLACEHOLDER = "N/A"


def build_messages(date_range: DateRange, total: Optional[TotalBilling],
                   details: Optional[Sequence[GroupedBilling]], mode: GroupingMode) -> ReportMessage:
    """Root message with the period total and a threaded breakdown, one field per row."""
    total_text = f"{total.amount} {total.unit}" if total else PLACEHOLDER
    root = RootMessage(
        text=f"AWS Cost Reports ({date_range.start.isoformat()} - {date_range.end.isoformat()})",
        icon_emoji=":money_with_wings:",
        attachments=[Attachment(title=":moneybag: Total", text=total_text, color=TOTAL_COLOR)],
    )
    fields = [
        AttachmentField(title=f":aws: {row.title}", value=f"{row.amount} {row.unit}")
        for row in details or []
    ]
    thread = ThreadMessage(
        attachments=[Attachment(color=DETAIL_COLOR, pretext=mode.label, fields=fields)],
    )
    return ReportMessage(root=root, thread=thread)
