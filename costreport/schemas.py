import datetime as dt
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GroupingMode(str, Enum):
    BY_SERVICE = "services"
    BY_ACCOUNT = "accounts"

    @property
    def dimension(self) -> str:
        """Cost Explorer GroupBy dimension key for this mode."""
        return "SERVICE" if self is GroupingMode.BY_SERVICE else "LINKED_ACCOUNT"

    @property
    def label(self) -> str:
        return "By service" if self is GroupingMode.BY_SERVICE else "By account"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["GroupingMode"]:
        for mode in cls:
            if mode.value == value:
                return mode
        return None


class DateRange(BaseModel):
    """Inclusive reporting period."""
    model_config = ConfigDict(frozen=True)

    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def _ordered(self):
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self


class TotalBilling(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit: str
    amount: str


class ServiceBilling(BaseModel):
    model_config = ConfigDict(frozen=True)

    service: str
    unit: str
    amount: str

    @property
    def title(self) -> str:
        return self.service


class AccountBilling(BaseModel):
    model_config = ConfigDict(frozen=True)

    account: str
    unit: str
    amount: str

    @property
    def title(self) -> str:
        return self.account


GroupedBilling = Union[ServiceBilling, AccountBilling]


class SlackCredential(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1, repr=False)
    channel: str = Field(min_length=1)


class AttachmentField(BaseModel):
    title: str
    value: str
    short: bool = False


class Attachment(BaseModel):
    color: str
    title: Optional[str] = None
    text: Optional[str] = None
    pretext: Optional[str] = None
    fields: List[AttachmentField] = []


class RootMessage(BaseModel):
    text: str
    icon_emoji: Optional[str] = None
    attachments: List[Attachment]


class ThreadMessage(BaseModel):
    attachments: List[Attachment]


class ReportMessage(BaseModel):
    root: RootMessage
    thread: ThreadMessage


class PostResult(BaseModel):
    ok: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class RunStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class RunState(str, Enum):
    VALIDATING = "VALIDATING"
    SECRET_RESOLVED = "SECRET_RESOLVED"
    RANGE_COMPUTED = "RANGE_COMPUTED"
    TOTAL_FETCHED = "TOTAL_FETCHED"
    DETAIL_FETCHED = "DETAIL_FETCHED"
    NOTIFIED = "NOTIFIED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class RunResult(BaseModel):
    status: RunStatus
    state: RunState
    error: Optional[str] = None
    # last state reached and the step that stopped a FAILED run
    failed_in: Optional[RunState] = None
    failed_step: Optional[str] = None
    date_range: Optional[DateRange] = None
    total: Optional[TotalBilling] = None
    detail_count: Optional[int] = None
    root_posted: bool = False
    thread_posted: bool = False


class ReportTrigger(BaseModel):
    # left as a plain string; an unknown value is reported as a FAILED run
    type: Optional[str] = None
    execution_id: Optional[str] = None
