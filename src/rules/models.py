from typing import Literal

from pydantic import BaseModel, Field

from src.components.waitlist.models import NotificationPolicy, WaitlistConfig


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class EmailRules(BaseModel):
    sender: str = "Steerify <onboarding@resend.dev>"
    site_name: str = "Steerify"
    welcome_subject: str = "Welcome to the Steerify Waitlist!"


class AdmissionRules(BaseModel):
    # strict: email failure fails the join, record stays
    # best_effort: email failure is logged, join succeeds
    # compensate: email failure removes the record, join fails
    notification_policy: Literal["strict", "best_effort", "compensate"] = "strict"


class CountRules(BaseModel):
    degrade_on_error: bool = True


class BulkRules(BaseModel):
    max_concurrency: int = Field(10, ge=1, le=100)
    escape_html: bool = False


class Rules(BaseModel):
    project: ProjectRules
    email: EmailRules = EmailRules()
    admission: AdmissionRules = AdmissionRules()
    count: CountRules = CountRules()
    bulk: BulkRules = BulkRules()

    def to_waitlist_config(self) -> WaitlistConfig:
        return WaitlistConfig(
            site_name=self.email.site_name,
            welcome_subject=self.email.welcome_subject,
            notification_policy=NotificationPolicy(self.admission.notification_policy),
            degrade_count_on_error=self.count.degrade_on_error,
            bulk_max_concurrency=self.bulk.max_concurrency,
            bulk_escape_html=self.bulk.escape_html,
        )
