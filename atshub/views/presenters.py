"""Display-only derivations: initials, stars, bar heights, badges, row views.

Nothing here mutates state or calls the gateway. Missing optional fields
default to empty display values.
"""

import math
import re
from datetime import datetime, timezone, tzinfo

from pydantic import BaseModel, ConfigDict

from atshub.core.schemas import (
    STAGE_ORDER,
    ActiveUser,
    Application,
    ApplicationDetail,
    Candidate,
    CandidateApplication,
    InterviewRecord,
    Job,
    JobDashboardItem,
    Stage,
    UpcomingInterview,
)

STAR_SLOTS = 5
DEFAULT_MIN_BAR_PERCENT = 4.0
TAG_SEPARATOR = "; "

Option = tuple[str, str]


def js_round(value: float) -> int:
    """Round half up, matching the platform's display rounding."""
    return math.floor(value + 0.5)


def initials(name: str | None) -> str:
    if not name or not name.strip():
        return "?"
    parts = name.split()
    if len(parts) >= 2:
        return (parts[0][0] + parts[-1][0]).upper()
    return parts[0][0].upper()


def star_classes(rating: float | None) -> list[str]:
    filled = js_round(rating or 0)
    return ["star filled" if i <= filled else "star empty" for i in range(1, STAR_SLOTS + 1)]


def slug(value: str) -> str:
    return re.sub(r"\s+", "-", value.lower())


def split_tags(text: str | None) -> list[str]:
    return [t for t in (text or "").split(TAG_SEPARATOR) if t]


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _local(value: datetime, tz: tzinfo | None) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(tz or timezone.utc)


def _clock(value: datetime, *, seconds: bool) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    if seconds:
        return f"{hour}:{value.minute:02d}:{value.second:02d} {suffix}"
    return f"{hour:02d}:{value.minute:02d} {suffix}"


def format_date(value: datetime | None, tz: tzinfo | None = None) -> str:
    """``10/19/2026``"""
    if value is None:
        return ""
    d = _local(value, tz)
    return f"{d.month}/{d.day}/{d.year}"


def format_datetime(value: datetime | None, tz: tzinfo | None = None) -> str:
    """``10/19/2026, 9:30:00 AM``"""
    if value is None:
        return ""
    d = _local(value, tz)
    return f"{format_date(d)}, {_clock(d, seconds=True)}"


def format_day(value: datetime | None, tz: tzinfo | None = None) -> str:
    """``Mon, Oct 19``"""
    if value is None:
        return ""
    d = _local(value, tz)
    return f"{d:%a}, {d:%b} {d.day}"


def format_time(value: datetime | None, tz: tzinfo | None = None) -> str:
    """``09:30 AM``"""
    if value is None:
        return ""
    return _clock(_local(value, tz), seconds=False)


def to_edit_field(value: datetime | None) -> str:
    """Timestamp as the form's ``YYYY-MM-DDTHH:MM`` field, in UTC.

    Naive timestamps are taken to be UTC already.
    """
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M")


# ---------------------------------------------------------------------------
# Pipeline board
# ---------------------------------------------------------------------------


class CardView(BaseModel):
    """One kanban card."""

    model_config = ConfigDict(frozen=True)

    application: Application
    initials: str
    stars: list[str]
    days_in_stage: int


class StageColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: Stage
    cards: list[CardView]

    @property
    def label(self) -> str:
        return self.stage.value

    @property
    def color(self) -> str:
        return self.stage.color

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def has_cards(self) -> bool:
        return bool(self.cards)

    @property
    def dot_class(self) -> str:
        return f"column-dot dot-{self.stage.value.lower()}"


def card_view(app: Application) -> CardView:
    return CardView(
        application=app,
        initials=initials(app.candidate_name),
        stars=star_classes(app.overall_rating),
        days_in_stage=js_round(app.days_in_stage or 0),
    )


def group_by_stage(applications: list[Application]) -> list[StageColumn]:
    """Six fixed columns in funnel order; empty stages still get a column.

    Applications whose stage label matches no column are not shown.
    """
    return [
        StageColumn(
            stage=stage,
            cards=[card_view(a) for a in applications if a.stage == stage.value],
        )
        for stage in STAGE_ORDER
    ]


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def bar_height(value: int, counts: list[int], min_percent: float = DEFAULT_MIN_BAR_PERCENT) -> float:
    """Bar height in percent of the tallest bar, floored so empty bars stay visible."""
    tallest = max([*counts, 1])
    return max(value / tallest * 100, min_percent)


def bar_style(height: float) -> str:
    return f"height: {height:g}%"


class DashboardCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: JobDashboardItem
    priority_class: str
    bar_heights: dict[Stage, float]

    def bar_style(self, stage: Stage) -> str:
        return bar_style(self.bar_heights[stage])


def dashboard_card(
    item: JobDashboardItem, min_percent: float = DEFAULT_MIN_BAR_PERCENT,
) -> DashboardCard:
    counts = {stage: item.stats.count_for(stage) for stage in STAGE_ORDER}
    all_counts = list(counts.values())
    return DashboardCard(
        item=item,
        priority_class=f"priority-badge priority-{(item.job.priority or 'Medium').lower()}",
        bar_heights={s: bar_height(c, all_counts, min_percent) for s, c in counts.items()},
    )


# ---------------------------------------------------------------------------
# Interviews
# ---------------------------------------------------------------------------


def status_badge_class(status: str | None, prefix: str) -> str:
    return f"{prefix} status-{slug(status or 'scheduled')}"


def interviewer_names(interview: InterviewRecord) -> list[str]:
    return [n for n in (interview.interviewer_name, interview.interviewer2_name) if n]


class InterviewRow(BaseModel):
    """An interview line in a detail panel."""

    model_config = ConfigDict(frozen=True)

    interview: InterviewRecord
    formatted_date: str
    status_badge_class: str
    interviewers_display: str

    @property
    def has_interviewers(self) -> bool:
        return bool(self.interviewers_display)


def interview_row(interview: InterviewRecord, tz: tzinfo | None = None) -> InterviewRow:
    return InterviewRow(
        interview=interview,
        formatted_date=format_datetime(interview.scheduled_date, tz),
        status_badge_class=status_badge_class(interview.status, "pd-iv-status"),
        interviewers_display=", ".join(interviewer_names(interview)),
    )


class UpcomingRow(BaseModel):
    """An upcoming interview on the dashboard."""

    model_config = ConfigDict(frozen=True)

    interview: UpcomingInterview
    formatted_day: str
    formatted_time: str
    status_badge_class: str
    interviewers_display: str

    @property
    def has_interviewers(self) -> bool:
        return bool(self.interviewers_display)


def upcoming_row(interview: UpcomingInterview, tz: tzinfo | None = None) -> UpcomingRow:
    return UpcomingRow(
        interview=interview,
        formatted_day=format_day(interview.scheduled_date, tz),
        formatted_time=format_time(interview.scheduled_date, tz),
        status_badge_class=status_badge_class(interview.status, "upcoming-status"),
        interviewers_display=", ".join(interviewer_names(interview)),
    )


# ---------------------------------------------------------------------------
# Candidates & application detail
# ---------------------------------------------------------------------------


class CandidateRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    initials: str
    skill_tags: list[str]
    all_skill_tags: list[str]
    all_language_tags: list[str]
    formatted_date: str
    source_badge_class: str

    @property
    def has_skill_tags(self) -> bool:
        return bool(self.all_skill_tags)

    @property
    def more_skills_count(self) -> int:
        return len(self.all_skill_tags) - len(self.skill_tags)


def candidate_row(candidate: Candidate, max_skill_tags: int = 5) -> CandidateRow:
    skills = split_tags(candidate.skills)
    return CandidateRow(
        candidate=candidate,
        initials=initials(candidate.name),
        skill_tags=skills[:max_skill_tags],
        all_skill_tags=skills,
        all_language_tags=split_tags(candidate.languages),
        formatted_date=format_date(candidate.created_date),
        source_badge_class=f"clc-source-badge source-{slug(candidate.candidate_source or 'other')}",
    )


class DetailView(BaseModel):
    """Application detail as shown in the pipeline detail panel."""

    model_config = ConfigDict(frozen=True)

    detail: ApplicationDetail
    initials: str
    formatted_applied_date: str
    stage_badge_class: str
    interviews: list[InterviewRow]

    @property
    def application_id(self) -> str:
        return self.detail.application_id

    @property
    def interview_count(self) -> int:
        return len(self.interviews)

    @property
    def has_interviews(self) -> bool:
        return bool(self.interviews)

    @property
    def stars(self) -> list[str]:
        return star_classes(self.detail.overall_rating)


def detail_view(detail: ApplicationDetail) -> DetailView:
    return DetailView(
        detail=detail,
        initials=initials(detail.candidate_name),
        formatted_applied_date=format_date(detail.applied_date),
        stage_badge_class=f"pd-stage-badge stage-{(detail.stage or 'new').lower()}",
        interviews=[interview_row(iv) for iv in detail.interviews],
    )


# ---------------------------------------------------------------------------
# Picker options (label, value)
# ---------------------------------------------------------------------------


def job_label(job: Job, *, with_location: bool = True) -> str:
    label = job.title
    if job.department:
        label += f" - {job.department}"
    if with_location and job.location:
        label += f" ({job.location})"
    return label


def job_options(jobs: list[Job], placeholder: str, *, with_location: bool = True) -> list[Option]:
    opts: list[Option] = [(placeholder, "")]
    opts.extend((job_label(j, with_location=with_location), j.id or "") for j in jobs)
    return opts


def user_options(users: list[ActiveUser]) -> list[Option]:
    return [("-- No interviewer --", ""), *((u.user_name, u.user_id) for u in users)]


def application_options(applications: list[CandidateApplication]) -> list[Option]:
    return [
        (f"{a.job_title or 'Unknown Job'} ({a.stage})", a.application_id)
        for a in applications
    ]
