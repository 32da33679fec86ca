"""CLI entry point for the ATS hub client."""

import argparse
import asyncio
import logging
import sys

from atshub.core.config import Settings
from atshub.core.documents import load_cv_document
from atshub.gateway import get_gateway
from atshub.views.board import DropOutcome
from atshub.views.cv_viewer import CvViewer
from atshub.views.hub import AtsHub, Tab
from atshub.views.setup import SetupView


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: in-memory sample data)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="ATS hub - jobs, candidates, pipeline and interviews",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    dashboard_parser = subparsers.add_parser("dashboard", help="Show open jobs and totals")
    _add_common(dashboard_parser)

    pipeline_parser = subparsers.add_parser("pipeline", help="Show the pipeline board of a job")
    pipeline_parser.add_argument("--job", required=True, help="Job id")
    _add_common(pipeline_parser)

    move_parser = subparsers.add_parser("move", help="Move an application to another stage")
    move_parser.add_argument("--job", required=True, help="Job id")
    move_parser.add_argument("--application", required=True, help="Application id")
    move_parser.add_argument("--stage", required=True, help="Target stage")
    _add_common(move_parser)

    candidates_parser = subparsers.add_parser("candidates", help="List or search candidates")
    candidates_parser.add_argument("--search", default="", help="Search term")
    _add_common(candidates_parser)

    intake_parser = subparsers.add_parser(
        "intake", help="Create a candidate from a CV PDF",
    )
    intake_parser.add_argument("--cv", required=True, help="Path to CV PDF file")
    intake_parser.add_argument("--job", default="", help="Job id (default: talent pool)")
    intake_parser.add_argument("--source", default=None, help="Candidate source")
    _add_common(intake_parser)

    interview_parser = subparsers.add_parser(
        "interview", help="Schedule an interview for an application",
    )
    interview_parser.add_argument("--application", required=True, help="Application id")
    interview_parser.add_argument("--type", default="Video Call", help="Interview type")
    interview_parser.add_argument(
        "--date", required=True, help="Scheduled date, YYYY-MM-DDTHH:MM (UTC)",
    )
    interview_parser.add_argument("--status", default="Scheduled", help="Interview status")
    interview_parser.add_argument("--interviewer", default="", help="Interviewer user id")
    _add_common(interview_parser)

    cv_parser = subparsers.add_parser("cv", help="Show, parse or save the stored CV of a contact")
    cv_parser.add_argument("--contact", required=True, help="Contact id")
    cv_parser.add_argument("--parse", action="store_true", help="Parse the stored CV")
    cv_parser.add_argument(
        "--save", action="store_true", help="Save the parsed data to the contact (implies --parse)",
    )
    _add_common(cv_parser)

    setup_parser = subparsers.add_parser("setup-status", help="Show admin setup readiness")
    _add_common(setup_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    return Settings.from_yaml(path) if path else Settings()


async def cmd_dashboard(hub: AtsHub) -> int:
    await hub.start()
    d = hub.dashboard
    print(f"Open jobs: {d.total_open_jobs}  Active candidates: {d.total_active_candidates}  "
          f"Interviews this week: {d.total_interviews_this_week}  Hired: {d.total_hired}")
    for card in d.cards:
        job = card.item.job
        print(f"  [{job.id}] {job.title} ({job.priority}) - "
              f"{card.item.stats.total_active} active")
    if d.has_upcoming:
        print("\nUpcoming interviews:")
        for row in d.upcoming:
            iv = row.interview
            print(f"  {row.formatted_day} {row.formatted_time}  {iv.candidate_name} - "
                  f"{iv.interview_type} ({iv.job_title})")
    return 0


def _print_board(hub: AtsHub) -> None:
    for column in hub.board.columns:
        print(f"{column.label} ({column.count})")
        for card in column.cards:
            app = card.application
            print(f"  [{app.id}] {app.candidate_name}  {card.days_in_stage}d")


async def cmd_pipeline(hub: AtsHub, job_id: str) -> int:
    await hub.open_job_pipeline(job_id)
    _print_board(hub)
    return 0


async def cmd_move(hub: AtsHub, job_id: str, application_id: str, stage: str) -> int:
    await hub.open_job_pipeline(job_id)
    if hub.board.find(application_id) is None:
        print(f"Error: application {application_id} is not on job {job_id}", file=sys.stderr)
        return 1
    hub.board.drag_start(application_id)
    outcome = await hub.board.drop(stage)
    print(f"Move {application_id} -> {stage}: {outcome.value}")
    _print_board(hub)
    return 0 if outcome in (DropOutcome.COMMITTED, DropOutcome.NO_OP) else 1


async def cmd_candidates(hub: AtsHub, term: str) -> int:
    hub.directory.search_term = term
    await hub.select_tab(Tab.CANDIDATES)
    print(hub.directory.count_label if hub.directory.has_candidates
          else hub.directory.empty_message)
    for row in hub.directory.rows:
        c = row.candidate
        tags = ", ".join(row.skill_tags)
        if row.more_skills_count:
            tags += f" +{row.more_skills_count}"
        print(f"  [{c.contact_id}] {c.name} <{c.email}> {c.candidate_source}  {tags}")
    return 0


async def cmd_intake(hub: AtsHub, args: argparse.Namespace) -> int:
    document = load_cv_document(args.cv)
    intake = hub.intake
    if not intake.accept_document(document):
        return 1
    print(f"Loaded {document.file_name} ({intake.file_size_label}, {document.page_count} pages)")
    async with hub.page_wait("Parsing CV..."):
        parsed_ok = await intake.parse()
    if not parsed_ok:
        print(f"Error: {intake.error_message}", file=sys.stderr)
        return 1
    intake.selected_job_id = args.job
    if args.source:
        intake.selected_source = args.source
    contact_id = await intake.create()
    if contact_id is None:
        return 1
    print(f"Created candidate {contact_id}")
    return 0


async def cmd_interview(hub: AtsHub, args: argparse.Namespace) -> int:
    await hub.detail.open(args.application)
    if not hub.detail.is_open:
        return 1
    workflow = hub.interviews
    workflow.new_for_pipeline()
    workflow.update_field("interview_type", args.type)
    workflow.update_field("scheduled_date", args.date)
    workflow.update_field("status", args.status)
    workflow.update_field("interviewer_id", args.interviewer)
    if not await workflow.save():
        return 1
    for row in hub.detail.view.interviews if hub.detail.view else []:
        iv = row.interview
        print(f"  Round {iv.round}: {iv.interview_type} {row.formatted_date} [{iv.status}]")
    return 0


async def cmd_setup_status(hub: AtsHub) -> int:
    view = SetupView(hub.gateway, hub.notifier, hub.navigator, hub.config)
    await view.load_status()
    if view.error:
        print(f"Error: {view.error}", file=sys.stderr)
        return 1
    print(f"API key: {view.api_status_label}")
    print(f"Permission set: {view.perm_status_label}")
    print(view.overall_message)
    return 0


async def cmd_cv(hub: AtsHub, contact_id: str, parse: bool = False, save: bool = False) -> int:
    viewer = CvViewer(hub.gateway, hub.notifier, hub.navigator, contact_id)
    await viewer.load()
    if viewer.file is None:
        print(f"No CV file found for contact {contact_id}", file=sys.stderr)
        return 1
    print(f"CV: {viewer.file_name} ({viewer.pdf_url})")
    if not (parse or save):
        return 0

    if not await viewer.parse():
        print(f"Error: {viewer.error_message}", file=sys.stderr)
        return 1
    data = viewer.parsed
    if data is None:
        return 1
    print(f"  Name: {data.first_name} {data.last_name}")
    print(f"  Email: {data.email}")
    print(f"  Skills: {', '.join(data.skills)}")
    if save and not await viewer.save():
        return 1
    return 0


async def run(settings: Settings, args: argparse.Namespace) -> int:
    async with get_gateway(settings.gateway) as gateway:
        hub = AtsHub(gateway, config=settings.views)
        if args.command == "dashboard":
            return await cmd_dashboard(hub)
        if args.command == "pipeline":
            return await cmd_pipeline(hub, args.job)
        if args.command == "move":
            return await cmd_move(hub, args.job, args.application, args.stage)
        if args.command == "candidates":
            return await cmd_candidates(hub, args.search)
        if args.command == "intake":
            return await cmd_intake(hub, args)
        if args.command == "interview":
            return await cmd_interview(hub, args)
        if args.command == "cv":
            return await cmd_cv(hub, args.contact, parse=args.parse, save=args.save)
        return await cmd_setup_status(hub)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        code = asyncio.run(run(settings, args))
    except (FileNotFoundError, ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
