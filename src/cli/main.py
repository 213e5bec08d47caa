"""
QueryUp CLI - Peer mentorship from the terminal.

Commands:
    queryup signup EMAIL          - Create an account (first account is admin)
    queryup login EMAIL           - Log in
    queryup logout                - Forget the active identity
    queryup whoami                - Profile, level and rank
    queryup profile               - Complete or edit your profile
    queryup post                  - Post a query
    queryup feed                  - Browse open queries you could mentor
    queryup accept QUERY_ID       - Mentor a query (session auto-scheduled)
    queryup sessions              - Your sessions as mentor and mentee
    queryup outcome SESSION_ID    - Record whether a session happened
    queryup rate SESSION_ID SCORE - Rate the other participant (1-5)
    queryup leaderboard           - Top mentors by XP
    queryup notifications         - Your notifications
    queryup users                 - All users (admin)
    queryup block/unblock USER_ID - Moderate a user (admin)

Usage:
    queryup signup asha.k@pccoepune.org
    queryup post --title "Dijkstra with negative edges?" --tag DSA
    queryup feed --subject DSA --fresh
"""

from __future__ import annotations

import os
import sys

# Fix Windows encoding issues for Unicode characters (stars, box drawing)
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Annotated, NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from src.cli.identity import IdentityStore
from src.core.errors import LedgerError
from src.core.levels import xp_to_next_level
from src.core.models import SUBJECT_OPTIONS, Branch, MentorType, PreferredMode, Session, User, Year
from src.ledger import feed
from src.ledger.service import MentorshipLedger

app = typer.Typer(
    name="queryup",
    help="QueryUp - ask, mentor, level up",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


# ========================================
# Context Builder
# ========================================


class CLIContext:
    """Ledger plus remembered identity for one command invocation."""

    def __init__(self):
        self.settings = get_settings()
        self.ledger = MentorshipLedger.open(self.settings)
        self.identities = IdentityStore(self.settings.identity_path)

    def require_user(self) -> User:
        identity = self.identities.load()
        if identity is None:
            _fail("Not logged in. Run [bold]queryup login EMAIL[/bold] first.")
        try:
            return self.ledger.resume(identity.user_id)
        except LedgerError as e:
            self.identities.clear()
            _fail(str(e))

    def require_admin(self) -> User:
        user = self.require_user()
        if not user.is_admin:
            _fail("Admin only.")
        return user


def _fail(message: str) -> NoReturn:
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)


@contextmanager
def ledger_errors() -> Iterator[None]:
    """Turn refused ledger operations into a red message and exit code 1."""
    try:
        yield
    except LedgerError as e:
        _fail(str(e))


def _when(moment: datetime) -> str:
    return moment.astimezone().strftime("%d %b %Y %H:%M")


def _stars(rating: int | None) -> str:
    return f"★ {rating}" if rating is not None else "-"


def _name_of(ctx: CLIContext, user_id: str) -> str:
    user = ctx.ledger.state.find_user(user_id)
    return user.name if user else user_id


# ========================================
# ACCOUNT COMMANDS
# ========================================


@app.command()
def signup(
    email: Annotated[str, typer.Argument(help="Institution email address")],
    password: Annotated[
        str, typer.Option(prompt=True, hide_input=True, confirmation_prompt=True)
    ],
) -> None:
    """Create an account. The very first account becomes the admin."""
    ctx = CLIContext()
    with ledger_errors():
        user = ctx.ledger.register(email, password).value
    ctx.identities.save(user.id, user.email)

    console.print(f"[green]✓[/green] Welcome, [bold]{user.name}[/bold] ({user.role.value})")
    console.print("  Next: [bold]queryup profile --year ... --subject ...[/bold]")


@app.command()
def login(
    email: Annotated[str, typer.Argument(help="Institution email address")],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True)],
) -> None:
    """Log in and remember the identity for later commands."""
    ctx = CLIContext()
    with ledger_errors():
        result = ctx.ledger.authenticate(email, password)
    ctx.identities.save(result.user.id, result.user.email)

    console.print(f"[green]✓[/green] Logged in as [bold]{result.user.name}[/bold]")
    if result.needs_profile:
        console.print("[yellow]⚠[/yellow] Complete your profile: year and at least one subject")


@app.command()
def logout() -> None:
    """Forget the active identity."""
    ctx = CLIContext()
    ctx.ledger.logout()
    if ctx.identities.clear():
        console.print("[green]✓[/green] Logged out")
    else:
        console.print("[dim]Not logged in[/dim]")


@app.command()
def whoami() -> None:
    """Show your profile, level and leaderboard rank."""
    ctx = CLIContext()
    user = ctx.require_user()
    remaining = xp_to_next_level(user.xp)
    rank = ctx.ledger.leaderboard().rank_of(user.id)
    rating = f"★ {user.rating_avg:.2f} ({user.rating_count})" if user.rating_count else "No ratings yet"

    console.print(
        Panel(
            f"[bold]{user.name}[/bold]  {user.email}\n"
            f"{user.year.value if user.year else '-'} · {user.branch.value if user.branch else '-'}"
            f" · {user.role.value}\n"
            f"Strong subjects: {', '.join(user.strong_subjects) or '-'}\n"
            f"{user.bio}\n\n"
            f"[cyan]LVL {user.level}[/cyan]  {user.xp} XP"
            f"{f'  ({remaining} to next level)' if remaining is not None else '  (max level)'}\n"
            f"Rating: {rating}   Rank: #{rank}",
            title="👤 Profile",
            border_style="cyan",
        )
    )


@app.command()
def profile(
    name: Annotated[str | None, typer.Option(help="Display name")] = None,
    year: Annotated[Year | None, typer.Option(help="Year of study")] = None,
    branch: Annotated[Branch | None, typer.Option(help="Branch")] = None,
    bio: Annotated[str | None, typer.Option(help="Short bio")] = None,
    subject: Annotated[
        list[str] | None,
        typer.Option("--subject", "-s", help=f"Strong subject, repeatable ({', '.join(SUBJECT_OPTIONS)}, ...)"),
    ] = None,
) -> None:
    """Complete or edit your profile. Name, year and one subject are required."""
    ctx = CLIContext()
    user = ctx.require_user()

    fields: dict = {}
    if name is not None:
        fields["name"] = name.strip()
    if year is not None:
        fields["year"] = year
    if branch is not None:
        fields["branch"] = branch
    if bio is not None:
        fields["bio"] = bio
    if subject:
        fields["strong_subjects"] = subject

    if not fields.get("name", user.name):
        _fail("Name is required.")
    if fields.get("year", user.year) is None:
        _fail("Year is required: --year '2nd Year'")
    if not fields.get("strong_subjects", user.strong_subjects):
        _fail("Pick at least one strong subject: --subject DSA")

    with ledger_errors():
        updated = ctx.ledger.update_profile(user.id, **fields).value
    console.print(f"[green]✓[/green] Profile saved for [bold]{updated.name}[/bold]")


# ========================================
# QUERY COMMANDS
# ========================================


@app.command()
def post(
    title: Annotated[str, typer.Option("--title", "-t", help="Short summary of the doubt")],
    description: Annotated[
        str, typer.Option("--description", "-d", help="What you tried and where you're stuck")
    ],
    tag: Annotated[list[str], typer.Option("--tag", help="Subject tag, repeatable")],
    mentor_type: Annotated[MentorType, typer.Option(help="Preferred mentor")] = MentorType.ANY,
    mode: Annotated[PreferredMode, typer.Option(help="Preferred mode")] = PreferredMode.EITHER,
    time: Annotated[str, typer.Option(help="Time preference, e.g. 'Today evening'")] = "",
) -> None:
    """Post a query for mentors to pick up."""
    ctx = CLIContext()
    user = ctx.require_user()
    if not title.strip() or not description.strip() or not tag:
        _fail("Title, description and at least 1 subject tag are required.")

    with ledger_errors():
        query = ctx.ledger.post_query(
            user.id,
            title=title.strip(),
            description=description.strip(),
            subject_tags=tag,
            preferred_mentor_type=mentor_type,
            preferred_mode=mode,
            time_preference=time,
        ).value
    console.print(f"[green]✓[/green] Query launched! 🚀  [dim]{query.id}[/dim]")


@app.command("feed")
def show_feed(
    subject: Annotated[str | None, typer.Option(help="Only this subject tag")] = None,
    year: Annotated[Year | None, typer.Option(help="Only askers in this year")] = None,
    fresh: Annotated[bool, typer.Option("--fresh", help="Only queries nobody accepted")] = False,
    search: Annotated[str | None, typer.Option("--search", "-q", help="Search title/description")] = None,
) -> None:
    """Browse open queries you could mentor."""
    ctx = CLIContext()
    user = ctx.require_user()
    queries = ctx.ledger.browse_queries(
        user.id, subject=subject, year=year, only_fresh=fresh, search=search
    )
    if not queries:
        console.print("[dim]No open queries match.[/dim]")
        return

    table = Table(title="Open queries")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Tags", style="cyan")
    table.add_column("Asker")
    table.add_column("Mode")
    table.add_column("When")
    for q in queries:
        table.add_row(
            q.id,
            q.title,
            ", ".join(q.subject_tags),
            _name_of(ctx, q.asker_id),
            q.preferred_mode.value,
            q.time_preference or "-",
        )
    console.print(table)


@app.command()
def accept(query_id: Annotated[str, typer.Argument(help="Query to mentor")]) -> None:
    """Become the mentor for a query. The session is auto-scheduled."""
    ctx = CLIContext()
    user = ctx.require_user()
    with ledger_errors():
        session = ctx.ledger.accept_query(query_id, user.id).value
    console.print("[green]✓[/green] You are now the mentor for this query! Session auto-scheduled.")
    console.print(f"  {_when(session.date_time)} · {session.mode.value} · {session.location_or_link}")


# ========================================
# SESSION COMMANDS
# ========================================


def _session_table(ctx: CLIContext, title: str, sessions: list[Session], role: str) -> Table:
    now = datetime.now(UTC)
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Query", style="bold")
    table.add_column("With")
    table.add_column("When")
    table.add_column("Where")
    table.add_column("Status")
    table.add_column("Ratings (mentor/mentee)")
    table.add_column("Next")
    for s in sessions:
        query = ctx.ledger.state.find_query(s.query_id)
        other = s.mentee_id if role == "mentor" else s.mentor_id
        if feed.can_mark_outcome(s, now):
            action = "outcome"
        elif feed.can_rate(s, role):
            action = "rate"
        else:
            action = "-"
        table.add_row(
            s.id,
            query.title if query else s.query_id,
            _name_of(ctx, other),
            _when(s.date_time),
            f"{s.mode.value}: {s.location_or_link}",
            s.status.value,
            f"{_stars(s.rating_for_mentor)} / {_stars(s.rating_for_mentee)}",
            action,
        )
    return table


@app.command()
def sessions() -> None:
    """List your sessions as mentor and as mentee."""
    ctx = CLIContext()
    user = ctx.require_user()
    board = ctx.ledger.sessions_for(user.id)
    if not board.as_mentor and not board.as_mentee:
        console.print("[dim]No sessions yet.[/dim]")
        return
    if board.as_mentor:
        console.print(_session_table(ctx, "As mentor", board.as_mentor, "mentor"))
    if board.as_mentee:
        console.print(_session_table(ctx, "As mentee", board.as_mentee, "mentee"))


def _participant_session(ctx: CLIContext, user: User, session_id: str) -> tuple[Session, str]:
    session = ctx.ledger.state.find_session(session_id)
    role = feed.role_in(session, user.id) if session else None
    if session is None or role is None:
        _fail(f"No session {session_id} of yours.")
    return session, role


@app.command()
def outcome(
    session_id: Annotated[str, typer.Argument(help="Session to settle")],
    happened: Annotated[
        bool, typer.Option("--happened/--no-show", help="Whether the session took place")
    ] = True,
) -> None:
    """Record whether a session happened."""
    ctx = CLIContext()
    user = ctx.require_user()
    session, _ = _participant_session(ctx, user, session_id)
    with ledger_errors():
        updated = ctx.ledger.mark_outcome(session.id, happened).value
    console.print(f"[green]✓[/green] Session marked [bold]{updated.status.value}[/bold]")


@app.command()
def rate(
    session_id: Annotated[str, typer.Argument(help="Completed session")],
    score: Annotated[int, typer.Argument(min=1, max=5, help="1-5 stars")],
) -> None:
    """Rate the other participant. Mentees rate mentors, which earns them XP."""
    ctx = CLIContext()
    user = ctx.require_user()
    session, role = _participant_session(ctx, user, session_id)
    if not session.is_completed:
        _fail("Only completed sessions can be rated.")

    with ledger_errors():
        ctx.ledger.rate_session(session.id, score, for_mentor=role == "mentee")
    rated = session.mentor_id if role == "mentee" else session.mentee_id
    console.print(f"[green]✓[/green] Rated {_name_of(ctx, rated)} {_stars(score)}")


# ========================================
# LEADERBOARD & NOTIFICATIONS
# ========================================


@app.command()
def leaderboard(
    limit: Annotated[int, typer.Option("--limit", "-n", min=1, help="Rows to show")] = 10,
) -> None:
    """Top mentors ranked by XP (rating x 10 per completed session)."""
    ctx = CLIContext()
    table = Table(title="🏆 Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Mentor", style="bold")
    table.add_column("Year")
    table.add_column("Level", style="cyan")
    table.add_column("XP", justify="right", style="green")
    table.add_column("Rating")
    table.add_column("Sessions", justify="right")
    for entry in ctx.ledger.leaderboard().top(limit):
        u = entry.user
        table.add_row(
            str(entry.rank),
            u.name,
            u.year.value if u.year else "-",
            f"LVL {u.level}",
            str(u.xp),
            f"★ {u.rating_avg:.2f} ({u.rating_count})" if u.rating_count else "-",
            str(entry.completed_sessions),
        )
    console.print(table)


@app.command()
def notifications(
    unread: Annotated[bool, typer.Option("--unread", help="Only unread")] = False,
    mark_read: Annotated[bool, typer.Option("--mark-read", help="Mark listed as read")] = False,
) -> None:
    """Show your notifications."""
    ctx = CLIContext()
    user = ctx.require_user()
    items = ctx.ledger.notifications_for(user.id, unread_only=unread)
    if not items:
        console.print("[dim]Nothing new.[/dim]")
        return
    for n in items:
        marker = "[dim]·[/dim]" if n.read else "[yellow]●[/yellow]"
        console.print(f"{marker} {_when(n.created_at)}  {n.message}")
        if mark_read and not n.read:
            ctx.ledger.mark_notification_read(n.id)


# ========================================
# ADMIN COMMANDS
# ========================================


@app.command()
def users() -> None:
    """List all users (admin)."""
    ctx = CLIContext()
    ctx.require_admin()
    table = Table(title="Users")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Email")
    table.add_column("Year")
    table.add_column("XP", justify="right")
    table.add_column("Rating")
    table.add_column("Role")
    table.add_column("Status")
    for u in ctx.ledger.state.users:
        table.add_row(
            u.id,
            u.name,
            u.email,
            u.year.value if u.year else "-",
            str(u.xp),
            f"★ {u.rating_avg:.2f}" if u.rating_count else "-",
            u.role.value,
            "[red]Blocked[/red]" if u.is_blocked else "[green]Active[/green]",
        )
    console.print(table)


def _set_blocked(user_id: str, blocked: bool) -> None:
    ctx = CLIContext()
    admin = ctx.require_admin()
    if user_id == admin.id:
        _fail("You cannot block yourself.")
    with ledger_errors():
        user = ctx.ledger.set_blocked(user_id, blocked).value
    console.print(f"[green]✓[/green] {user.email} {'blocked' if blocked else 'unblocked'}")


@app.command()
def block(user_id: Annotated[str, typer.Argument(help="User to block")]) -> None:
    """Block a user from logging in (admin)."""
    _set_blocked(user_id, True)


@app.command()
def unblock(user_id: Annotated[str, typer.Argument(help="User to unblock")]) -> None:
    """Let a blocked user log in again (admin)."""
    _set_blocked(user_id, False)


# ========================================
# Entry Point
# ========================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
