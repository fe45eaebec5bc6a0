"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session, SQLModel

from mdreview.config import Settings, load_config
from mdreview.core.markup.document import DiffDocument
from mdreview.core.markup.preprocess import preprocess
from mdreview.core.markup.registry import DiffNodeRegistry
from mdreview.core.pipeline import render_diff
from mdreview.core.utils.diff import line_change_counts
from mdreview.core.utils.logger import configure_logging
from mdreview.crud.database import init_db, make_engine
from mdreview.crud.explanations import create_explanation, get_explanation, list_explanations
from mdreview.crud.sql_repo import SQLExplanationRepo
from mdreview.crud.versioning import diff_versions, list_versions, revert_to_version
from mdreview.errors import DiffNodeNotFoundError, ReviewError
from mdreview.lifecycle import selectors
from mdreview.lifecycle.state import ErrorState, ExplanationStatus
from mdreview.session import ReviewSession


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and apply its log level."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _read(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def _write_or_echo(text: str, out: Optional[str]) -> None:
    if out:
        Path(out).write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {out}")
    else:
        typer.echo(text)


def _echo_registry(registry: DiffNodeRegistry) -> None:
    for key in registry.keys_in_order():
        typer.echo(f"  {key} [{registry.type_of(key).value}] {registry.get(key)!r}")
    typer.echo(
        f"{registry.count()} diff node(s) - "
        f"{registry.count('ins')} ins, {registry.count('del')} del, "
        f"{registry.change_count()} change(s)"
    )


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def import_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to store as an explanation")],
    title: Annotated[Optional[str], typer.Option("--title", help="Title; defaults to the file stem")] = None,
    status: Annotated[ExplanationStatus, typer.Option("--status", help="draft or published")] = ExplanationStatus.draft,
    ):
    """Store a markdown file as a new explanation and print its id."""
    settings = _settings()
    content = _read(path)
    engine = _engine(settings)
    try:
        with Session(engine) as session:
            explanation = create_explanation(session, content, title or Path(path).stem, status)
            session.commit()
            explanation_id = str(explanation.id)
    except Exception as e:
        _fail("Import failed", e)
    typer.echo(explanation_id)


def list_cmd():
    """List stored explanations, most recently updated first."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        rows = [(str(e.id), e.status.value, e.title) for e in list_explanations(session)]
    if not rows:
        typer.echo("No explanations found in database.")
        raise typer.Exit(1)
    for explanation_id, status, title in rows:
        typer.echo(f"{explanation_id}  {status:<9}  {title}")


def show_cmd(
    explanation_id: Annotated[str, typer.Argument(help="Explanation id")],
    ):
    """Print an explanation's markdown."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        explanation = get_explanation(session, explanation_id)
        if explanation is None:
            _fail(f"Explanation {explanation_id} not found")
        typer.echo(f"# {explanation.title} ({explanation.status.value})\n")
        typer.echo(explanation.content)


def diff_cmd(
    original: Annotated[str, typer.Argument(help="Original markdown file")],
    revised: Annotated[str, typer.Argument(help="Revised markdown file")],
    out: Annotated[Optional[str], typer.Option("--out", help="Write markup here instead of stdout")] = None,
    granularity: Annotated[Optional[str], typer.Option("--granularity", help="word or char")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    raw: Annotated[bool, typer.Option("--raw", help="Skip line-break encoding inside spans")] = False,
    ):
    """Render the diff between two markdown files as CriticMarkup."""
    settings = _settings(overrides={"granularity": granularity, "parser_config": parser})
    before, after = _read(original), _read(revised)
    try:
        _, markup = render_diff(before, after, settings.parser_config, settings.granularity)
    except ReviewError as e:
        _fail("Diff failed", e)
    if not raw:
        markup = preprocess(markup, settings.break_token)
    _write_or_echo(markup, out)


def nodes_cmd(
    markup_file: Annotated[str, typer.Argument(help="File containing diff markup")],
    ):
    """List the diff nodes of a markup file in document order."""
    settings = _settings()
    registry = DiffNodeRegistry.from_markup(_read(markup_file), settings.break_token)
    _echo_registry(registry)


def resolve_cmd(
    markup_file: Annotated[str, typer.Argument(help="File containing diff markup")],
    accept: Annotated[Optional[list[str]], typer.Option("--accept", help="Diff node key to accept (repeatable)")] = None,
    reject: Annotated[Optional[list[str]], typer.Option("--reject", help="Diff node key to reject (repeatable)")] = None,
    accept_all: Annotated[bool, typer.Option("--accept-all", help="Accept every remaining node")] = False,
    reject_all: Annotated[bool, typer.Option("--reject-all", help="Reject every remaining node")] = False,
    out: Annotated[Optional[str], typer.Option("--out", help="Write result here instead of stdout")] = None,
    ):
    """Accept or reject diff nodes and print the resulting markup."""
    if accept_all and reject_all:
        _fail("--accept-all and --reject-all are mutually exclusive")
    settings = _settings()
    document = DiffDocument.parse(_read(markup_file), settings.break_token)
    try:
        for key in accept or []:
            document.accept(key)
        for key in reject or []:
            document.reject(key)
    except DiffNodeNotFoundError as e:
        _fail(str(e))
    if accept_all:
        document.accept_all()
    elif reject_all:
        document.reject_all()
    _write_or_echo(document.to_markup(), out)


def suggest_cmd(
    explanation_id: Annotated[str, typer.Argument(help="Explanation id")],
    revised: Annotated[str, typer.Argument(help="Markdown file holding the AI revision")],
    accept_all: Annotated[bool, typer.Option("--accept-all", help="Accept every suggested change")] = False,
    reject_all: Annotated[bool, typer.Option("--reject-all", help="Reject every suggested change")] = False,
    save: Annotated[bool, typer.Option("--save", help="Persist the result once every change is resolved")] = False,
    ):
    """Review an AI revision of a stored explanation through the page lifecycle."""
    if accept_all and reject_all:
        _fail("--accept-all and --reject-all are mutually exclusive")
    settings = _settings()
    revision = _read(revised)
    repo = SQLExplanationRepo(_engine(settings), settings.max_versions)
    session = ReviewSession(repo, settings=settings)

    session.load(explanation_id)
    if isinstance(session.state, ErrorState):
        _fail(session.state.error)
    original = selectors.get_content(session.state)
    result = session.suggest(revised=revision)
    if result is None:
        _fail(selectors.get_error(session.state) or "Suggestion failed")
    typer.echo(result.markup)
    _echo_registry(session.registry)

    if accept_all:
        session.accept_all()
    elif reject_all:
        session.reject_all()
    if not save:
        return
    if session.has_pending_suggestions:
        _fail("Unresolved diff nodes remain; pass --accept-all or --reject-all to save")

    session.save()
    if isinstance(session.state, ErrorState):
        _fail(session.state.error)
    counts = line_change_counts(original, selectors.get_content(session.state))
    typer.echo(
        f"Saved {session.explanation_id} - "
        f"{counts['added']} added, {counts['deleted']} deleted, {counts['unchanged']} unchanged line(s)"
    )


def versions_cmd(
    explanation_id: Annotated[str, typer.Argument(help="Explanation id")],
    diff: Annotated[Optional[tuple[int, int]], typer.Option("--diff", help="Show a unified diff between two version numbers")] = None,
    revert: Annotated[Optional[int], typer.Option("--revert", help="Restore this version number")] = None,
    ):
    """List stored versions of an explanation, diff two of them, or revert to one."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        explanation = get_explanation(session, explanation_id)
        if explanation is None:
            _fail(f"Explanation {explanation_id} not found")
        try:
            if diff:
                typer.echo("".join(diff_versions(session, explanation.id, diff[0], diff[1])), nl=False)
                return
            if revert is not None:
                revert_to_version(session, explanation, revert, settings.max_versions)
                session.commit()
                typer.echo(f"Reverted {explanation_id} to version {revert}")
                return
        except ValueError as e:
            _fail(str(e))
        versions = list_versions(session, explanation.id)
        if not versions:
            typer.echo("No stored versions.")
            return
        for v in versions:
            typer.echo(f"  v{v.version_num}  {v.created_at:%Y-%m-%d %H:%M}  {v.status.value:<9}  {v.title}")
