"""
Quiz CLI: take a quiz session from the terminal.

A Rich front end over QuizSession. It holds no session logic: every
keypress maps to one session operation and the screen is redrawn from
``session.display``.

Commands:
- quizsession take     - Run a scored quiz for a category
- quizsession preview  - Print one normalised page of questions
- quizsession config   - Show effective settings
"""
from __future__ import annotations

import asyncio
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from quizsession.config import Settings, configure_logging, get_settings
from quizsession.core.errors import CoinDebitError, FetchError, NoContentError, QuizSessionError
from quizsession.core.models import Notice, NoticeLevel, ProgressStats, Question, RewardOutcome
from quizsession.integrations.answer_recorder import AnswerRecorder
from quizsession.integrations.api_client import ApiClient
from quizsession.integrations.coin_ledger import CoinLedger
from quizsession.integrations.question_source import QuestionSource
from quizsession.study.context import letter_for
from quizsession.study.progress import celebration_for, format_stats
from quizsession.study.session import Display, QuizSession, SessionListener


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="quizsession",
    help="Quiz Session: scored quizzes with a coin reward economy",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
}

NOTICE_STYLES = {
    NoticeLevel.INFO: "cyan",
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.WARNING: "yellow",
    NoticeLevel.ERROR: "red",
}


class ConsoleListener(SessionListener):
    """Prints session notices and the completion banner."""

    def on_notice(self, notice: Notice) -> None:
        style = NOTICE_STYLES[notice.level]
        console.print(f"[{style}]{notice.message}[/{style}]")

    def on_complete(self, stats: ProgressStats, reward: RewardOutcome) -> None:
        cue = celebration_for(stats)
        if cue == "fanfare":
            console.print("[bold magenta]*** Perfect score! ***[/bold magenta]")
        elif cue == "levelup":
            console.print("[bold cyan]Level up![/bold cyan]")


# =============================================================================
# Display Helpers
# =============================================================================

def display_question(session: QuizSession) -> None:
    """Display the current question with lettered options."""
    question = session.current_question
    if question is None:
        return
    presented = session.presented_options(question.id)
    answered = session.is_answered(question.id)
    chosen = session.user_answer(question.id)

    content = ""
    if question.passage and question.passage.text:
        content += f"[dim]{question.passage.text}[/dim]\n\n"
    content += question.content + "\n\n"
    for i, option in enumerate(presented):
        line = f"  {letter_for(i)}. {option}"
        if answered and option == question.correct_answer:
            line = f"[{STYLES['correct']}]{line}[/]"
        elif answered and option == chosen:
            line = f"[{STYLES['incorrect']}]{line}[/]"
        content += line + "\n"

    if answered and question.explanation:
        content += f"\n[{STYLES['info']}]Explanation:[/] {question.explanation}"

    header = (
        f"Question {session.current_index + 1}/{session.config.session_length}"
        f"  |  {question.content_category or session.category}"
        f"  |  {session.question_elapsed():.0f}s"
    )
    console.print(
        Panel(content, title=header, title_align="left", border_style="cyan", padding=(1, 2))
    )


def display_summary(session: QuizSession) -> None:
    """Display the end-of-session summary."""
    summary = session.summary()
    stats = summary.stats

    table = Table(title="Quiz Summary", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Question")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    table.add_column("Time", justify="right")
    for item in summary.summaries:
        mark = "[green]✓[/green]" if item.is_correct else "[red]✗[/red]"
        table.add_row(
            str(item.question_number),
            item.question_content[:60],
            f"{mark} {item.user_answer}",
            item.correct_answer,
            f"{item.time_spent_seconds:.1f}s",
        )
    console.print(table)
    console.print(f"Score: {format_stats(stats)}")
    console.print(f"Total time: {summary.total_elapsed_seconds:.1f} seconds")
    if summary.reward is not None:
        console.print(f"Coins awarded: [bold]{summary.reward.coins_awarded}[/bold]")


def display_preview(questions: list[Question]) -> None:
    for number, question in enumerate(questions, 1):
        body = question.content + "\n\n" + "\n".join(
            f"  {letter_for(i)}. {opt}" + ("  [green](correct)[/green]" if i == 0 else "")
            for i, opt in enumerate(question.options)
        )
        if not question.options:
            body += "[yellow](no usable options)[/yellow]"
        console.print(Panel(body, title=f"{number}. {question.id}", title_align="left"))


def build_session(category: str, settings: Settings, api: ApiClient) -> tuple[QuizSession, CoinLedger]:
    """Wire a QuizSession to the HTTP-backed collaborators."""
    session_config = settings.to_session_config()
    source = QuestionSource(
        api,
        page_size=session_config.page_size,
        question_types=settings.question_types,
        shuffle_questions=session_config.shuffle_questions,
    )
    recorder = AnswerRecorder(api, notes=session_config.response_notes)
    ledger = CoinLedger(api)
    session = QuizSession(category, source, recorder, ledger.coin_delta, config=session_config)
    return session, ledger


# =============================================================================
# Interactive loop
# =============================================================================

async def _run_quiz(category: str, settings: Settings) -> None:
    async with ApiClient(settings.to_api_config()) as api:
        session, ledger = build_session(category, settings, api)
        session.subscribe(ConsoleListener())
        try:
            await _quiz_loop(session, ledger)
        finally:
            await session.close()


async def _quiz_loop(session: QuizSession, ledger: CoinLedger) -> None:
    while True:
        await session.load()
        if session.display is Display.NO_QUESTIONS:
            console.print("[yellow]No questions available for this category.[/yellow]")
            return
        if session.display is Display.LOADING or not session.questions:
            if not Confirm.ask("Questions could not be loaded. Retry?", default=True):
                return
            continue

        try:
            balance = await ledger.refresh()
        except QuizSessionError:
            balance = None
        intro = (
            f"Category: [bold]{session.category}[/bold]\n"
            f"Questions: {session.config.session_length}\n"
            f"Entry cost: {session.config.entry_cost} coin(s)\n"
            f"Your coins: {balance if balance is not None else '?'}\n\n"
            f"Score 100% for {session.config.perfect_score_coins} coins, "
            f"{session.config.passing_score_threshold:.0f}%+ for "
            f"{session.config.passing_score_coins}."
        )
        console.print(Panel(intro, title="Quiz", border_style="cyan"))
        if not Confirm.ask("Start quiz?", default=True):
            return
        try:
            await session.start()
        except CoinDebitError:
            if Confirm.ask("Try again?", default=True):
                continue
            return

        if await _question_loop(session):
            return
        await session.reset()


async def _question_loop(session: QuizSession) -> bool:
    """Run until completion or reset. Returns True when the user quits."""
    while True:
        display = session.display
        if display is Display.SUMMARY:
            display_summary(session)
            return not Confirm.ask("Try again?", default=False)
        if display is Display.NO_QUESTIONS:
            console.print("[yellow]No questions available for this category.[/yellow]")
            return True

        display_question(session)
        question = session.current_question
        letters = "".join(letter_for(i) for i in range(len(session.presented_options(question.id))))
        choice = Prompt.ask(
            f"[{STYLES['dim']}]{'/'.join(letters)} answer, n next, p previous, r reset, q quit[/]"
        ).strip().lower()

        if choice == "q":
            return True
        if choice == "r":
            return False
        if choice == "n":
            await session.advance()
        elif choice == "p":
            session.retreat()
        elif len(choice) == 1 and choice.upper() in letters:
            summary = await session.select_option(letters.index(choice.upper()))
            if summary is None:
                console.print(f"[{STYLES['dim']}]Already answered.[/]")
        else:
            console.print(f"[{STYLES['warning']}]Unknown key: {choice}[/]")


# =============================================================================
# Commands
# =============================================================================

@app.command()
def take(
    category: str = typer.Argument(..., help="Content category to quiz on"),
    length: Optional[int] = typer.Option(
        None, "--length", "-n", help="Questions per session", min=1
    ),
    shuffle: Optional[bool] = typer.Option(
        None, "--shuffle/--no-shuffle", help="Shuffle question order within each page"
    ),
) -> None:
    """Take a scored quiz for CATEGORY."""
    settings = get_settings()
    overrides = {}
    if length is not None:
        overrides["session_length"] = length
    if shuffle is not None:
        overrides["shuffle_questions"] = shuffle
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level, settings.log_file)
    try:
        asyncio.run(_run_quiz(category, settings))
    except KeyboardInterrupt:
        console.print("\n[dim]Quiz abandoned.[/dim]")


@app.command()
def preview(
    category: str = typer.Argument(..., help="Content category to preview"),
    page: int = typer.Option(1, "--page", "-p", help="Page number", min=1),
) -> None:
    """Print one page of normalised questions (no coins are spent)."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)

    async def _fetch() -> list[Question]:
        async with ApiClient(settings.to_api_config()) as api:
            source = QuestionSource(
                api, page_size=settings.page_size, question_types=settings.question_types
            )
            return await source.fetch_page(category, page)

    try:
        questions = asyncio.run(_fetch())
    except NoContentError as e:
        console.print(f"[yellow]{e.message}[/yellow]")
        raise typer.Exit(code=1)
    except FetchError as e:
        logger.error("Preview failed: {}", e.message)
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=2)

    if not questions:
        console.print(f"[dim]No questions on page {page}.[/dim]")
        return
    display_preview(questions)


@app.command("config")
def show_config() -> None:
    """Show the effective settings."""
    settings = get_settings()
    table = Table(title="Quiz Session Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        if name == "api_key" and value:
            value = "****"
        table.add_row(name, str(value))
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
