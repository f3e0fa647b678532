"""Interactive CLI application."""
import logging
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from study_tracker.db import init_db, DEFAULT_DB_PATH
from study_tracker.export import export_to_json, format_time_range, week_identifier
from study_tracker.models import MutationResult
from study_tracker.stats import calendar_color, heatmap_weeks
from study_tracker.timetable import load_timetable
from study_tracker.tracker import TrackingStore

console = Console()

STATUS_STYLE = {"completed": "green", "skipped": "yellow", "pending": "dim"}
CELL_GLYPH = {
    "hidden": " ", "future": "·", "empty": "░",
    "level-1": "▒", "level-2": "▓", "level-3": "█",
}
PERCENT_COLOR = {"green": "green", "yellow": "yellow", "red": "red", "grey": "white", "future": "dim"}


def setup_logging(db_path: str) -> None:
    log_path = Path(db_path).parent / "study_tracker.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.FileHandler(log_path, encoding="utf-8")],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Placement Prep Tracker[/bold]\n[dim]Daily study schedule tracking[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_corruption_warning(store: TrackingStore):
    lines = "\n".join(f"- {e}" for e in store.corruption_errors[:10])
    more = len(store.corruption_errors) - 10
    if more > 0:
        lines += f"\n[dim]...and {more} more[/dim]"
    console.print(Panel(
        f"{lines}\n\n[bold]Changes are disabled.[/bold] Use 'restore' to recover from a snapshot.",
        title="Data integrity problem", border_style="red",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's schedule"),
        ("done", "Mark a block complete / incomplete"),
        ("skip", "Record why a block was skipped"),
        ("subject", "Change a block's subject for today"),
        ("time", "Change a block's time for today"),
        ("notes", "Edit today's notes"),
        ("leetcode", "Toggle today's LeetCode goal"),
        ("weak", "Manage weak areas"),
        ("progress", "Subject hours + totals"),
        ("streaks", "Streaks + yearly heatmap"),
        ("week", "This week's summary"),
        ("review", "Write this week's review"),
        ("export", "Export this week as JSON"),
        ("snapshots", "List backups"),
        ("restore", "Restore from a backup"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def report(result: MutationResult, success_msg: str = "") -> None:
    if not result.ok:
        console.print(f"[red]{result.error}[/red]")
    elif success_msg:
        console.print(f"[green]{success_msg}[/green]")


def ask_block(store: TrackingStore, date_key: str) -> int | None:
    schedule = store.get_day_stats(date_key).schedule
    if not schedule:
        console.print("[yellow]Rest day, no blocks scheduled.[/yellow]")
        return None
    number = IntPrompt.ask("Block number", choices=[str(i) for i in range(1, len(schedule) + 1)])
    return number - 1


def cmd_today(store: TrackingStore):
    stats = store.get_day_stats(store.current_day())
    day = stats.day_data
    console.print(Panel(
        f"[bold]{stats.day_name}[/bold] {stats.date_key}\n"
        f"Hours: [bold]{stats.completed_hours:.1f} / {stats.total_hours:.1f}[/bold]  "
        f"({stats.percent:.0f}%)  |  LeetCode: "
        + ("[green]Done[/green]" if day.leetcode else "Pending"),
        title="Today", border_style="blue",
    ))
    if not stats.schedule:
        console.print("[dim]Rest Day / No Schedule. Enjoy your free time![/dim]")
        return
    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Subject", style="cyan")
    table.add_column("Status")
    done = set(day.completed_blocks)
    for i, block in enumerate(stats.schedule):
        time = day.effective_time(i, block)
        reason = day.skipped_reasons.get(i)
        status = "completed" if i in done else ("skipped" if reason else "pending")
        label = f"[{STATUS_STYLE[status]}]{status}[/{STATUS_STYLE[status]}]"
        if reason:
            label += f" [dim]({reason})[/dim]"
        table.add_row(str(i + 1), format_time_range(time.start, time.end), day.effective_subject(i, block), label)
    console.print(table)
    if day.notes:
        console.print(f"\n[bold]Notes:[/bold] {day.notes}")


def cmd_done(store: TrackingStore):
    today = store.current_day()
    index = ask_block(store, today)
    if index is not None:
        report(store.toggle_block(today, index), "Updated.")


def cmd_skip(store: TrackingStore):
    today = store.current_day()
    index = ask_block(store, today)
    if index is None:
        return
    reason = Prompt.ask("Reason (blank to clear)", default="")
    report(store.update_skip_reason(today, index, reason), "Skip reason saved.")


def cmd_subject(store: TrackingStore):
    today = store.current_day()
    index = ask_block(store, today)
    if index is None:
        return
    text = Prompt.ask("New subject")
    report(store.update_overridden_subject(today, index, text), "Subject updated.")


def cmd_time(store: TrackingStore):
    today = store.current_day()
    index = ask_block(store, today)
    if index is None:
        return
    start = Prompt.ask("Start (HH:MM)")
    end = Prompt.ask("End (HH:MM)")
    report(store.update_overridden_time(today, index, start, end), "Time updated.")


def cmd_notes(store: TrackingStore):
    today = store.current_day()
    current = store.state.day(today).notes
    text = Prompt.ask("Notes", default=current)
    report(store.update_notes(today, text), "Notes saved.")


def cmd_leetcode(store: TrackingStore):
    report(store.toggle_leetcode(store.current_day()), "LeetCode goal toggled.")


def cmd_weak(store: TrackingStore):
    areas = list(store.state.weak_areas)
    if areas:
        for i, area in enumerate(areas, 1):
            console.print(f"  [cyan]{i}[/cyan]) {area}")
    else:
        console.print("[dim]No weak areas recorded.[/dim]")
    new_area = Prompt.ask("Add weak area (blank to skip)", default="").strip()
    if new_area:
        areas.append(new_area)
    remove = Prompt.ask("Remove number (blank to skip)", default="").strip()
    if remove.isdigit() and 1 <= int(remove) <= len(areas):
        areas.pop(int(remove) - 1)
    if areas != list(store.state.weak_areas):
        report(store.update_weak_areas("\n".join(areas)), "Weak areas updated.")


def cmd_progress(store: TrackingStore):
    totals = store.progress_totals()
    hours = totals["subject_hours"]
    console.print(f"\n  Study hours: [bold]{totals['total_study_hours']:.1f}[/bold]  |  "
                  f"LeetCode days: [bold]{totals['total_leetcode']}[/bold]\n")
    if not hours:
        console.print("[dim]No completed blocks yet.[/dim]")
        return
    max_hours = max(max(hours.values()), 1)
    table = Table(title="Subject Proficiency")
    table.add_column("Subject", style="cyan")
    table.add_column("Hours", justify="right")
    table.add_column("")
    for subject, h in sorted(hours.items(), key=lambda kv: kv[1], reverse=True):
        filled = int(h / max_hours * 20)
        table.add_row(subject, f"{h:.1f}", f"[green]{'█' * filled}{'░' * (20 - filled)}[/green]")
    console.print(table)

    # this month's calendar
    today = date.fromisoformat(store.current_day())
    cells = []
    for d in range(1, 32):
        try:
            key = today.replace(day=d).isoformat()
        except ValueError:
            break
        stats = store.get_day_stats(key)
        color = calendar_color(stats, key in store.state.daily_progress, key > today.isoformat())
        cells.append(f"[{PERCENT_COLOR[color]}]{d:>2}[/{PERCENT_COLOR[color]}]")
    console.print(f"\n[bold]{today.strftime('%B %Y')}[/bold]")
    for i in range(0, len(cells), 7):
        console.print("  " + " ".join(cells[i:i + 7]))


def cmd_streaks(store: TrackingStore):
    streaks = store.streaks()
    console.print(f"\n  Current streak: [bold]{streaks.current}[/bold] days  |  "
                  f"Best streak: [bold]{streaks.best}[/bold] days")
    console.print("  [dim]A day counts when at least 70% of its scheduled hours are done. "
                  "Rest days don't break a streak.[/dim]\n")
    today = store.current_day()
    year = date.fromisoformat(today).year
    weeks = heatmap_weeks(store.state, store.timetable, year, today)
    for weekday in range(7):
        row = "".join(CELL_GLYPH[week[weekday]["level"]] for week in weeks)
        console.print(f"  [green]{row}[/green]")


def cmd_week(store: TrackingStore):
    data = store.weekly_data(store.current_day())
    summary = data["summary"]
    table = Table(title=f"Week {data['weekIdentifier']}")
    table.add_column("Date")
    table.add_column("Day")
    table.add_column("Hours", justify="right")
    table.add_column("Done", justify="right")
    for day in data["dailyBreakdown"]:
        table.add_row(
            day["date"], day["dayName"],
            f"{day['completedHours']} / {day['plannedHours']}",
            f"{day['completionPercentage']}%",
        )
    console.print(table)
    console.print(f"\n  Total: [bold]{summary['totalCompletedHours']} / {summary['totalPlannedHours']}h[/bold]"
                  f" ({summary['completionPercentage']}%)")


def cmd_review(store: TrackingStore):
    week_id = week_identifier(date.fromisoformat(store.current_day()))
    existing = store.state.reviews.get(week_id)
    if not isinstance(existing, dict):
        existing = {}
    wins = Prompt.ask("What went well?", default=existing.get("wins", ""))
    blockers = Prompt.ask("What got in the way?", default=existing.get("blockers", ""))
    focus = Prompt.ask("Focus for next week", default=existing.get("focus", ""))
    report(store.save_review(week_id, {"wins": wins, "blockers": blockers, "focus": focus}),
           f"Review saved for {week_id}.")


def cmd_export(store: TrackingStore):
    out_dir = Prompt.ask("Output directory", default=".")
    path = export_to_json(store.weekly_data(store.current_day()), out_dir)
    console.print(f"[green]Exported → {path}[/green]")


def cmd_snapshots(store: TrackingStore):
    snaps = store.list_snapshots()
    if not snaps:
        console.print("[yellow]No snapshots yet.[/yellow]")
        return
    table = Table(title="Snapshots")
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Taken at")
    for i, s in enumerate(snaps, 1):
        table.add_row(str(i), s.date, s.timestamp or "[dim]unknown[/dim]")
    console.print(table)


def cmd_restore(store: TrackingStore):
    snaps = store.list_snapshots()
    if not snaps:
        console.print("[yellow]No snapshots available to restore.[/yellow]")
        return
    cmd_snapshots(store)
    choice = IntPrompt.ask("Restore which snapshot", choices=[str(i) for i in range(1, len(snaps) + 1)])
    key = snaps[choice - 1].key
    if Prompt.ask(f"Overwrite current data with {key}?", choices=["y", "n"], default="n") != "y":
        return
    if store.restore_from_snapshot(key):
        console.print(f"[green]Restored from {key}.[/green]")
        if store.is_read_only:
            show_corruption_warning(store)
    else:
        console.print(f"[red]Could not restore from {key}. Existing data left untouched.[/red]")


COMMANDS = {
    "today": cmd_today,
    "done": cmd_done,
    "skip": cmd_skip,
    "subject": cmd_subject,
    "time": cmd_time,
    "notes": cmd_notes,
    "leetcode": cmd_leetcode,
    "weak": cmd_weak,
    "progress": cmd_progress,
    "streaks": cmd_streaks,
    "week": cmd_week,
    "review": cmd_review,
    "export": cmd_export,
    "snapshots": cmd_snapshots,
    "restore": cmd_restore,
}


def main():
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    setup_logging(db_path)
    store = TrackingStore(db_path, load_timetable())

    show_welcome()
    if store.is_read_only:
        show_corruption_warning(store)
    cmd_today(store)

    while True:
        if store.poll():
            console.print(f"[cyan]A new day has started: {store.today_key}[/cyan]")
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Keep going![/dim]")
                break
            elif choice in COMMANDS:
                COMMANDS[choice](store)
                if not store.last_save_ok:
                    console.print("[yellow]Warning: changes could not be saved to disk.[/yellow]")
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
