# daymap/cli.py
"""
CLI interface for daymap.

Thin presentation layer over the tools/ service layer.
All commands delegate to the same functions that MCP wraps.
"""

import asyncio
from datetime import date as _date

import typer
from fastmcp.exceptions import ToolError
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="daymap",
    help="Plan projects into day-by-day roadmaps with a local LLM.",
    no_args_is_help=True,
)

console = Console()

_TYPE_STYLES = {"normal": "", "review": "magenta", "check": "cyan"}


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _load_config():
    from daymap.config.loader import load_config

    return load_config()


def _open_workspace(config):
    """Open the file-backed project workspace."""
    from daymap.config.loader import get_data_dir
    from daymap.models.persistence import ProjectPersistence
    from daymap.models.storage import FileBlobStore
    from daymap.models.workspace import ProjectWorkspace

    return ProjectWorkspace.open(ProjectPersistence(FileBlobStore(get_data_dir(config))))


def _make_service(config):
    """Build the LLM-backed roadmap service for the configured provider."""
    from daymap.llm.factory import create_llm_client
    from daymap.planning.service import LLMRoadmapService

    return LLMRoadmapService(create_llm_client(config))


def _fail(e: Exception) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


def _progress_style(percent: int) -> str:
    if percent == 100:
        return "green"
    if percent > 0:
        return "yellow"
    return "dim"


def _print_day(day: dict) -> None:
    if day["date"] is None:
        typer.echo(f"{day['project_name']} has no scheduled tasks.")
        return

    dates = day["dates"]
    index = dates.index(day["date"]) + 1
    console.print(
        f"[bold]{day['project_name']}[/bold]  {day['date']}  "
        f"[dim](day {index} of {len(dates)})[/dim]  "
        f"progress: [{_progress_style(day['progress'])}]{day['progress']}%[/]"
    )

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
    table.add_column("#", justify="right")
    table.add_column("DONE", justify="right")
    table.add_column("TASK")
    table.add_column("TYPE")
    for task in day["tasks"]:
        style = _progress_style(task["completion_percent"])
        content = task["content"]
        if task["notes"]:
            content += f"\n[dim]  {task['notes']}[/dim]"
        table.add_row(
            str(task["position"]),
            f"[{style}]{task['completion_percent']}%[/]",
            content,
            f"[{_TYPE_STYLES.get(task['type']) or 'default'}]{task['type']}[/]",
        )
    console.print(table)


def _show_day(workspace, day: str | None, project_id: str | None) -> dict:
    """Day view for the given date; without one, today when scheduled, else the first day."""
    from daymap.tools.get_day import get_day

    if day is None:
        today = _date.today().isoformat()
        result = get_day(workspace, project_id=project_id)
        if today in result["dates"] and result["date"] != today:
            result = get_day(workspace, date=today, project_id=project_id)
        return result
    return get_day(workspace, date=day, project_id=project_id)


def _task_at(workspace, position: int, day: str | None, project_id: str | None) -> dict:
    view = _show_day(workspace, day, project_id)
    for task in view["tasks"]:
        if task["position"] == position:
            return task
    raise ToolError(f"No task at position {position} on {view['date']}")


def _print_negotiation(result: dict) -> None:
    status = result["status"]
    if status == "created":
        console.print(
            f"[green]✓ Created[/green] {result['name']}  "
            f"{result['task_count']} tasks over {result['day_count']} days  "
            f"[dim]({result['project_id'][:8]})[/dim]"
        )
    elif status == "needs_adjustment":
        console.print(f"\n[yellow]This plan looks too tight.[/yellow] {result['reasoning']}\n")
        for option in result["options"]:
            console.print(
                f"  {option['index'] + 1}. [bold]{option['type']}[/bold] "
                f"-> {option['suggested_value']}  [dim]{option['description']}[/dim]"
            )
        typer.echo()
    else:
        console.print(f"[red]✗ Generation failed[/red]: {result['error']}")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    """daymap command line."""
    from daymap.logging_config import configure_logging

    configure_logging(json_format=False, verbosity="verbose" if verbose else "quiet")


@app.command()
def new(
    name: str = typer.Option(None, "--name", "-n", help="Project name"),
    goal: str = typer.Option(None, "--goal", "-g", help="What the project should achieve"),
    start: str = typer.Option(None, "--start", help="First day (YYYY-MM-DD, default today)"),
    end: str = typer.Option(None, "--end", help="Deadline (YYYY-MM-DD)"),
    hours: float = typer.Option(2.0, "--hours", "-h", help="Hours available per day"),
    background: str = typer.Option("", "--background", "-b", help="What you already know"),
    priority: str = typer.Option("On-time", "--priority", "-p", help="On-time, In-time or Just Done"),
    attach: list[str] = typer.Option(None, "--attach", "-a", help="File to send with the request"),
):
    """Create a project and generate its roadmap."""
    from daymap.tools.create_project import (
        PendingNegotiations,
        apply_adjustment,
        create_project,
        revise_draft,
    )

    name = name or typer.prompt("Project name")
    goal = goal or typer.prompt("Goal")
    start = start or _date.today().isoformat()
    end = end or typer.prompt("Deadline (YYYY-MM-DD)")

    config = _load_config()
    workspace = _open_workspace(config)
    service = _make_service(config)
    negotiations = PendingNegotiations()

    async def _step(coro):
        with console.status("[dim]Asking the planner...[/dim]", spinner="dots"):
            return await coro

    # One event loop for the whole session: the LLM client's connection pool
    # is bound to the loop it was first used on.
    async def _negotiate():
        result = await _step(create_project(
            name, goal, start, end,
            workspace=workspace,
            service=service,
            negotiations=negotiations,
            daily_work_time=hours,
            background=background,
            priority=priority,
            attachments=attach,
        ))
        _print_negotiation(result)

        while result["status"] != "created":
            negotiation_id = result["negotiation_id"]

            if result["status"] == "failed":
                if not typer.confirm("Try again?", default=True):
                    raise typer.Exit(1)
                result = await _step(revise_draft(negotiation_id, workspace, negotiations))
                _print_negotiation(result)
                continue

            choice = typer.prompt(
                "Pick an option number, 'r' to revise, or 'q' to quit", default="1"
            ).strip().lower()
            if choice == "q":
                typer.echo("Cancelled.")
                raise typer.Exit(0)
            if choice == "r":
                result = await _step(revise_draft(
                    negotiation_id, workspace, negotiations,
                    goal=typer.prompt("Goal", default=goal),
                    end_date=typer.prompt("Deadline", default=end),
                    daily_work_time=typer.prompt("Hours per day", default=hours, type=float),
                ))
            elif choice.isdigit():
                result = await _step(apply_adjustment(
                    negotiation_id, int(choice) - 1, workspace, negotiations
                ))
            else:
                typer.echo(f"Unknown choice '{choice}'", err=True)
                continue
            _print_negotiation(result)

    try:
        _run(_negotiate())
    except ToolError as e:
        _fail(e)
    except KeyboardInterrupt:
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(130)


@app.command("list")
def list_cmd():
    """List all projects."""
    from daymap.tools.list_projects import list_projects

    result = list_projects(_open_workspace(_load_config()))
    projects = result["projects"]

    if not projects:
        typer.echo("No projects found. Run 'daymap new' to create one.")
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
    table.add_column("")
    table.add_column("ID")
    table.add_column("NAME")
    table.add_column("DATES")
    table.add_column("DONE", justify="right")
    for p in projects:
        table.add_row(
            "[green]*[/green]" if p["active"] else "",
            p["project_id"][:8],
            p["name"],
            f"{p['start_date']} → {p['end_date']}",
            f"{p['completed_count']}/{p['task_count']}",
        )
    console.print(table)


def _find_project_id(workspace, prefix: str) -> str:
    """Resolve a full id or a unique id prefix (as shown by 'list')."""
    matches = [p.id for p in workspace.projects if p.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ToolError(f"Project '{prefix}' not found")
    raise ToolError(f"Project id '{prefix}' is ambiguous")


@app.command()
def use(project_id: str = typer.Argument(..., help="Project id (or prefix) to make active")):
    """Make a project the active one."""
    from daymap.tools.list_projects import select_project

    workspace = _open_workspace(_load_config())
    try:
        result = select_project(_find_project_id(workspace, project_id), workspace)
    except ToolError as e:
        _fail(e)
    typer.echo(f"Active project: {result['name']}")


@app.command()
def day(
    date: str = typer.Argument(None, help="Day to show (YYYY-MM-DD)"),
    project: str = typer.Option(None, "--project", help="Project id (default: active)"),
):
    """Show the tasks of one day."""
    workspace = _open_workspace(_load_config())
    try:
        project_id = _find_project_id(workspace, project) if project else None
        _print_day(_show_day(workspace, date, project_id))
    except ToolError as e:
        _fail(e)


@app.command()
def toggle(
    position: int = typer.Argument(..., help="Task number in the day view"),
    date: str = typer.Option(None, "--date", "-d", help="Day (default: today or first day)"),
):
    """Mark a task done, or not done if it already is."""
    from daymap.tools.update_task import update_task

    workspace = _open_workspace(_load_config())
    try:
        task = _task_at(workspace, position, date, None)
        result = update_task(task["id"], workspace, toggle=True)
    except ToolError as e:
        _fail(e)
    typer.echo(result["message"])


@app.command()
def progress(
    position: int = typer.Argument(..., help="Task number in the day view"),
    percent: int = typer.Argument(..., help="Completion 0-100 (snapped to 5)"),
    date: str = typer.Option(None, "--date", "-d", help="Day (default: today or first day)"),
):
    """Set a task's completion."""
    from daymap.tools.update_task import update_task

    workspace = _open_workspace(_load_config())
    try:
        task = _task_at(workspace, position, date, None)
        result = update_task(task["id"], workspace, completion_percent=percent)
    except ToolError as e:
        _fail(e)
    typer.echo(result["message"])


@app.command()
def note(
    position: int = typer.Argument(..., help="Task number in the day view"),
    text: str = typer.Argument(..., help="Notes (empty string clears them)"),
    date: str = typer.Option(None, "--date", "-d", help="Day (default: today or first day)"),
):
    """Replace a task's notes."""
    from daymap.tools.update_task import update_task

    workspace = _open_workspace(_load_config())
    try:
        task = _task_at(workspace, position, date, None)
        update_task(task["id"], workspace, notes=text)
    except ToolError as e:
        _fail(e)
    typer.echo("Notes saved.")


@app.command()
def edit(
    position: int = typer.Argument(..., help="Task number in the day view"),
    content: str = typer.Argument(..., help="New task description"),
    date: str = typer.Option(None, "--date", "-d", help="Day (default: today or first day)"),
):
    """Rewrite a task's description."""
    from daymap.tools.update_task import update_task

    workspace = _open_workspace(_load_config())
    try:
        task = _task_at(workspace, position, date, None)
        update_task(task["id"], workspace, content=content)
    except ToolError as e:
        _fail(e)
    typer.echo("Task updated.")


@app.command()
def push(
    position: int = typer.Argument(..., help="Task number in the day view"),
    date: str = typer.Option(None, "--date", "-d", help="Day (default: today or first day)"),
):
    """Move a task to the next scheduled day."""
    from daymap.tools.update_task import push_task

    workspace = _open_workspace(_load_config())
    try:
        task = _task_at(workspace, position, date, None)
        result = push_task(task["id"], workspace)
    except ToolError as e:
        _fail(e)
    typer.echo(result["message"])


@app.command()
def move(
    from_position: int = typer.Argument(..., help="Current task number"),
    to_position: int = typer.Argument(..., help="New task number"),
    date: str = typer.Option(None, "--date", "-d", help="Day (default: today or first day)"),
):
    """Reorder a task within its day."""
    from daymap.tools.update_task import reorder_tasks

    workspace = _open_workspace(_load_config())
    try:
        view = _show_day(workspace, date, None)
        if view["date"] is None:
            raise ToolError("Active project has no scheduled tasks")
        reorder_tasks(view["date"], from_position, to_position, workspace)
        _print_day(_show_day(workspace, view["date"], None))
    except ToolError as e:
        _fail(e)


_EDITOR_HELP = (
    "Commands: e N <text> (edit), t N <type> (normal/review/check), "
    "d N (delete), s (save), q (quit)"
)


def _print_roadmap(editor) -> list[str]:
    """Print the working copy grouped by day; returns task ids by display number."""
    ids = []
    for day, tasks in editor.grouped():
        console.print(f"\n[bold]{day}[/bold]")
        for task in tasks:
            ids.append(task.id)
            style = _TYPE_STYLES.get(task.type) or "default"
            console.print(f"  {len(ids):>3}. {task.content}  [{style}]{task.type}[/]")
    return ids


@app.command()
def roadmap(project: str = typer.Option(None, "--project", help="Project id (default: active)")):
    """Edit the whole roadmap interactively; nothing is saved until 's'."""
    from daymap.schedule.editor import RoadmapEditor
    from daymap.tools.common import resolve_project

    workspace = _open_workspace(_load_config())
    try:
        target = resolve_project(workspace, _find_project_id(workspace, project) if project else None)
    except ToolError as e:
        _fail(e)

    editor = RoadmapEditor(target)
    console.print(f"[bold]{target.name}[/bold] roadmap")
    ids = _print_roadmap(editor)
    typer.echo(f"\n{_EDITOR_HELP}")

    while True:
        command = typer.prompt(">", default="q", show_default=False).strip()
        action, _, rest = command.partition(" ")
        number, _, argument = rest.strip().partition(" ")

        if action == "s":
            workspace.replace_tasks(target.id, editor.commit())
            typer.echo("Roadmap saved.")
            return
        if action == "q":
            if editor.dirty and not typer.confirm("Discard unsaved changes?", default=False):
                continue
            editor.discard()
            typer.echo("No changes saved.")
            return

        if action not in ("e", "t", "d") or not number.isdigit() or not 1 <= int(number) <= len(ids):
            typer.echo(_EDITOR_HELP)
            continue

        task_id = ids[int(number) - 1]
        try:
            if action == "e":
                editor.edit(task_id, content=argument.strip() or None)
            elif action == "t":
                editor.edit(task_id, type=argument.strip().lower())
            else:
                editor.delete(task_id)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            continue
        ids = _print_roadmap(editor)


@app.command()
def delete(
    project_id: str = typer.Argument(..., help="Project id (or prefix) to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Delete a project and all of its tasks."""
    from daymap.tools.delete_project import delete_project

    workspace = _open_workspace(_load_config())
    try:
        full_id = _find_project_id(workspace, project_id)
        name = workspace.get(full_id).name
        if not yes and not typer.confirm(f"Delete '{name}' and all its tasks?", default=False):
            typer.echo("Nothing deleted.")
            return
        result = delete_project(full_id, workspace, confirm=True)
    except ToolError as e:
        _fail(e)
    typer.echo(f"Deleted {result['name']} ({result['deleted_tasks']} tasks).")


@app.command()
def calendar(
    date: str = typer.Argument(None, help="Day to export (YYYY-MM-DD)"),
    start: str = typer.Option(None, "--start", help="Session start HH:MM (default from config)"),
    end: str = typer.Option(None, "--end", help="Session end HH:MM (default from config)"),
    open_browser: bool = typer.Option(False, "--open", help="Open the link in a browser"),
):
    """Print a calendar link for one day's focus session."""
    from daymap.tools.calendar_link import calendar_link

    config = _load_config()
    workspace = _open_workspace(config)
    try:
        view = _show_day(workspace, date, None)
        result = calendar_link(
            workspace, config.calendar, date=view["date"], start_time=start, end_time=end
        )
    except ToolError as e:
        _fail(e)

    typer.echo(result["url"])
    if open_browser:
        typer.launch(result["url"])


@app.command()
def serve():
    """Start the MCP server on stdio."""
    from daymap.__main__ import main

    asyncio.run(main())


if __name__ == "__main__":
    app()
