# daymap/server.py
"""
FastMCP server instance with tool registration.

CRITICAL: configure_logging() is called first to prevent stdout pollution.
All logging goes to stderr as JSON.
"""

# Configure logging FIRST before any other imports
from daymap.logging_config import configure_logging

configure_logging()

# Now safe to import everything else
import logging

from fastmcp import FastMCP

from daymap.config.loader import get_data_dir, load_config
from daymap.llm.factory import create_llm_client
from daymap.models.persistence import ProjectPersistence
from daymap.models.storage import FileBlobStore
from daymap.models.workspace import ProjectWorkspace
from daymap.planning.service import LLMRoadmapService
from daymap.tools.calendar_link import calendar_link as _calendar_link
from daymap.tools.create_project import PendingNegotiations
from daymap.tools.create_project import apply_adjustment as _apply_adjustment
from daymap.tools.create_project import create_project as _create_project
from daymap.tools.create_project import revise_draft as _revise_draft
from daymap.tools.delete_project import delete_project as _delete_project
from daymap.tools.edit_roadmap import edit_roadmap as _edit_roadmap
from daymap.tools.get_day import get_day as _get_day
from daymap.tools.list_projects import list_projects as _list_projects
from daymap.tools.list_projects import select_project as _select_project
from daymap.tools.update_task import push_task as _push_task
from daymap.tools.update_task import reorder_tasks as _reorder_tasks
from daymap.tools.update_task import update_task as _update_task

logger = logging.getLogger(__name__)

# Create FastMCP instance
mcp = FastMCP("daymap")

# Load configuration
_config = load_config()
configure_logging(verbosity=_config.output.verbosity)
logger.info(f"Loaded configuration: provider={_config.provider}, model={_config.model_name}")

# Infeasible or failed drafts waiting for a follow-up call
_negotiations = PendingNegotiations()

_workspace: ProjectWorkspace | None = None
_service: LLMRoadmapService | None = None


def get_workspace() -> ProjectWorkspace:
    """Open the file-backed workspace on first use."""
    global _workspace
    if _workspace is None:
        data_dir = get_data_dir(_config)
        logger.info(f"Opening project store at {data_dir}")
        _workspace = ProjectWorkspace.open(ProjectPersistence(FileBlobStore(data_dir)))
    return _workspace


def get_service() -> LLMRoadmapService:
    """Create the roadmap service on first use."""
    global _service
    if _service is None:
        _service = LLMRoadmapService(create_llm_client(_config))
    return _service


@mcp.tool()
async def create_project(
    name: str,
    goal: str,
    start_date: str,
    end_date: str,
    daily_work_time: float = 2.0,
    background: str | None = None,
    priority: str = "On-time",
    attachments: list[str] | None = None,
) -> dict:
    """Create a project and generate its day-by-day roadmap. Infeasible drafts return adjustment options."""
    return await _create_project(
        name, goal, start_date, end_date,
        workspace=get_workspace(),
        service=get_service(),
        negotiations=_negotiations,
        daily_work_time=daily_work_time,
        background=background,
        priority=priority,
        attachments=attachments,
    )


@mcp.tool()
async def apply_adjustment(negotiation_id: str, option_index: int) -> dict:
    """Accept one suggested adjustment (0-based index) and generate the roadmap."""
    return await _apply_adjustment(negotiation_id, option_index, get_workspace(), _negotiations)


@mcp.tool()
async def revise_draft(
    negotiation_id: str,
    name: str | None = None,
    goal: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    daily_work_time: float | None = None,
    background: str | None = None,
    priority: str | None = None,
) -> dict:
    """Change a pending draft and submit it again. Also retries a failed generation."""
    return await _revise_draft(
        negotiation_id, get_workspace(), _negotiations,
        name=name,
        goal=goal,
        start_date=start_date,
        end_date=end_date,
        daily_work_time=daily_work_time,
        background=background,
        priority=priority,
    )


@mcp.tool()
async def list_projects() -> dict:
    """List all projects, newest first, with task completion counts."""
    return _list_projects(get_workspace())


@mcp.tool()
async def select_project(project_id: str) -> dict:
    """Make a project the active one."""
    return _select_project(project_id, get_workspace())


@mcp.tool()
async def get_day(date: str | None = None, project_id: str | None = None) -> dict:
    """Show one day's tasks and progress. Defaults to the active project's first day."""
    return _get_day(get_workspace(), date=date, project_id=project_id)


@mcp.tool()
async def update_task(
    task_id: str,
    project_id: str | None = None,
    toggle: bool = False,
    completion_percent: int | None = None,
    notes: str | None = None,
    content: str | None = None,
) -> dict:
    """Toggle a task, set its completion, or replace its notes or content."""
    return _update_task(
        task_id, get_workspace(),
        project_id=project_id,
        toggle=toggle,
        completion_percent=completion_percent,
        notes=notes,
        content=content,
    )


@mcp.tool()
async def push_task(task_id: str, project_id: str | None = None) -> dict:
    """Move a task to the next scheduled day."""
    return _push_task(task_id, get_workspace(), project_id=project_id)


@mcp.tool()
async def reorder_tasks(
    date: str, from_position: int, to_position: int, project_id: str | None = None
) -> dict:
    """Move a task within one day (1-based positions)."""
    return _reorder_tasks(date, from_position, to_position, get_workspace(), project_id=project_id)


@mcp.tool()
async def edit_roadmap(
    edits: list[dict] | None = None,
    delete_task_ids: list[str] | None = None,
    project_id: str | None = None,
) -> dict:
    """Edit content/type of any tasks and delete tasks, saved all at once."""
    return _edit_roadmap(
        get_workspace(), edits=edits, delete_task_ids=delete_task_ids, project_id=project_id
    )


@mcp.tool()
async def delete_project(project_id: str, confirm: bool = False) -> dict:
    """Delete a project and its tasks. Requires confirm=true after asking the user."""
    return _delete_project(project_id, get_workspace(), confirm=confirm)


@mcp.tool()
async def calendar_link(
    date: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    project_id: str | None = None,
) -> dict:
    """Build a calendar event link for one day's focus session."""
    return _calendar_link(
        get_workspace(),
        _config.calendar,
        date=date,
        start_time=start_time,
        end_time=end_time,
        project_id=project_id,
    )


logger.info("MCP server initialized with 12 tools")
