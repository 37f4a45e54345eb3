import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query

from youtrack_timeline import config
from youtrack_timeline.app.errors import ScopeError, YouTrackAPIError
from youtrack_timeline.tools.cpa import engine_tools

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("api")

app = FastAPI(title="youtrack-timeline")


def _run(endpoint: str, fn, *args, **kwargs) -> dict:
    try:
        return fn(*args, **kwargs)
    except ScopeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        # missing/invalid YouTrack configuration
        logger.exception("%s failed: %s", endpoint, e)
        raise HTTPException(status_code=500, detail=str(e))
    except YouTrackAPIError as e:
        logger.exception("%s failed: %s", endpoint, e)
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.exception("%s failed: %s", endpoint, e)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/timeline/gantt")
async def timeline_gantt(
    project: Optional[List[str]] = Query(None, description="Project short names, e.g. PROJ"),
    assignee: Optional[List[str]] = Query(None, description="Assignee logins"),
    include_completed: bool = Query(True),
    query: Optional[str] = Query(None, description="Extra YouTrack query syntax"),
):
    """Tasks, edges, timeline, conflicts and critical path for the matching issues."""
    return _run(
        "/timeline/gantt",
        engine_tools.get_gantt_data,
        project_ids=project,
        assignee_ids=assignee,
        include_completed=include_completed,
        query=query,
    )


@app.get("/timeline/project")
async def timeline_project(
    project_id: str = Query(..., description="Project short name, e.g. PROJ"),
    include_completed: bool = Query(False),
):
    return _run("/timeline/project", engine_tools.get_project_timeline, project_id, include_completed=include_completed)


@app.get("/timeline/critical-path")
async def timeline_critical_path(project_id: str = Query(..., description="Project short name, e.g. PROJ")):
    return _run("/timeline/critical-path", engine_tools.calculate_critical_path, project_id)


@app.get("/timeline/conflicts")
async def timeline_conflicts(
    project: Optional[List[str]] = Query(None),
    assignee: Optional[List[str]] = Query(None),
):
    return _run("/timeline/conflicts", engine_tools.get_timeline_conflicts, project_ids=project, assignee_ids=assignee)


@app.get("/timeline/task-slack")
async def timeline_task_slack(issue_key: str = Query(..., description="Issue key, e.g. PROJ-123")):
    return _run("/timeline/task-slack", engine_tools.get_task_slack, issue_key)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.UVICORN_HOST, port=config.UVICORN_PORT)
