from dotenv import load_dotenv
from google.adk.agents import Agent
from google.adk.tools import FunctionTool

from youtrack_timeline import config
from youtrack_timeline.tools.cpa.engine_tools import (
    calculate_critical_path,
    get_gantt_data,
    get_project_timeline,
    get_task_slack,
    get_timeline_conflicts,
)

load_dotenv()

timeline_agent = Agent(
    name="timeline_agent",
    model=config.AGENT_MODEL,
    description=(
        "Timeline Agent: reads YouTrack issues and links, computes project timelines, "
        "scheduling conflicts and the critical path."
    ),
    instruction=(
        "You expose deterministic scheduling tools over YouTrack data.\n"
        "- For the critical path or slack of a project, call calculate_critical_path(project_id).\n"
        "- For a single issue's slack, call get_task_slack(issue_key).\n"
        "- For overlaps, cycles or missing dates, call get_timeline_conflicts.\n"
        "- For a Gantt overview, call get_gantt_data or get_project_timeline.\n"
        "Always return the tool's structured JSON; ask for a project id when it is missing."
    ),
    tools=[
        FunctionTool(get_gantt_data),
        FunctionTool(get_project_timeline),
        FunctionTool(calculate_critical_path),
        FunctionTool(get_timeline_conflicts),
        FunctionTool(get_task_slack),
    ],
    sub_agents=[],
)

# Entry point picked up by `adk web` / `adk run`
root_agent = timeline_agent
