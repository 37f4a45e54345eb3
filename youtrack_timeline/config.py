import os

from dotenv import load_dotenv

# Pick up a local .env (YOUTRACK_URL, YOUTRACK_TOKEN, ...) when present
load_dotenv()

# YouTrack connection. Credentials are read at call time by the client (see _youtrack_env).
YOUTRACK_TIMEOUT_SECONDS = float(os.getenv("YOUTRACK_TIMEOUT_SECONDS", "30"))

# Gantt data fetch limits
GANTT_SEARCH_LIMIT = int(os.getenv("GANTT_SEARCH_LIMIT", "100"))
GANTT_MAX_ISSUES = int(os.getenv("GANTT_MAX_ISSUES", "50"))

# Scheduling: duration assumed for un-estimated work (one 8-hour day)
DEFAULT_TASK_MINUTES = float(os.getenv("DEFAULT_TASK_MINUTES", "480"))

# Scheduling: |slack| below this many days counts as critical
CPA_SLACK_TOLERANCE_DAYS = float(os.getenv("CPA_SLACK_TOLERANCE_DAYS", "0.01"))

# Scheduling: latest finish of tasks nobody depends on.
#   project_end -> the overall project end (classic CPM)
#   own_finish  -> the task's own earliest finish
CPA_SINK_ANCHOR = os.getenv("CPA_SINK_ANCHOR", "project_end")

# Agent model
AGENT_MODEL = os.getenv("AGENT_MODEL", "gemini-2.0-flash")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Uvicorn server settings
UVICORN_HOST = os.getenv("UVICORN_HOST", "0.0.0.0")
UVICORN_PORT = int(os.getenv("UVICORN_PORT", "8000"))
