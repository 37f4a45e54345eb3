import logging
import os
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import requests
from dotenv import load_dotenv

from youtrack_timeline import config
from youtrack_timeline.app.errors import YouTrackAPIError

# Make YOUTRACK_* available when tools are invoked directly
load_dotenv()

logger = logging.getLogger(__name__)

ISSUE_FIELDS = (
    "id,idReadable,summary,project(id,name,shortName),"
    "assignee(id,login,fullName),created,updated,resolved,"
    "customFields(id,name,$type,value(id,name,login,fullName,minutes,presentation,isResolved))"
)
LINK_FIELDS = (
    "id,direction,linkType(id,name,localizedName,sourceToTarget,targetToSource,directed),"
    "issues(id,idReadable,summary,project(shortName))"
)


def _youtrack_env() -> Tuple[str, str]:
    url = (os.getenv("YOUTRACK_URL") or "").strip()
    token = (os.getenv("YOUTRACK_TOKEN") or "").strip()
    if not url:
        raise ValueError("Error: YOUTRACK_URL environment variable is not set.")
    if not token:
        raise ValueError("Error: YOUTRACK_TOKEN environment variable is not set.")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Error: YOUTRACK_URL must be a valid http(s) URL.")
    return url.rstrip("/"), token


def _headers(token: str) -> dict:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason or "Unknown error"
    if isinstance(data, dict):
        return str(data.get("error_description") or data.get("error") or data.get("message") or data)
    return str(data)


def _get(path: str, params: Optional[dict] = None):
    base, token = _youtrack_env()
    url = f"{base}/api{path}"
    resp = requests.get(url, headers=_headers(token), params=params, timeout=config.YOUTRACK_TIMEOUT_SECONDS)
    if not resp.ok:
        logger.debug("YouTrack GET %s failed with %s: %s", url, resp.status_code, resp.text)
        raise YouTrackAPIError(resp.status_code, _error_message(resp))
    return resp.json()


def _assignee_from_custom_fields(issue: dict) -> dict:
    """Issues sometimes only carry the assignee as an 'Assignee' custom field."""
    if not issue.get("assignee"):
        for field in issue.get("customFields") or []:
            if field.get("name") == "Assignee" and field.get("value"):
                issue["assignee"] = field["value"]
                break
    return issue


def search_issues(query: Optional[str] = None, limit: Optional[int] = None, page_size: int = 50) -> List[dict]:
    """Fetch issues matching a YouTrack query, paging with $top/$skip up to `limit` issues."""
    if limit is None:
        limit = config.GANTT_SEARCH_LIMIT
    out: List[dict] = []
    skip = 0
    while len(out) < limit:
        top = min(page_size, limit - len(out))
        params = {"fields": ISSUE_FIELDS, "$top": top, "$skip": skip}
        if query:
            params["query"] = query
        page = _get("/issues", params=params) or []
        out.extend(_assignee_from_custom_fields(issue) for issue in page)
        if len(page) < top:
            break
        skip += top
    return out


def get_issue_links(issue_id: str) -> List[dict]:
    """Raw link groups of one issue (direction, linkType, issues)."""
    return _get(f"/issues/{issue_id}/links", params={"fields": LINK_FIELDS}) or []
