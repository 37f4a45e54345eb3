"""
Tests for the YouTrack REST client.
"""
import os
from unittest.mock import patch

import pytest

from youtrack_timeline.app.errors import YouTrackAPIError
from youtrack_timeline.tools.youtrack import client


class TestYouTrackEnv:
    """Test credential loading."""

    def test_valid(self, mock_env_vars):
        assert client._youtrack_env() == ("https://test.youtrack.cloud", "perm:test-token")

    def test_trailing_slash_stripped(self):
        with patch.dict(os.environ, {"YOUTRACK_URL": "https://yt.example.com/", "YOUTRACK_TOKEN": "t"}):
            assert client._youtrack_env()[0] == "https://yt.example.com"

    def test_missing_url(self):
        with patch.dict(os.environ, {"YOUTRACK_URL": "", "YOUTRACK_TOKEN": "t"}):
            with pytest.raises(ValueError) as exc_info:
                client._youtrack_env()
        assert "YOUTRACK_URL" in str(exc_info.value)

    def test_missing_token(self):
        with patch.dict(os.environ, {"YOUTRACK_URL": "https://yt.example.com", "YOUTRACK_TOKEN": ""}):
            with pytest.raises(ValueError) as exc_info:
                client._youtrack_env()
        assert "YOUTRACK_TOKEN" in str(exc_info.value)

    def test_invalid_url(self):
        with patch.dict(os.environ, {"YOUTRACK_URL": "ftp://yt.example.com", "YOUTRACK_TOKEN": "t"}):
            with pytest.raises(ValueError):
                client._youtrack_env()


class TestSearchIssues:
    """Test paged issue search."""

    @patch("youtrack_timeline.tools.youtrack.client.requests.get")
    def test_single_page(self, mock_get, mock_env_vars, mock_response):
        mock_get.return_value = mock_response([{"idReadable": "P-1"}, {"idReadable": "P-2"}])

        issues = client.search_issues("project: P", limit=10, page_size=5)

        assert [i["idReadable"] for i in issues] == ["P-1", "P-2"]
        args, kwargs = mock_get.call_args
        assert args[0] == "https://test.youtrack.cloud/api/issues"
        assert kwargs["headers"]["Authorization"] == "Bearer perm:test-token"
        assert kwargs["params"]["query"] == "project: P"
        assert kwargs["params"]["$top"] == 5
        assert kwargs["params"]["$skip"] == 0

    @patch("youtrack_timeline.tools.youtrack.client.requests.get")
    def test_pages_until_limit(self, mock_get, mock_env_vars, mock_response):
        mock_get.side_effect = [
            mock_response([{"idReadable": "P-1"}, {"idReadable": "P-2"}]),
            mock_response([{"idReadable": "P-3"}]),
        ]

        issues = client.search_issues(limit=3, page_size=2)

        assert [i["idReadable"] for i in issues] == ["P-1", "P-2", "P-3"]
        assert mock_get.call_count == 2
        second = mock_get.call_args_list[1].kwargs["params"]
        assert (second["$top"], second["$skip"]) == (1, 2)
        assert "query" not in second

    @patch("youtrack_timeline.tools.youtrack.client.requests.get")
    def test_assignee_from_custom_field(self, mock_get, mock_env_vars, mock_response):
        mock_get.return_value = mock_response([{
            "idReadable": "P-1",
            "customFields": [{"name": "Assignee", "value": {"login": "jane"}}],
        }])

        issues = client.search_issues(limit=5)

        assert issues[0]["assignee"] == {"login": "jane"}

    @patch("youtrack_timeline.tools.youtrack.client.requests.get")
    def test_api_error(self, mock_get, mock_env_vars, mock_response):
        mock_get.return_value = mock_response({"error_description": "Unauthorized"}, status_code=401)

        with pytest.raises(YouTrackAPIError) as exc_info:
            client.search_issues(limit=5)

        assert exc_info.value.status_code == 401
        assert str(exc_info.value) == "YouTrack API Error (401): Unauthorized"


class TestGetIssueLinks:

    @patch("youtrack_timeline.tools.youtrack.client.requests.get")
    def test_links(self, mock_get, mock_env_vars, mock_response):
        payload = [{"direction": "OUTWARD", "linkType": {"name": "Depend"}, "issues": [{"idReadable": "P-2"}]}]
        mock_get.return_value = mock_response(payload)

        assert client.get_issue_links("P-1") == payload
        assert mock_get.call_args.args[0] == "https://test.youtrack.cloud/api/issues/P-1/links"
