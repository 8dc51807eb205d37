"""Test fixtures and utilities for wrangler."""

from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
import requests


def _make_response(status: int, body: Any) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


def _envelope(result: Any = None, success: bool = True, errors: list | None = None) -> dict:
    return {
        "success": success,
        "errors": errors or [],
        "messages": [],
        "result": result,
    }


@pytest.fixture
def make_response() -> Callable:
    """Build a fake requests.Response.

    Usage:
        make_response(200, {"success": True, "result": None})
        make_response(502, None)  # body that is not JSON
    """
    return _make_response


@pytest.fixture
def envelope() -> Callable:
    """Build a Cloudflare v4 response envelope."""
    return _envelope


@pytest.fixture
def api_session() -> MagicMock:
    """Fake requests.Session whose requests succeed with an empty result."""
    session = MagicMock()
    session.request.return_value = _make_response(200, _envelope())
    return session


@pytest.fixture
def api_mock(mocker: Any) -> Callable:
    """Mock the HTTP session used by ApiClient.

    Returns a callable that can be configured to return specific responses
    per HTTP method.

    Usage:
        def test_something(api_mock):
            mock = api_mock({
                'PUT': (200, {'success': True, 'errors': [], 'result': None}),
                'DELETE': (400, {'success': False, 'errors': [...]}),
            })
            # ApiClient's requests.Session() is now a fake
            assert mock['calls'][0]['method'] == 'PUT'

    Advanced usage with handler:
        def handler(method, url, kwargs):
            return (200, {'success': True, 'result': []})
        mock = api_mock({'_handler': handler})
    """

    def _create_mock(responses: dict[str, Any] | None = None) -> dict:
        call_log: list[dict[str, Any]] = []
        responses = responses or {}
        handler = responses.get("_handler")

        def mock_request(method: str, url: str, **kwargs: Any) -> MagicMock:
            call_log.append({"method": method, "url": url, **kwargs})

            if handler:
                status, body = handler(method, url, kwargs)
            elif method in responses:
                status, body = responses[method]
            else:
                status, body = 200, _envelope()

            return _make_response(status, body)

        session = MagicMock()
        session.request.side_effect = mock_request
        mocker.patch("wrangler.requests.Session", return_value=session)

        return {"calls": call_log, "responses": responses, "session": session}

    return _create_mock


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: Any) -> Path:
    """Create a project with wrangler.toml and credentials in the environment.

    Creates:
        <tmp_path>/project/
            wrangler.toml   (account_id = "acct123")

    The current directory is changed to the project.
    """
    project = tmp_path / "project"
    project.mkdir()
    (project / "wrangler.toml").write_text(
        'name = "worker"\ntype = "webpack"\naccount_id = "acct123"\n'
    )

    monkeypatch.setenv("CF_EMAIL", "user@example.com")
    monkeypatch.setenv("CF_API_KEY", "test-api-key")
    monkeypatch.chdir(project)

    return project


@pytest.fixture
def kv_tree(tmp_path: Path) -> Path:
    """Create a directory tree to upload.

    Creates:
        <tmp_path>/site/
            a.txt
            sub/
                b.txt
    """
    site = tmp_path / "site"
    (site / "sub").mkdir(parents=True)
    (site / "a.txt").write_bytes(b"alpha")
    (site / "sub" / "b.txt").write_bytes(b"beta")
    return site


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point WRANGLER_HOME at a temp dir and clear ambient credentials."""
    home = tmp_path / "wrangler-home"
    monkeypatch.setenv("WRANGLER_HOME", str(home))
    monkeypatch.setenv("NO_COLOR", "1")
    for var in ("CF_API_TOKEN", "CF_EMAIL", "CF_API_KEY", "CF_ACCOUNT_ID"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture(autouse=True)
def block_real_requests(monkeypatch: Any) -> None:
    """Block real HTTP traffic.

    Tests that need the API must use api_mock or pass api_session to
    ApiClient.
    """

    def blocked(*args: Any, **kwargs: Any) -> Any:
        raise RuntimeError("Real HTTP requests are blocked in tests")

    monkeypatch.setattr(requests.Session, "request", blocked)
