"""CLI tests: the ``workspaces`` command against a mocked service."""

from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

import taskdeck.client
from taskdeck.cli import main
from taskdeck.client.remote import HttpRemoteDataSource

TREE = {
    "workspaces": [
        {
            "id": "w1",
            "name": "Acme",
            "projects": [
                {"id": "p1", "name": "Launch", "tasks": [{"id": "t1", "project_id": "p1", "title": "Ship"}]},
            ],
        },
        {"id": "w2", "name": "Side"},
    ]
}


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    state_file = tmp_path / "selection.json"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TASKDECK_CLIENT_API_TOKEN", "tok")
    monkeypatch.setenv("TASKDECK_CLIENT_STATE_FILE", str(state_file))

    def handler(request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != "Bearer tok":
            return httpx.Response(401, json={"detail": "Invalid or missing bearer token."})
        return httpx.Response(200, json=TREE)

    def source(base_url: str, *, timeout: float = 10.0) -> HttpRemoteDataSource:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpRemoteDataSource(base_url, client=client, timeout=timeout)

    monkeypatch.setattr(taskdeck.client, "HttpRemoteDataSource", source)
    return state_file


def test_workspaces_defaults_to_first(cli_env) -> None:
    result = CliRunner().invoke(main, ["workspaces"])

    assert result.exit_code == 0, result.output
    assert "* w1  Acme" in result.output
    assert "  w2  Side" in result.output
    assert "Launch (1 tasks)" in result.output
    assert "[todo] Ship" in result.output


def test_workspaces_select_is_persisted(cli_env) -> None:
    runner = CliRunner()

    selected = runner.invoke(main, ["workspaces", "--select", "w2"])
    assert selected.exit_code == 0, selected.output
    assert json.loads(cli_env.read_text(encoding="utf-8")) == {"currentWorkspaceId": "w2"}

    # Next run resolves the persisted selection.
    again = runner.invoke(main, ["workspaces"])
    assert "* w2  Side" in again.output


def test_workspaces_unknown_selection(cli_env) -> None:
    result = CliRunner().invoke(main, ["workspaces", "--select", "nope"])

    assert result.exit_code == 1
    assert "No workspace with id 'nope'" in result.output


def test_workspaces_requires_token(cli_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TASKDECK_CLIENT_API_TOKEN")

    result = CliRunner().invoke(main, ["workspaces"])

    assert result.exit_code == 2
    assert "TASKDECK_CLIENT_API_TOKEN" in result.output
