"""Tests for workspace discovery."""

from __future__ import annotations

from conftest import write_file, write_json

from readiness.discovery import (
    discover_apps,
    expand_workspace_pattern,
    parse_pnpm_workspace,
    read_workspace_patterns,
)


def test_workspace_globs_find_members(workspace_repo):
    apps = discover_apps(workspace_repo)

    assert sorted(app.path for app in apps) == ["apps/api", "apps/web"]
    assert [app.id for app in apps] == ["apps/api", "apps/web"]


def test_member_description_and_type_come_from_manifest(workspace_repo):
    api = discover_apps(workspace_repo)[0]

    assert api.description == "HTTP API"
    assert api.type == "node"


def test_workspaces_object_form(repo):
    write_json(repo / "package.json", {"workspaces": {"packages": ["packages/*"]}})
    write_json(repo / "packages" / "core" / "package.json", {"name": "core"})

    assert [app.path for app in discover_apps(repo)] == ["packages/core"]


def test_pnpm_workspace_file(repo):
    write_file(repo / "pnpm-workspace.yaml", "packages:\n  - 'services/*'\n  - '!services/legacy'\n")
    write_file(repo / "services" / "billing" / "go.mod", "module billing\n")
    write_file(repo / "services" / "notes" / "README.md", "no manifest here\n")

    apps = discover_apps(repo)

    assert [app.path for app in apps] == ["services/billing"]
    assert apps[0].type == "go"


def test_malformed_pnpm_workspace_is_ignored():
    assert parse_pnpm_workspace("packages: [unclosed") == []
    assert parse_pnpm_workspace("- just\n- a list\n") == []


def test_default_app_dirs_used_without_workspaces(repo):
    write_file(repo / "apps" / "svc" / "pyproject.toml", "[project]\nname = 'svc'\n")
    write_file(repo / "libs" / "shared" / "Cargo.toml", "[package]\nname = 'shared'\n")

    paths = [app.path for app in discover_apps(repo)]

    assert paths == ["apps/svc", "libs/shared"]


def test_falls_back_to_repo_root(repo):
    apps = discover_apps(repo)

    assert len(apps) == 1
    assert apps[0].id == "."
    assert apps[0].path == "."
    assert apps[0].description == "Repository root"
    assert apps[0].type is None


def test_root_fallback_keeps_manifest_type(repo):
    write_file(repo / "requirements.txt", "requests\n")

    apps = discover_apps(repo)

    assert apps[0].path == "."
    assert apps[0].type == "python"


def test_recursive_pattern_skips_node_modules(repo):
    write_json(repo / "package.json", {"workspaces": ["./modules/**"]})
    write_json(repo / "modules" / "a" / "package.json", {"name": "a"})
    write_json(repo / "modules" / "group" / "b" / "package.json", {"name": "b"})
    write_json(repo / "modules" / "node_modules" / "dep" / "package.json", {"name": "dep"})

    paths = sorted(app.path for app in discover_apps(repo))

    assert paths == ["modules/a", "modules/group/b"]


def test_literal_pattern(repo):
    write_json(repo / "tools" / "cli" / "package.json", {"name": "cli"})

    assert expand_workspace_pattern(repo, "tools/cli") == [repo / "tools" / "cli"]
    assert expand_workspace_pattern(repo, "tools/missing") == []
    assert expand_workspace_pattern(repo, "!tools/cli") == []


def test_package_json_workspaces_take_priority_over_pnpm(repo):
    write_json(repo / "package.json", {"workspaces": ["apps/*"]})
    write_file(repo / "pnpm-workspace.yaml", "packages:\n  - 'other/*'\n")

    assert read_workspace_patterns(repo) == ["apps/*"]
