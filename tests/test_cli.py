import httpx
import pytest
from typer.testing import CliRunner

import cli.main as cli_main
from adapters.session_store import FileSessionStore
from conftest import HOST, FakeCloudDirector
from core.services.branding import BrandingService

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    sessions_path = tmp_path / "sessions.json"
    monkeypatch.setenv("VCD_BRANDING_SESSIONS_PATH", str(sessions_path))
    fake = FakeCloudDirector()

    def build_service(settings):
        return BrandingService(
            FileSessionStore(settings.sessions_path),
            settings,
            transport=httpx.MockTransport(fake.handler),
        )

    monkeypatch.setattr(cli_main, "build_service", build_service)
    return fake, sessions_path


def _add_session(endpoint=HOST):
    return runner.invoke(cli_main.app, ["session", "add", "--endpoint", endpoint, "--token", "tok"])


def test_session_add_and_list(cli_env):
    _, sessions_path = cli_env

    result = _add_session()
    assert result.exit_code == 0, result.output
    assert sessions_path.exists()

    result = runner.invoke(cli_main.app, ["session", "list"])
    assert result.exit_code == 0
    assert HOST in result.output
    assert "tok" not in result.output


def test_branding_set_preserves_other_fields(cli_env):
    fake, _ = cli_env
    _add_session()

    result = runner.invoke(cli_main.app, ["branding", "set", "--name", "B", "--link", "Docs=https://docs"])

    assert result.exit_code == 0, result.output
    assert fake.branding["portalName"] == "B"
    assert fake.branding["portalColor"] == "#111111"
    assert fake.branding["customLinks"] == [{"name": "Docs", "menuItemType": "link", "url": "https://docs"}]


def test_branding_get_json(cli_env):
    _add_session()

    result = runner.invoke(cli_main.app, ["branding", "get", "--json"])

    assert result.exit_code == 0, result.output
    assert '"portalName": "A"' in result.output


def test_not_connected_is_reported_with_exit_code(cli_env):
    fake, _ = cli_env

    result = runner.invoke(cli_main.app, ["theme", "list"])

    assert result.exit_code == 1
    assert fake.requests == []


def test_ambiguous_endpoint_needs_option(cli_env):
    fake, _ = cli_env
    _add_session()
    _add_session("other.example.com")

    result = runner.invoke(cli_main.app, ["theme", "create", "Corp"])
    assert result.exit_code == 1
    assert fake.requests == []

    result = runner.invoke(cli_main.app, ["--endpoint", HOST, "theme", "create", "Corp"])
    assert result.exit_code == 0, result.output
    assert {"name": "Corp", "themeType": "CUSTOM"} in fake.themes


def test_css_upload_and_download(cli_env, tmp_path):
    fake, _ = cli_env
    fake.themes.append({"name": "Corp", "themeType": "CUSTOM"})
    fake.css["Corp"] = b".corp{}"
    _add_session()
    css = tmp_path / "custom.css"
    css.write_text(".new{}", encoding="utf-8")

    result = runner.invoke(cli_main.app, ["theme", "upload-css", "Corp", str(css)])
    assert result.exit_code == 0, result.output
    assert fake.css["uploaded"] == b".new{}"

    out = tmp_path / "dl" / "corp.css"
    result = runner.invoke(cli_main.app, ["theme", "download-css", "Corp", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_bytes() == b".corp{}"


def test_missing_asset_file_fails_without_requests(cli_env, tmp_path):
    fake, _ = cli_env
    _add_session()

    result = runner.invoke(cli_main.app, ["logo", "upload", str(tmp_path / "missing.png")])

    assert result.exit_code == 1
    assert fake.requests == []


def test_parse_link():
    assert cli_main.parse_link("-").menu_item_type.value == "separator"
    link = cli_main.parse_link("Docs = https://docs")
    assert (link.name, link.url) == ("Docs", "https://docs")
