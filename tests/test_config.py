import pytest

import ghbr.config as config
from ghbr.config import ConfigFile
from ghbr.errors import CLIError


def test_resolve_config_path_honours_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GHBR_CONFIG", str(tmp_path / "custom.toml"))
    assert config.resolve_config_path() == tmp_path / "custom.toml"


def test_default_config_path_without_env(monkeypatch):
    monkeypatch.delenv("GHBR_CONFIG", raising=False)
    path = config.resolve_config_path()
    assert path.name == "config.toml"
    assert "ghbr" in str(path.parent)


def test_missing_config_file_is_empty(tmp_path):
    assert config.load_config(tmp_path / "absent.toml") == ConfigFile()


def test_load_config_reads_known_keys(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        'owner = "octocat"\norganization = "acme"\nbranch = " develop "\n'
        'font = "standard"\napiUrl = "https://ghe.example.com/api/v3"\nunknown = 1\n',
        encoding="utf-8",
    )
    loaded = config.load_config(path)
    assert loaded == ConfigFile(
        owner="octocat",
        org="acme",
        branch="develop",
        font="standard",
        api_url="https://ghe.example.com/api/v3",
    )


def test_load_config_rejects_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("owner = ", encoding="utf-8")
    with pytest.raises(CLIError) as excinfo:
        config.load_config(path)
    assert "failed to parse config file" in str(excinfo.value)


def test_write_default_config_refuses_overwrite(tmp_path):
    path = tmp_path / "nested" / "config.toml"
    assert config.write_default_config(path, force=False) == path
    assert config.load_config(path) == ConfigFile()
    with pytest.raises(CLIError):
        config.write_default_config(path, force=False)
    path.write_text('owner = "someone"\n', encoding="utf-8")
    config.write_default_config(path, force=True)
    assert config.load_config(path).owner is None


def test_template_never_mentions_a_token_key():
    template = config.config_template()
    assert "token =" not in template
    assert "GITHUB_TOKEN" in template


def test_resolve_api_url_precedence(monkeypatch):
    configured = ConfigFile(api_url="https://ghe.example.com/api/v3/")
    assert config.resolve_api_url(None) == "https://api.github.com"
    assert config.resolve_api_url(configured) == "https://ghe.example.com/api/v3"
    monkeypatch.setenv("GHBR_GITHUB_API_URL", "http://localhost:8080/")
    assert config.resolve_api_url(configured) == "http://localhost:8080"


def test_effective_config_sources(monkeypatch):
    values, sources = config.effective_config(ConfigFile(owner="octocat", font="standard"))
    assert values["owner"] == "octocat"
    assert values["branch"] == "main"
    assert values["org"] is None
    assert sources == {
        "owner": "config",
        "org": "unset",
        "branch": "default",
        "font": "config",
        "api_url": "default",
    }
    monkeypatch.setenv("GHBR_GITHUB_API_URL", "http://localhost:8080")
    _, sources = config.effective_config(ConfigFile())
    assert sources["api_url"] == "env"
