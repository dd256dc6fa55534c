"""
Unit tests for configuration management.

Tests cover:
- Default values
- Environment variable overrides
- Explicit overrides from command-line flags
- YAML config files and their precedence
- Validation of out-of-range values
"""

import pytest
from pydantic import ValidationError

from salvo.config import Config, config_files, load_config

SETTINGS = ("NAMESPACE", "DIRECTORY", "KUBECONFIG", "CONTEXT", "WORKERS", "FAIL_FAST", "REQUEST_TIMEOUT", "PAGE_SIZE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in SETTINGS:
        monkeypatch.delenv(f"SALVO_{name}", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


def write_yaml(directory, content):
    path = directory / ".salvo" / "config.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestConfig:
    """Tests for the Config schema."""

    def test_defaults(self):
        """Test defaults without any source."""
        config = Config()

        assert config.namespace == "default"
        assert config.directory is None
        assert config.kubeconfig is None
        assert config.context is None
        assert config.workers == 1
        assert config.fail_fast is False
        assert config.request_timeout is None
        assert config.page_size is None

    def test_environment_overrides(self, monkeypatch):
        """Test SALVO_* environment variables are applied."""
        monkeypatch.setenv("SALVO_NAMESPACE", "team-a")
        monkeypatch.setenv("SALVO_WORKERS", "4")
        monkeypatch.setenv("SALVO_FAIL_FAST", "true")
        monkeypatch.setenv("SALVO_REQUEST_TIMEOUT", "12.5")

        config = Config()

        assert config.namespace == "team-a"
        assert config.workers == 4
        assert config.fail_fast is True
        assert config.request_timeout == 12.5

    def test_environment_is_case_insensitive(self, monkeypatch):
        """Test lower-case environment variables are accepted."""
        monkeypatch.setenv("salvo_namespace", "team-b")

        assert Config().namespace == "team-b"

    @pytest.mark.parametrize(
        "field,value",
        [("workers", 0), ("workers", 33), ("request_timeout", 0), ("page_size", 0), ("namespace", "")],
    )
    def test_rejects_invalid_values(self, field, value):
        """Test out-of-range values fail validation."""
        with pytest.raises(ValidationError):
            Config(**{field: value})


class TestLoadConfig:
    """Tests for load_config."""

    def test_explicit_values_win(self, monkeypatch):
        """Test flag values take precedence over the environment."""
        monkeypatch.setenv("SALVO_NAMESPACE", "from-env")

        config = load_config(namespace="from-flag")

        assert config.namespace == "from-flag"

    def test_none_values_fall_through(self, monkeypatch):
        """Test unset flags do not mask the environment."""
        monkeypatch.setenv("SALVO_NAMESPACE", "from-env")

        config = load_config(namespace=None, directory=None, workers=None)

        assert config.namespace == "from-env"
        assert config.directory is None
        assert config.workers == 1

    def test_dotenv_file(self, tmp_path):
        """Test a .env file in the working directory is read."""
        (tmp_path / ".env").write_text("SALVO_NAMESPACE=from-dotenv\n")

        assert load_config().namespace == "from-dotenv"


class TestYamlConfig:
    """Tests for the user and project YAML config files."""

    def test_config_files(self, tmp_path):
        """Test the user file comes before the project file."""
        assert config_files() == [
            str(tmp_path / "home" / ".salvo" / "config.yaml"),
            str(tmp_path / ".salvo" / "config.yaml"),
        ]

    def test_project_yaml(self, tmp_path):
        """Test ./.salvo/config.yaml is read."""
        write_yaml(tmp_path, "namespace: from-yaml\nworkers: 3\nfail_fast: true\n")

        config = load_config()

        assert config.namespace == "from-yaml"
        assert config.workers == 3
        assert config.fail_fast is True

    def test_user_yaml(self, tmp_path):
        """Test ~/.salvo/config.yaml is read."""
        write_yaml(tmp_path / "home", "namespace: from-user\nrequest_timeout: 30\n")

        config = load_config()

        assert config.namespace == "from-user"
        assert config.request_timeout == 30

    def test_project_yaml_overrides_user_yaml(self, tmp_path):
        """Test the project file wins over the user file key by key."""
        write_yaml(tmp_path / "home", "namespace: from-user\npage_size: 100\n")
        write_yaml(tmp_path, "namespace: from-project\n")

        config = load_config()

        assert config.namespace == "from-project"
        assert config.page_size == 100

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        """Test SALVO_* variables win over the YAML files."""
        write_yaml(tmp_path, "namespace: from-yaml\n")
        monkeypatch.setenv("SALVO_NAMESPACE", "from-env")

        assert load_config().namespace == "from-env"

    def test_flags_override_yaml(self, tmp_path):
        """Test explicit values win over the YAML files."""
        write_yaml(tmp_path, "namespace: from-yaml\n")

        assert load_config(namespace="from-flag").namespace == "from-flag"

    def test_yaml_overrides_dotenv(self, tmp_path):
        """Test the YAML files win over .env files."""
        write_yaml(tmp_path, "namespace: from-yaml\n")
        (tmp_path / ".env").write_text("SALVO_NAMESPACE=from-dotenv\nSALVO_WORKERS=5\n")

        config = load_config()

        assert config.namespace == "from-yaml"
        assert config.workers == 5

    def test_invalid_yaml_value(self, tmp_path):
        """Test an out-of-range YAML value fails validation."""
        write_yaml(tmp_path, "workers: 0\n")

        with pytest.raises(ValidationError):
            load_config()
