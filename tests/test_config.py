import json

import pytest

from pdfdesk.server import ServiceConfig
from pdfdesk.utils.config import DEFAULT_FUNCTIONS_URL, load_config


def write_config(directory, data):
    (directory / "config.json").write_text(json.dumps(data))


def test_defaults(tmp_path):
    config = load_config(tmp_path, environ={})
    assert config.functions_url == DEFAULT_FUNCTIONS_URL
    assert config.api_key is None
    assert config.request_timeout is None
    assert config.log_level == "INFO"


def test_file_then_environment(tmp_path):
    write_config(tmp_path, {"functions_url": "http://file:1", "api_key": "from-file",
                            "request_timeout": 15, "unknown": True})
    config = load_config(tmp_path, environ={"PDFDESK_API_KEY": "from-env",
                                            "PDFDESK_LOG_LEVEL": "debug"})

    assert config.functions_url == "http://file:1"
    assert config.api_key == "from-env"
    assert config.request_timeout == 15.0
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["0", "-5"])
def test_non_positive_timeout_means_none(tmp_path, value):
    config = load_config(tmp_path, environ={"PDFDESK_REQUEST_TIMEOUT": value})
    assert config.request_timeout is None


def test_invalid_timeout(tmp_path):
    with pytest.raises(ValueError):
        load_config(tmp_path, environ={"PDFDESK_REQUEST_TIMEOUT": "soon"})


def test_empty_value_keeps_default(tmp_path):
    config = load_config(tmp_path, environ={"PDFDESK_FUNCTIONS_URL": "",
                                            "PDFDESK_LOG_LEVEL": ""})
    assert config.functions_url == DEFAULT_FUNCTIONS_URL
    assert config.log_level == "INFO"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unreadable_file_is_ignored(tmp_path, content):
    (tmp_path / "config.json").write_text(content)
    assert load_config(tmp_path, environ={}).functions_url == DEFAULT_FUNCTIONS_URL


def test_service_config_from_env(tmp_path):
    config = ServiceConfig.from_env({"PDFDESK_STORAGE_DIR": str(tmp_path),
                                     "PDFDESK_PUBLIC_URL": "https://files.test/",
                                     "PORT": "9090"})
    assert config.storage_dir == str(tmp_path)
    assert config.public_url == "https://files.test"
    assert config.api_key is None
    assert config.port == 9090
