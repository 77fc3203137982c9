"""
Tests for configuration loading.
"""

import os
from unittest.mock import patch

from trace_enhancer.shared.config import AppConfig, EnhancementConfig, load_config

CONFIG_ENV = [
    "MAX_ENHANCED_DEPTH", "CONTEXT_LINES", "KILLSWITCH_THRESHOLD", "RATE_LIMIT_TTL",
    "FAILURE_WINDOW", "REVISION_SOFT_TTL", "REVISION_HARD_TTL", "GITHUB_API_URL",
    "GITHUB_TIMEOUT", "GITHUB_USER_AGENT", "LOG_LEVEL", "LOG_FILE_DIR", "ENVIRONMENT",
]


def clean_env(**values):
    env = {k: v for k, v in os.environ.items() if k not in CONFIG_ENV}
    env.update(values)
    return patch.dict(os.environ, env, clear=True)


class TestDefaults:
    def test_enhancement_defaults(self):
        config = EnhancementConfig()
        assert config.max_enhanced_depth == 5
        assert config.context_lines == 5
        assert config.killswitch_threshold == 20
        assert config.revision_soft_ttl_seconds == 5.0
        assert config.revision_hard_ttl_seconds == 86400.0

    def test_app_defaults(self):
        config = AppConfig()
        assert config.github.api_base_url == "https://api.github.com"
        assert config.log_level == "INFO"
        assert config.log_file_dir == ""


@patch("trace_enhancer.shared.config.load_dotenv")
class TestLoadConfig:
    def test_no_env_gives_defaults(self, _dotenv):
        with clean_env():
            config = load_config()
        assert config.enhancement == EnhancementConfig()

    def test_reads_environment(self, _dotenv):
        with clean_env(
            MAX_ENHANCED_DEPTH="3",
            KILLSWITCH_THRESHOLD="50",
            REVISION_SOFT_TTL="1.5",
            GITHUB_API_URL="https://ghe.example.com/api/v3/",
            LOG_LEVEL="debug",
        ):
            config = load_config()
        assert config.enhancement.max_enhanced_depth == 3
        assert config.enhancement.killswitch_threshold == 50
        assert config.enhancement.revision_soft_ttl_seconds == 1.5
        assert config.github.api_base_url == "https://ghe.example.com/api/v3"
        assert config.log_level == "DEBUG"

    def test_invalid_values_fall_back(self, _dotenv):
        with clean_env(CONTEXT_LINES="lots", GITHUB_TIMEOUT="soon", LOG_LEVEL="LOUD"):
            config = load_config()
        assert config.enhancement.context_lines == 5
        assert config.github.request_timeout_seconds == 10.0
        assert config.log_level == "INFO"

    def test_loads_dotenv(self, mock_dotenv):
        with clean_env():
            load_config()
        mock_dotenv.assert_called_once()
