"""
Unit tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from websub_subscriber.config.settings import ConfigError, Settings, load_config


class TestLoadConfig:
    """Test loading settings from the environment."""

    def test_defaults(self):
        settings = load_config(
            {"PUBLIC_BASE_URL": "https://example.com", "YOUTUBE_CHANNEL_ID": "UC1"}
        )

        assert settings.port == 8080
        assert settings.verify_token == "devtoken"
        assert settings.hub_url == "https://pubsubhubbub.appspot.com/"
        assert settings.callback_path == "/websub"
        assert settings.renew_interval_seconds == 86400
        assert settings.hub_timeout_seconds is None
        assert settings.log_level == "INFO"
        assert settings.log_format == "json"

    def test_reads_environment(self, test_environ):
        test_environ.update(
            {
                "WEBSUB_HUB_URL": "http://hub.local",
                "WEBSUB_CALLBACK_PATH": "/hooks/yt",
                "WEBSUB_RENEW_INTERVAL_SECONDS": "60",
                "WEBSUB_HUB_TIMEOUT_SECONDS": "10",
                "WEBSUB_LOG_LEVEL": "debug",
                "WEBSUB_LOG_FORMAT": "Console",
            }
        )

        settings = load_config(test_environ)

        assert settings.port == 8181
        assert settings.hub_url == "http://hub.local/"
        assert settings.callback_url == "https://example.ngrok.io/hooks/yt"
        assert settings.renew_interval_seconds == 60
        assert settings.hub_timeout_seconds == 10
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "console"

    @pytest.mark.parametrize("name", ["PUBLIC_BASE_URL", "YOUTUBE_CHANNEL_ID"])
    def test_missing_required(self, test_environ, name):
        del test_environ[name]

        with pytest.raises(ConfigError, match=name):
            load_config(test_environ)

    def test_empty_value_counts_as_missing(self, test_environ):
        test_environ["PUBLIC_BASE_URL"] = ""

        with pytest.raises(ConfigError, match="PUBLIC_BASE_URL"):
            load_config(test_environ)

    def test_empty_optional_uses_default(self, test_environ):
        test_environ["PORT"] = ""
        test_environ["VERIFY_TOKEN"] = ""

        settings = load_config(test_environ)

        assert settings.port == 8080
        assert settings.verify_token == "devtoken"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("PORT", "not-a-port"),
            ("PORT", "70000"),
            ("WEBSUB_CALLBACK_PATH", "websub"),
            ("WEBSUB_RENEW_INTERVAL_SECONDS", "0"),
            ("WEBSUB_LOG_LEVEL", "LOUD"),
            ("WEBSUB_LOG_FORMAT", "xml"),
        ],
    )
    def test_invalid_values(self, test_environ, name, value):
        test_environ[name] = value

        with pytest.raises(ConfigError):
            load_config(test_environ)

    def test_overrides_take_precedence(self, test_environ):
        settings = load_config(test_environ, port=9000, log_level=None)

        assert settings.port == 9000
        assert settings.log_level == "INFO"


class TestSettings:
    """Test derived values."""

    def test_callback_url_joins_without_double_slash(self, test_settings):
        settings = test_settings.model_copy(update={"public_base_url": "https://example.ngrok.io"})
        assert settings.callback_url == "https://example.ngrok.io/websub"

        trailing = Settings(public_base_url="https://example.ngrok.io/", youtube_channel_id="UC1")
        assert trailing.callback_url == "https://example.ngrok.io/websub"

    def test_topic_url(self, test_settings):
        assert (
            test_settings.topic_url
            == "https://www.youtube.com/feeds/videos.xml?channel_id=UC_test_channel"
        )

    def test_frozen(self, test_settings):
        with pytest.raises(ValidationError):
            test_settings.port = 1

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            Settings(public_base_url="https://x", youtube_channel_id="UC1", unknown=True)
