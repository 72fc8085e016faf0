"""Tests for settings loading."""

import pytest

from config import load_settings_conf, SettingsError, DEFAULTS


def write_settings(tmp_path, body):
    (tmp_path / 'settings.conf').write_text("[DEFAULT]\n" + body)
    return str(tmp_path)


def test_defaults_fill_missing_keys(tmp_path):
    settings = load_settings_conf(write_settings(
        tmp_path, "db_url = postgresql://app@db:5432/shop\n"
    ))

    assert settings['db_url'] == "postgresql://app@db:5432/shop"
    assert settings['default_image_url'] == DEFAULTS['default_image_url']
    assert settings['session_cookie_name'] == "bikes_sf_session"
    assert settings['api_port'] == 3000
    assert settings['checkout_max_tries'] == 3
    assert settings['log_level'] == "INFO"


def test_values_are_converted(tmp_path):
    settings = load_settings_conf(write_settings(
        tmp_path,
        "pool_min_size = 1\npool_max_size = 4\nlog_level = debug\n"
    ))
    assert settings['pool_min_size'] == 1
    assert settings['pool_max_size'] == 4
    assert settings['log_level'] == "DEBUG"


@pytest.mark.parametrize("body, message", [
    ("db_url =\n", "db_url"),
    ("api_port = http\n", "api_port"),
    ("checkout_max_tries = 0\n", "checkout_max_tries"),
    ("pool_min_size = 10\npool_max_size = 2\n", "pool_min_size"),
    ("log_level = LOUD\n", "log_level"),
])
def test_invalid_settings(tmp_path, body, message):
    with pytest.raises(SettingsError) as exc_info:
        load_settings_conf(write_settings(tmp_path, body))
    assert message in str(exc_info.value)
