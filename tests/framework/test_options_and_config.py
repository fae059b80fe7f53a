import pytest

from chatsuite.config import AdapterConfig
from chatsuite.framework.chat_options import ChatOptions, ChatOptionsSet
from chatsuite.framework.chat_response import MetaUsage
from chatsuite.framework.stop_reason import StopReason, stop_reason_manager


def test_chat_options_set_prefers_call_options_per_field():
    options_set = ChatOptionsSet(
        chat_options=ChatOptions(temperature=0.0),
        client_options=ChatOptions(temperature=0.7, max_tokens=100, json_mode=True),
    )
    assert options_set.temperature() == 0.0
    assert options_set.max_tokens() == 100
    assert options_set.json_mode() is True
    assert options_set.top_p() is None
    assert ChatOptionsSet().capture_usage() is None


def test_meta_usage_summed():
    assert MetaUsage.summed(3, 4).total_tokens == 7
    assert MetaUsage.summed(None, 4).total_tokens == 4
    assert MetaUsage.summed(None, None).total_tokens is None


def test_adapter_config_key_resolution(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("MY_KEY=from-file\n")

    config = AdapterConfig(auth_env_name="MY_KEY", env_file=str(env_file))
    assert config.resolve_api_key(environ={}) == "from-file"
    assert config.resolve_api_key(environ={"MY_KEY": "from-env"}) == "from-env"
    assert config.with_overrides({"api_key": "explicit"}).resolve_api_key(environ={"MY_KEY": "from-env"}) == "explicit"
    assert AdapterConfig().resolve_api_key() is None


def test_adapter_config_overrides_do_not_mutate_defaults():
    default = AdapterConfig(auth_env_name="MY_KEY")
    overridden = default.with_overrides({"base_url": "http://local/"})

    assert default.base_url is None
    assert overridden.base_url == "http://local/"
    assert default.with_overrides(None) is default
    with pytest.raises(ValueError):
        default.with_overrides({"region": "eu"})


def test_stop_reason_mapping():
    assert stop_reason_manager.map_stop_reason("openai", "tool_calls").reason == StopReason.TOOL_CALL
    assert stop_reason_manager.map_stop_reason("anthropic", "max_tokens").reason == StopReason.LENGTH_LIMIT

    info = stop_reason_manager.map_stop_reason("gemini", "SOMETHING_NEW")
    assert info.reason == StopReason.UNKNOWN
    assert info.original_reason == "SOMETHING_NEW"
    assert info.metadata["provider"] == "gemini"
