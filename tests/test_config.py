from __future__ import annotations

from lsprouter.config import DEFAULT_SERVER_NAME, DEFAULT_SERVER_VERSION, RuntimeConfig


def test_default_initialize_result() -> None:
    assert RuntimeConfig().default_initialize_result() == {
        "serverInfo": {"name": "AWS LSP Standalone", "version": "1.0.0"},
        "capabilities": {"textDocumentSync": {"openClose": True, "change": 2, "save": {"includeText": True}}},
    }


def test_from_env_overrides_identity() -> None:
    config = RuntimeConfig.from_env({"LSPROUTER_SERVER_NAME": "Runtime", "LSPROUTER_SERVER_VERSION": "9.9"})

    assert (config.name, config.version) == ("Runtime", "9.9")


def test_from_env_falls_back_on_missing_or_blank_values() -> None:
    config = RuntimeConfig.from_env({"LSPROUTER_SERVER_NAME": ""})

    assert (config.name, config.version) == (DEFAULT_SERVER_NAME, DEFAULT_SERVER_VERSION)


def test_version_can_be_omitted() -> None:
    assert RuntimeConfig(version=None).default_initialize_result()["serverInfo"] == {"name": DEFAULT_SERVER_NAME}


def test_default_result_is_a_fresh_copy() -> None:
    config = RuntimeConfig()

    config.default_initialize_result()["capabilities"]["textDocumentSync"]["openClose"] = False

    assert config.text_document_sync["openClose"] is True
