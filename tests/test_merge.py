# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

from lsprouter.router.merge import merge_initialize_results, merge_lists
from tests.helpers import commands_result, sections_result


def test_later_commands_surface_first() -> None:
    merged = merge_initialize_results([commands_result("log", "test"), commands_result("run")])

    assert merged["capabilities"]["executeCommandProvider"]["commands"] == ["run", "log", "test"]


def test_repeated_sections_keep_earliest_position() -> None:
    merged = merge_initialize_results(
        [sections_result("log"), sections_result("log", "test"), sections_result("test")]
    )

    assert merged["awsServerCapabilities"]["configurationProvider"]["sections"] == ["test", "log"]


def test_merge_lists_without_overlap_is_reverse_concatenation() -> None:
    assert merge_lists([["a"], ["b", "c"], ["d"]]) == ["d", "b", "c", "a"]
    assert merge_lists([]) == []


def test_merge_lists_dedupes_unhashable_items() -> None:
    merged = merge_lists([[{"a": 1, "b": 2}], [{"b": 2, "a": 1}, {"c": 3}]])

    assert merged == [{"b": 2, "a": 1}, {"c": 3}]


def test_first_defined_scalar_and_object_win() -> None:
    merged = merge_initialize_results(
        [
            {"capabilities": {"hoverProvider": True, "completionProvider": {"resolveProvider": True}}},
            {
                "capabilities": {
                    "hoverProvider": False,
                    "completionProvider": {"resolveProvider": False, "triggerCharacters": ["."]},
                }
            },
        ]
    )

    assert merged["capabilities"]["hoverProvider"] is True
    # Objects outside the merge containers are not deep-merged.
    assert merged["capabilities"]["completionProvider"] == {"resolveProvider": True}


def test_missing_and_none_values_defer_to_later_fragments() -> None:
    merged = merge_initialize_results(
        [
            {"capabilities": {"hoverProvider": None}},
            {},
            {"capabilities": {"hoverProvider": True, "definitionProvider": True}},
        ]
    )

    assert merged == {"capabilities": {"hoverProvider": True, "definitionProvider": True}}


def test_workspace_file_operations_merge_recursively() -> None:
    merged = merge_initialize_results(
        [
            {"capabilities": {"workspace": {"fileOperations": {"didCreate": {"filters": [{"pattern": "*.py"}]}}}}},
            {
                "capabilities": {
                    "workspace": {
                        "workspaceFolders": {"supported": True},
                        "fileOperations": {"didRename": {"filters": [{"pattern": "**"}]}},
                    }
                }
            },
        ]
    )

    workspace = merged["capabilities"]["workspace"]
    assert workspace["workspaceFolders"] == {"supported": True}
    assert set(workspace["fileOperations"]) == {"didCreate", "didRename"}


def test_default_server_info_wins_over_servers() -> None:
    merged = merge_initialize_results(
        [
            {"serverInfo": {"name": "AWS LSP Standalone", "version": "1.0.0"}},
            {"serverInfo": {"name": "Chat"}},
        ]
    )

    assert merged["serverInfo"] == {"name": "AWS LSP Standalone", "version": "1.0.0"}


def test_inputs_are_not_mutated() -> None:
    first = commands_result("a")
    second = commands_result("b")

    merge_initialize_results([first, second])

    assert first == commands_result("a")
    assert second == commands_result("b")
