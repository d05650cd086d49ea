"""Ordered registry of format parsers."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from core.parsing.jira_parser import try_parse_jira
from core.parsing.json_parser import try_parse_json
from core.parsing.key_value_parser import try_parse_key_value
from core.parsing.models import Parser
from core.parsing.tabular_parser import try_parse_tabular

# Priority order: most structured format first.
PARSERS: Mapping[str, Parser] = MappingProxyType(
    {
        "json": try_parse_json,
        "tabular": try_parse_tabular,
        "key_value": try_parse_key_value,
        "jira": try_parse_jira,
    }
)

FORMAT_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "json": "JSON",
        "tabular": "CSV/Excel (tab-separated)",
        "key_value": "line by line (key: value)",
        "jira": "Jira (markdown table)",
    }
)


def get_parser(name: str) -> Parser:
    """Return a parser by format name."""

    try:
        return PARSERS[name]
    except KeyError as exc:
        raise ValueError(f"Unsupported format: {name}") from exc


def list_supported_formats() -> list[str]:
    """Return format names in priority order."""

    return list(PARSERS)


def _assert_registry_alignment() -> None:
    """Fail fast when parser and label keys diverge."""

    if list(PARSERS) != list(FORMAT_LABELS):
        raise RuntimeError(
            "Parser registry/label keys must match: "
            f"parsers={list(PARSERS)}, labels={list(FORMAT_LABELS)}"
        )


_assert_registry_alignment()
