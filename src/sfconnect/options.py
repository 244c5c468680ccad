from __future__ import annotations

from typing import Any, Dict, List


def sort_options(options: List[Dict[str, Any]]) -> None:
    """Sort ``{name, value}`` options by name, in place. Ties keep their order."""
    options.sort(key=lambda o: o["name"])


def sobject_options(
    describe_global: Dict[str, Any], custom_only: bool = False
) -> List[Dict[str, Any]]:
    """Build sorted ``{name: label, value: api_name}`` options from a ``/sobjects`` response."""
    options = [
        {"name": o.get("label") or o["name"], "value": o["name"]}
        for o in describe_global.get("sobjects", [])
        if o.get("custom") or not custom_only
    ]
    sort_options(options)
    return options
