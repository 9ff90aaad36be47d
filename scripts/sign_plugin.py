from __future__ import annotations

import argparse
import json
from pathlib import Path

from fairpick.selection.plugins import StrategyPluginConfig, compute_plugin_signature


def sign_plugins(path: Path, *, write: bool = False) -> list[dict]:
    """Compute signatures for the plugin configs stored in ``path``.

    The file holds either a single plugin object or a list of them. When
    ``write`` is set the ``signature`` fields are updated in place.
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    entries = payload if isinstance(payload, list) else [payload]
    for entry in entries:
        config = StrategyPluginConfig.from_mapping(entry)
        entry["signature"] = compute_plugin_signature(config)
    if write:
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
        )
    return entries


def main() -> None:
    """Print (and optionally store) signatures for strategy plugin configs."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("path", type=Path, help="JSON file with one plugin or a list")
    parser.add_argument(
        "--write", action="store_true", help="store the signatures back into the file"
    )
    args = parser.parse_args()

    for entry in sign_plugins(args.path, write=args.write):
        print(f"{entry['id']}\t{entry['signature']}")


if __name__ == "__main__":
    main()
