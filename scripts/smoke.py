# scripts/smoke.py
"""
Smoke Test Script for the blockdoc renderer.

Usage
-----
1. Render the built-in sample article and run its code block:
    $ uv run python scripts/smoke.py

2. Render a document of your own:
    $ uv run python scripts/smoke.py --file samples/article.json

Writes `smoke.html` (a standalone page) next to the current directory.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from blockdoc.render.pipeline import render_article, render_page

env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
SAMPLE_DOCUMENT: dict[str, Any] = {
    "time": 1700000000000,
    "version": "2.28.2",
    "blocks": [
        {"type": "header", "data": {"text": "Smoke Test", "level": 1}},
        {"type": "paragraph", "data": {"text": "Hello <b>world</b><script>alert(1)</script>"}},
        {"type": "list", "data": {"style": "ordered", "items": ["one", {"content": "two"}]}},
        {"type": "code", "data": {"code": 'console.log("hi"); 6 * 7', "language": "javascript"}},
        {"type": "mystery", "data": {}},
    ],
}


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run blockdoc Smoke Test")
    parser.add_argument("--file", "-f", type=str, help="Path to a block-document JSON file")
    args = parser.parse_args()

    content: Any = SAMPLE_DOCUMENT
    if args.file:
        input_path = Path(args.file)
        if not input_path.exists():
            print(f"❌ File not found: {input_path}")
            return
        content = json.loads(input_path.read_text(encoding="utf-8"))

    article = render_article(content, run_code=True)
    print("\n" + "=" * 60)
    print(article.html)
    print("=" * 60)

    for block in article.executables:
        result = block.trigger()
        if result is None:
            continue
        print(f"\n▶ block {block.index} ({block.state.value})")
        for entry in result.entries:
            print(f"  [{entry.channel}] {entry.content}")
        if result.value is not None:
            print(f"  => {result.value}")

    out = Path("smoke.html")
    out.write_text(render_page(content, title="Smoke Test"), encoding="utf-8")
    print(f"\n✅ Wrote {out.resolve()}")


if __name__ == "__main__":
    main()
