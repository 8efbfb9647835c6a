"""Page-side JavaScript sources.

Scripts live next to this module in ``js/``. Scripts that read the fiber
graph contain a ``/* @helpers */`` placeholder that is replaced with the
shared helpers from ``js/helpers.js``.
"""

from __future__ import annotations

from functools import cache
from pathlib import Path

_JS_DIR = Path(__file__).parent / "js"
_HELPERS_PLACEHOLDER = "/* @helpers */"


def _read(name: str) -> str:
    path = _JS_DIR / name
    if path.exists():
        return path.read_text(encoding="utf-8")
    raise FileNotFoundError(f"Inspector script not found: {path}")


@cache
def load_script(name: str) -> str:
    """Load a script from ``js/``, splicing in the shared fiber helpers.

    Args:
        name: File name, e.g. ``"fiber_tree.js"``

    Returns:
        Script source ready for evaluation in the page.
    """
    source = _read(name)
    if _HELPERS_PLACEHOLDER in source:
        source = source.replace(_HELPERS_PLACEHOLDER, _read("helpers.js").strip())
    return source
