"""Selection of the key layout configured for a deployment."""

from core.layouts.base import KeyLayout
from core.layouts.flat_style import FlatStyleLayout
from core.layouts.path_style import PathStyleLayout
from core.utils.constants import LAYOUT_FLAT, LAYOUT_PATH

_LAYOUTS: dict[str, type[KeyLayout]] = {
    LAYOUT_PATH: PathStyleLayout,
    LAYOUT_FLAT: FlatStyleLayout,
}


def build_layout(name: str, folder_path: str = "") -> KeyLayout:
    """Instantiate the layout registered under ``name``."""
    try:
        layout_cls = _LAYOUTS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown key layout: {name!r}") from exc
    return layout_cls(folder_path)
