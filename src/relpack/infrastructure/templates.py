"""Jinja2 rendering for overlay paths and template overlays.

Overlay strings use ``<%= expr %>`` expressions (``<%= release.version %>``),
so the environment swaps Jinja's variable delimiters for those.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from jinja2 import Environment, StrictUndefined, TemplateError

from relpack.domain.release import OverlayError

if TYPE_CHECKING:
    from relpack.domain.release import Release


@functools.cache
def build_overlay_environment() -> Environment:
    """Build the shared environment for overlay rendering."""
    return Environment(
        variable_start_string="<%=",
        variable_end_string="%>",
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def render_template(text: str, release: Release) -> str:
    """Render ``<%= ... %>`` expressions in *text* against *release*.

    Raises OverlayError if the template is malformed or references an
    unknown name.
    """
    env = build_overlay_environment()
    try:
        return env.from_string(text).render(release=release)
    except TemplateError as exc:
        msg = f"Cannot render {text!r}: {exc}"
        raise OverlayError(msg) from exc
