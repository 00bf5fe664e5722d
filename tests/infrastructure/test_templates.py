"""Tests for overlay template rendering."""

from __future__ import annotations

import pytest

from relpack.domain.release import VERSION_TOKEN, OverlayError, Release
from relpack.infrastructure.templates import render_template


@pytest.fixture
def release() -> Release:
    return Release(name="myapp", version="2.3.1")


class TestRenderTemplate:
    def test_version_token(self, release: Release) -> None:
        assert render_template(f"releases/{VERSION_TOKEN}/edump", release) == "releases/2.3.1/edump"

    def test_compact_token(self, release: Release) -> None:
        assert render_template("releases/<%=release.version%>/edump", release) == "releases/2.3.1/edump"

    def test_name_token(self, release: Release) -> None:
        assert render_template("<%= release.name %>.tar.gz", release) == "myapp.tar.gz"

    def test_plain_text_untouched(self, release: Release) -> None:
        assert render_template("bin/{{ not_a_var }}", release) == "bin/{{ not_a_var }}"

    def test_unknown_name_raises(self, release: Release) -> None:
        with pytest.raises(OverlayError):
            render_template("<%= release.nope %>", release)

    def test_keeps_trailing_newline(self, release: Release) -> None:
        assert render_template("vsn=<%= release.version %>\n", release) == "vsn=2.3.1\n"
