"""Unit tests for the loguru session setup and the [render] log helpers."""

import pytest
from loguru import logger

from conftest import FakeResvgLib
from svgraster.contexts.rendering.exceptions import ParseError
from svgraster.contexts.rendering.logger import setup_rendering_logger
from svgraster.contexts.rendering.native import NativeEngine
from svgraster.contexts.rendering.options import RenderConfiguration
from svgraster.contexts.rendering.renderer import render_to_png


@pytest.fixture
def session_log(tmp_path):
    """Log file for a rendering session; handlers are removed afterwards."""
    log_file = setup_rendering_logger(tmp_path / "render_session", "fake")
    yield log_file
    logger.remove()


def read_log(log_file):
    logger.remove()
    return log_file.read_text(encoding="utf-8")


@pytest.mark.unit
def test_session_header(session_log):
    """The header names the context, runtime and native library."""
    text = read_log(session_log)

    assert session_log.name == "render.log"
    assert "Context: render" in text
    assert "cffi: " in text
    assert "Native library: fake" in text


@pytest.mark.unit
def test_successful_render_is_logged(session_log, allocator, simple_svg, font_a):
    """A render logs its start, overrides, marshaled bytes and result."""
    engine = NativeEngine(FakeResvgLib(), source="fake")
    configuration = RenderConfiguration(
        background="white", use_fonts=[font_a], sans_serif_family="Inter"
    )

    png = render_to_png(simple_svg, configuration, engine=engine, allocator=allocator)
    text = read_log(session_log)

    assert f"[render] Rendering {len(simple_svg.encode('utf-8'))} byte SVG document" in text
    assert "[render]   sans-serif -> Inter" in text
    assert "[render] Marshaled 5 regions" in text
    assert f"[render] Rendered {len(png)} byte PNG" in text


@pytest.mark.unit
def test_failed_render_is_logged(session_log, allocator, simple_svg):
    """Native failures are logged with their status before propagating."""
    engine = NativeEngine(FakeResvgLib(status=1), source="fake")

    with pytest.raises(ParseError):
        render_to_png(simple_svg, engine=engine, allocator=allocator)
    text = read_log(session_log)

    assert "[render] Render failed: ParseError (status 1" in text
