"""Shared test fixtures for pagesmith tests."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest
from structlog.typing import FilteringBoundLogger

from pagesmith.config import LoggingConfig, LogLevel, RendererConfig
from pagesmith.templating import ContentUnit, PluginContributions, Renderer, Site
from pagesmith.utils import create_render_logger

DEFAULT_LAYOUT = (
    "{% macro defaultLayout() %}"
    "<html><title>{{ title }}</title><body>{{ caller() }}</body></html>"
    "{% endmacro %}\n"
)

POST_LAYOUT = (
    '{% from "/_default.j2" import defaultLayout with context %}'
    "{% macro postLayout() %}{% set body = caller() %}"
    "{% call defaultLayout() %}<article>{{ body }}</article>{% endcall %}"
    "{% endmacro %}\n"
)


@dataclass(frozen=True, slots=True)
class SiteTree:
    """Paths for a test site.

    Structure:
        tmp_path/
            site/
                content/
                    posts/
                templates/
                    _default.j2
                    _post.j2
            build/       # working directory, created by the renderer
    """

    root: Path
    content_dir: Path
    templates_dir: Path
    working_dir: Path

    @property
    def working_templates_dir(self) -> Path:
        return self.working_dir / "templates"


@pytest.fixture
def site_tree(tmp_path: Path) -> SiteTree:
    root = tmp_path / "site"
    content_dir = root / "content"
    (content_dir / "posts").mkdir(parents=True)

    templates_dir = root / "templates"
    templates_dir.mkdir()
    _ = (templates_dir / "_default.j2").write_text(DEFAULT_LAYOUT, encoding="utf-8")
    _ = (templates_dir / "_post.j2").write_text(POST_LAYOUT, encoding="utf-8")

    return SiteTree(
        root=root,
        content_dir=content_dir,
        templates_dir=templates_dir,
        working_dir=tmp_path / "build",
    )


@pytest.fixture
def quiet_logger() -> FilteringBoundLogger:
    """Logger that only emits errors to stderr."""
    return create_render_logger(LoggingConfig(level=LogLevel.ERROR))


RendererFactory = Callable[..., Renderer]


@pytest.fixture
def make_renderer(
    site_tree: SiteTree, quiet_logger: FilteringBoundLogger
) -> RendererFactory:
    """Return a function building a Renderer over the test site."""

    def _make(
        config: RendererConfig | None = None,
        plugins: PluginContributions | None = None,
    ) -> Renderer:
        site = Site(
            templates_dir=site_tree.templates_dir,
            working_dir=site_tree.working_dir,
            config=config if config is not None else RendererConfig(),
            plugins=plugins if plugins is not None else PluginContributions(),
        )
        return Renderer(site, logger=quiet_logger)

    return _make


@pytest.fixture
def renderer(make_renderer: RendererFactory) -> Renderer:
    return make_renderer()


ContentFactory = Callable[..., ContentUnit]


@pytest.fixture
def make_content(site_tree: SiteTree) -> ContentFactory:
    """Return a function writing a content file and building its unit."""

    def _make(
        relative_path: str = "posts/hello.md",
        body: str = "<p>Hello</p>",
        layout: str | None = "post",
        mtime: float | None = None,
    ) -> ContentUnit:
        path = site_tree.content_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(body, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return ContentUnit.from_file(
            path, root=site_tree.content_dir, body=body, layout=layout
        )

    return _make
