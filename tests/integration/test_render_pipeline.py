"""End-to-end rendering of a small site."""

from __future__ import annotations

import itertools
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

import pytest
from jinja2 import DictLoader

from pagesmith.config import load_config
from pagesmith.templating import ContentUnit, PluginContributions, Renderer, Site

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from tests.conftest import SiteTree

_module_ids = itertools.count()

MODELS_MODULE = """\
class Clock:
    def __init__(self, site, config):
        self.year = 2024
        self.locale = config.locale
"""

PAGE_HTML = "<!--banner--><html><title>{title}</title><body><article>{body}</article></body></html>"


@pytest.fixture
def models_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    module = f"pipeline_models_{next(_module_ids)}"
    _ = (tmp_path / f"{module}.py").write_text(MODELS_MODULE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return module


@pytest.fixture
def site(site_tree: SiteTree, models_module: str) -> Site:
    templates = site_tree.templates_dir
    _ = (templates / "macros.j2").write_text(
        "{% macro shout(text) %}{{ text | upper }}!{% endmacro %}", encoding="utf-8"
    )
    _ = (templates / "banner.j2").write_text("<!--banner-->", encoding="utf-8")

    config_path = site_tree.root / "pagesmith.toml"
    _ = config_path.write_text(
        f"""
locale = "en_GB"

[jinja]
auto_include_templates = ["banner.j2"]

[jinja.auto_import_templates]
m = "macros.j2"

[template_models]
clock = "{models_module}:Clock"
""",
        encoding="utf-8",
    )

    return Site(
        templates_dir=templates,
        working_dir=site_tree.working_dir,
        config=load_config(config_path, environ={}),
        plugins=PluginContributions(
            loaders=(DictLoader({"widget.j2": "[widget {{ locale }}]"}),),
            models=MappingProxyType({"site_name": "Example"}),
        ),
    )


@pytest.fixture
def renderer(site: Site, quiet_logger: FilteringBoundLogger) -> Renderer:
    renderer = Renderer(site, logger=quiet_logger)
    _ = renderer.prepare_layout_working_templates()
    return renderer


def _content(site_tree: SiteTree, relative: str, body: str, layout: str) -> ContentUnit:
    path = site_tree.content_dir / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(body, encoding="utf-8")
    return ContentUnit.from_file(path, root=site_tree.content_dir, body=body, layout=layout)


def test_plain_page_renders_through_shared_layout_template(
    renderer: Renderer, site_tree: SiteTree
) -> None:
    unit = _content(site_tree, "posts/plain.md", "<p>Plain</p>", "post")

    name = renderer.prepare_content_unit(unit)
    html = renderer.render(name, {"content": unit.body, "title": "Plain"})

    assert name == "_post.content.j2"
    assert html == PAGE_HTML.format(title="Plain", body="<p>Plain</p>")


def test_templated_page_sees_models_macros_and_plugin_templates(
    renderer: Renderer, site_tree: SiteTree
) -> None:
    body = '<p>{{ m.shout(title) }} {{ clock.year }} {{ site_name }}</p>{% include "widget.j2" %}'
    unit = _content(site_tree, "posts/hello.md", body, "post")

    name = renderer.prepare_content_unit(unit)
    html = renderer.render(name, {"title": "Hello"})

    assert name == "posts/hello.md.post.j2"
    assert html == PAGE_HTML.format(
        title="Hello", body="<p>HELLO! 2024 Example</p>[widget en_GB]"
    )


def test_template_model_receives_site_configuration(renderer: Renderer) -> None:
    clock = renderer.models["clock"]

    assert clock.locale == "en_GB"  # pyright: ignore[reportAttributeAccessIssue]


def test_unlayouted_page_renders_bare(renderer: Renderer, site_tree: SiteTree) -> None:
    unit = _content(site_tree, "about.md", "About {{ site_name }}", "none")

    name = renderer.prepare_content_unit(unit)

    assert renderer.render(name) == "<!--banner-->About Example"


def test_rebuild_reuses_working_templates(
    site: Site, renderer: Renderer, site_tree: SiteTree, quiet_logger: FilteringBoundLogger
) -> None:
    unit = _content(site_tree, "posts/hello.md", "<p>{{ title }}</p>", "post")
    name = renderer.prepare_content_unit(unit)
    working_file = renderer.materializer.path_for(name)
    first_mtime = working_file.stat().st_mtime_ns

    rebuilt = Renderer(site, logger=quiet_logger)
    layouts = rebuilt.prepare_layout_working_templates()
    same_name = rebuilt.prepare_content_unit(unit)

    assert same_name == name
    assert [p.written for p in layouts] == [False, False]
    assert working_file.stat().st_mtime_ns == first_mtime
    assert rebuilt.render(name, {"title": "Again"}) == PAGE_HTML.format(
        title="Again", body="<p>Again</p>"
    )
