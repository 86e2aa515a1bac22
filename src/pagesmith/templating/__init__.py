r"""Pagesmith templating.

Layout composition, working template caching and Jinja2 rendering for a
static site build.

Basic usage:
    from pathlib import Path

    from pagesmith.templating import ContentUnit, Renderer, Site

    site = Site(templates_dir=Path("templates"), working_dir=Path(".build"))
    renderer = Renderer(site)

    # Layout working templates exist before any page references them
    renderer.prepare_layout_working_templates()

    unit = ContentUnit.from_file(
        Path("content/posts/hello.md"),
        root=Path("content"),
        body="<p>Hello</p>",
        layout="post",
    )
    name = renderer.prepare_content_unit(unit)
    html = renderer.render(name, {"content": unit.body, "title": "Hello"})

Layouts are files named ``_<layout>.j2`` in the template directory that
define a ``<layout>Layout`` macro calling ``caller()`` where the body goes:

    {% macro postLayout() %}<article>{{ caller() }}</article>{% endmacro %}
"""

from ._auto import AutoTemplates
from ._chain import ResolvedTemplate, TemplateResolutionChain, build_resolution_chain
from ._content import ContentUnit, is_valid_layout, parse_layout
from ._environment import EnvironmentConfig, create_environment
from ._layouts import Layout, LayoutRegistrar
from ._materializer import (
    WorkingTemplate,
    WorkingTemplateMaterializer,
    layout_working_template_name,
    page_working_template_name,
    synthesize,
)
from ._models import (
    ModelFactory,
    TemplateModelRegistry,
    build_model_registry,
    register_model_factory,
    unregister_model_factory,
)
from ._renderer import Renderer, is_render_required
from ._site import PluginContributions, Site

__all__ = [
    "AutoTemplates",
    "ContentUnit",
    "EnvironmentConfig",
    "Layout",
    "LayoutRegistrar",
    "ModelFactory",
    "PluginContributions",
    "Renderer",
    "ResolvedTemplate",
    "Site",
    "TemplateModelRegistry",
    "TemplateResolutionChain",
    "WorkingTemplate",
    "WorkingTemplateMaterializer",
    "build_model_registry",
    "build_resolution_chain",
    "create_environment",
    "is_render_required",
    "is_valid_layout",
    "layout_working_template_name",
    "page_working_template_name",
    "parse_layout",
    "register_model_factory",
    "synthesize",
    "unregister_model_factory",
]
