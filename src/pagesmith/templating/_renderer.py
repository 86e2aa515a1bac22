"""Template rendering engine."""

from __future__ import annotations

import io
import itertools
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from jinja2 import TemplateError, TemplateNotFound

from pagesmith.exceptions import EngineError, PagesmithError, ResolutionError
from pagesmith.utils import create_render_logger

from ._chain import build_resolution_chain
from ._content import is_valid_layout, parse_layout
from ._environment import EnvironmentConfig, create_environment
from ._layouts import LayoutRegistrar
from ._materializer import WorkingTemplateMaterializer
from ._models import build_model_registry

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from typing import TextIO

    from jinja2 import Template
    from structlog.typing import FilteringBoundLogger

    from ._content import ContentUnit
    from ._materializer import WorkingTemplate
    from ._site import Site

DIRECTIVE_MARKER = "{%"
INTERPOLATION_MARKER = "{{"
INLINE_NAME_PREFIX = "inline-"


def is_render_required(text: str) -> bool:
    """Return True if ``text`` contains template directives or interpolations."""
    return DIRECTIVE_MARKER in text or INTERPOLATION_MARKER in text


class Renderer:
    """Renders templates for a site.

    Construction builds the resolution chain, the Jinja2 environment, the
    template model registry and the auto import/include set. Any failure
    there is fatal: ConfigurationError for unusable template directories,
    InstantiationError for template model bindings.

    Rendering merges the template models into every context. Caller values
    override models of the same name.
    """

    def __init__(
        self,
        site: Site,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        if logger is None:
            logger = create_render_logger(site.config.logging, component="renderer")

        self.site: Site = site
        self._logger: FilteringBoundLogger = logger

        self.chain = build_resolution_chain(
            site.working_templates_dir,
            site.templates_dir,
            site.plugins.loaders,
        )
        logger.debug(
            "template_directories",
            working=str(site.working_templates_dir),
            site=str(site.templates_dir),
            sources=list(self.chain.origins),
        )

        self.environment_config: EnvironmentConfig = EnvironmentConfig.from_config(
            site.config, logger
        )
        self.environment = create_environment(
            self.chain, config=self.environment_config
        )
        self.models = build_model_registry(site, logger=logger)

        self.materializer = WorkingTemplateMaterializer(
            site.working_templates_dir,
            extension=self.environment_config.extension,
            logger=logger,
        )
        self.layouts = LayoutRegistrar(
            site.templates_dir, self.materializer, logger=logger
        )

        self._inline_ids: Iterator[int] = itertools.count(int(time.time() * 1000))

    # -- rendering -----------------------------------------------------------

    def render(self, name: str, context: Mapping[str, object] | None = None) -> str:
        """Render a named template to a string.

        Raises:
            ResolutionError: If the template, or one it loads, is not found.
            EngineError: If the template fails to parse or evaluate.
        """
        buffer = io.StringIO()
        self.render_to(name, context, buffer)
        return buffer.getvalue()

    def render_to(
        self,
        name: str,
        context: Mapping[str, object] | None,
        out: TextIO,
    ) -> None:
        """Render a named template, streaming output to ``out``."""
        self._logger.debug("rendering_template", template=name)
        with self._translate_errors(name):
            template = self.environment.get_template(name)
            self._process(template, context, out)

    def render_inline(
        self, text: str, context: Mapping[str, object] | None = None
    ) -> str:
        """Render template source text to a string."""
        buffer = io.StringIO()
        self.render_inline_to(text, context, buffer)
        return buffer.getvalue()

    def render_inline_to(
        self,
        text: str,
        context: Mapping[str, object] | None,
        out: TextIO,
    ) -> None:
        """Render template source text, streaming output to ``out``.

        Each call compiles the text under a new synthetic name.
        """
        name = f"{INLINE_NAME_PREFIX}{next(self._inline_ids)}"
        self._logger.debug("rendering_inline_template", template=name)
        with self._translate_errors(name):
            template = self._compile_inline(text, name)
            self._process(template, context, out)

    def _compile_inline(self, text: str, name: str) -> Template:
        env = self.environment
        code = env.compile(text, name=name, filename=name)
        return env.template_class.from_code(env, code, env.make_globals(None))

    def _process(
        self,
        template: Template,
        context: Mapping[str, object] | None,
        out: TextIO,
    ) -> None:
        values = self.models.merge(context)

        auto = self.environment_config.auto
        if not auto.is_empty:
            values.update(auto.import_namespaces(self.environment, values))
            for chunk in auto.render_includes(self.environment, values):
                _ = out.write(chunk)

        for chunk in template.generate(values):
            _ = out.write(chunk)
        out.flush()

    @contextmanager
    def _translate_errors(self, name: str) -> Iterator[None]:
        try:
            yield
        except TemplateNotFound as e:
            missing = str(e.name) if e.name is not None else name
            if missing == name:
                msg = f"Template not found: {name}"
                referrer = None
            else:
                msg = f"Template not found: {missing} (loaded by {name})"
                referrer = name
            raise ResolutionError(msg, name=missing, referrer=referrer) from e
        except TemplateError as e:
            msg = f"Failed to render template {name}: {e}"
            raise EngineError(msg, template=name, cause=e) from e
        except OSError as e:
            msg = f"I/O error while rendering template {name}: {e}"
            raise EngineError(msg, template=name, cause=e) from e
        except PagesmithError:
            raise
        except Exception as e:
            # Evaluation errors surface as plain Python exceptions
            msg = f"Failed to evaluate template {name}: {e}"
            raise EngineError(msg, template=name, cause=e) from e

    # -- working templates ---------------------------------------------------

    def is_render_required(self, text: str) -> bool:
        return is_render_required(text)

    def is_valid_layout(self, layout: str | None) -> bool:
        return is_valid_layout(layout)

    def prepare_working_template(
        self,
        layout: str | None,
        is_valid_layout: bool,  # noqa: FBT001
        body: str | None,
        is_body_render_required: bool,  # noqa: FBT001
        unit: ContentUnit,
    ) -> str:
        """Materialize a working template; see WorkingTemplateMaterializer."""
        return self.materializer.prepare(
            layout, is_valid_layout, body, is_body_render_required, unit
        )

    def prepare_content_unit(self, unit: ContentUnit) -> str:
        """Materialize the working template a content unit renders through.

        The body is embedded when it contains template code; otherwise the
        layout's shared working template is used and the body must be passed
        as ``content`` when rendering.

        Returns:
            Logical name of the working template.
        """
        return self.materializer.prepare(
            unit.layout,
            parse_layout(unit.layout) is not None,
            unit.body,
            is_render_required(unit.body),
            unit,
        )

    def prepare_layout_working_templates(self) -> list[WorkingTemplate]:
        """Materialize one working template per layout in the template directory."""
        return self.layouts.prepare_all()
