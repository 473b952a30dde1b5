"""Template registry: theme partials, page templates and the theme helper."""

from __future__ import annotations

import logging
import re
from functools import partial
from pathlib import Path
from typing import Any, Iterable

from jinja2 import (
    ChainableUndefined,
    DictLoader,
    Template,
    TemplateSyntaxError,
    UndefinedError,
    nodes,
)
from jinja2 import StrictUndefined as _JinjaStrictUndefined
from jinja2.ext import Extension
from jinja2.sandbox import ImmutableSandboxedEnvironment
from jinja2.utils import missing
from markupsafe import Markup

from ..content.catalog import is_template, read_template_text
from ..core.errors import TemplateLoadError
from ..core.models import Page
from .context import AUTOMATIC_KEYS

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r"\{\{!(?:--.*?--|.*?)\}\}", re.DOTALL)
_THEME_OPEN = re.compile(r"\{\{#\s*theme\s+(\"[^\"]*\"|'[^']*')\s*\}\}")
_THEME_CLOSE = re.compile(r"\{\{/\s*theme\s*\}\}")
_PARTIAL = re.compile(r"\{\{>\s*([\w./-]+)\s*\}\}")
_UNESCAPED = re.compile(r"\{\{\{\s*(.+?)\s*\}\}\}")


class MissingVariableError(UndefinedError):
    """Strict-mode lookup of a variable that does not exist.

    ``obj`` is the container the lookup was made on (``missing`` for a
    top-level name) and ``name`` the key that was not found.
    """

    def __init__(self, message: str | None = None, *, obj: Any = missing, name: Any = None):
        super().__init__(message)
        self.obj = obj
        self.name = name


class StrictUndefined(_JinjaStrictUndefined):
    """Strict undefined that remembers where the failed lookup happened."""

    __slots__ = ()

    def __init__(self, hint=None, obj=missing, name=None, exc=UndefinedError):
        super().__init__(hint, obj, name, exc)
        if exc is UndefinedError:
            self._undefined_exception = partial(
                MissingVariableError, obj=obj, name=name
            )


class LenientUndefined(ChainableUndefined):
    """Chainable undefined that also absorbs arithmetic.

    ``{{ params.missing + 1 }}`` renders as the empty string. Sandbox
    violations still raise.
    """

    __slots__ = ()

    def _absorb(self, *args: Any, **kwargs: Any) -> "LenientUndefined":
        if self._undefined_exception is not UndefinedError:
            self._fail_with_undefined_error()
        return self

    __add__ = __radd__ = __sub__ = __rsub__ = _absorb
    __mul__ = __rmul__ = __truediv__ = __rtruediv__ = _absorb
    __floordiv__ = __rfloordiv__ = __mod__ = __rmod__ = _absorb
    __pow__ = __rpow__ = __pos__ = __neg__ = _absorb


def _comment(match: re.Match) -> str:
    # keep line numbers stable for error messages
    return "{#" + "\n" * match.group(0).count("\n") + "#}"


class ThemeExtension(Extension):
    """The ``theme`` block helper plus Handlebars-flavoured spellings.

    ``{% theme "main" %}BODY{% endtheme %}`` (or ``{{#theme "main"}}BODY{{/theme}}``)
    renders BODY, then renders the theme partial ``main`` with the same
    automatic variables and ``content`` bound to the rendered BODY.
    """

    tags = {"theme"}

    def preprocess(
        self, source: str, name: str | None, filename: str | None = None
    ) -> str:
        source = _COMMENT.sub(_comment, source)
        source = _THEME_OPEN.sub(r"{% theme \1 %}", source)
        source = _THEME_CLOSE.sub("{% endtheme %}", source)
        source = _PARTIAL.sub(r'{% include "\1" %}', source)
        return _UNESCAPED.sub(r"{{ (\1)|safe }}", source)

    def parse(self, parser):
        lineno = next(parser.stream).lineno
        partial_name = parser.parse_expression()
        body = parser.parse_statements(("name:endtheme",), drop_needle=True)
        call = self.call_method(
            "_render_theme", [partial_name, nodes.ContextReference()]
        )
        return nodes.CallBlock(call, [], [], body).set_lineno(lineno)

    def _render_theme(self, partial_name: str, context, caller) -> Markup:
        inner = str(caller())
        template = self.environment.get_template(partial_name)
        bindings = {key: context[key] for key in AUTOMATIC_KEYS if key in context}
        bindings["content"] = inner
        return Markup(template.render(bindings))


class TemplateRegistry:
    """Owns the Jinja2 environment, the theme partials and the page templates.

    Partials are addressed by their path below the theme root without the
    extension (``partials/nav``); pages by their identity. The two
    namespaces are separate: pages can include partials, never other pages.

    The environment is an immutable sandbox, so templates cannot modify
    the site or params data shared by every render.
    """

    def __init__(self, strict: bool = False):
        self._partials: dict[str, str] = {}
        self._pages: dict[str, Template] = {}
        self.environment = ImmutableSandboxedEnvironment(
            loader=DictLoader(self._partials),
            extensions=[ThemeExtension],
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.strict = strict

    @property
    def strict(self) -> bool:
        return self.environment.undefined is StrictUndefined

    @strict.setter
    def strict(self, value: bool) -> None:
        self.environment.undefined = StrictUndefined if value else LenientUndefined

    @property
    def partial_names(self) -> list[str]:
        return sorted(self._partials)

    @property
    def page_identities(self) -> list[str]:
        return sorted(self._pages)

    def add_partial(self, name: str, source: str, origin: str | None = None) -> None:
        """Register and compile a theme partial."""
        if name in self._partials:
            raise TemplateLoadError(f"Duplicate theme partial {name!r} ({origin})")
        self._partials[name] = source
        try:
            self.environment.get_template(name)
        except TemplateSyntaxError as e:
            del self._partials[name]
            raise TemplateLoadError(
                f"{origin or name}:{e.lineno}: {e.message}"
            ) from e
        logger.debug(f"Registered partial {name}")

    def load_theme(self, theme_root: Path | None) -> None:
        """Register every template file below ``theme_root`` as a partial."""
        if theme_root is None:
            logger.info("No theme folder specified! Skipping...")
            return
        if not theme_root.is_dir():
            logger.warning(f"Theme directory not found: {theme_root}")
            return

        for path in sorted(theme_root.rglob("*")):
            if not path.is_file() or not is_template(path):
                continue
            name = path.relative_to(theme_root).with_suffix("").as_posix()
            self.add_partial(name, read_template_text(path), str(path))

    def add_page(self, page: Page) -> None:
        """Compile a page body and register it under the page identity."""
        try:
            template = self.environment.from_string(page.body)
        except TemplateSyntaxError as e:
            raise TemplateLoadError(
                f"{page.source_path}:{e.lineno}: {e.message}"
            ) from e
        self._pages[page.identity] = template
        logger.debug(f"Registered page {page.identity}")

    def add_pages(self, pages: Iterable[Page]) -> None:
        for page in pages:
            self.add_page(page)

    def render(self, identity: str, context: dict[str, Any]) -> str:
        """Render the page registered as ``identity`` with ``context``."""
        return self._pages[identity].render(context)

    def render_partial(self, name: str, context: dict[str, Any]) -> str:
        return self.environment.get_template(name).render(context)
