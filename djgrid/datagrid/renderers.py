"""Renderers for datagrid column cells.

A column refers to its renderer either by ID, in which case the renderer is
looked up in :py:data:`column_renderer_registry` when needed, or by passing
the renderer instance directly. :py:class:`RendererRef` holds either form.

Third-party packages can provide renderers through the
``djgrid.column_renderers`` Python entry point group.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, TYPE_CHECKING, Union

from django.utils.html import format_html
from django.utils.translation import gettext as _, gettext_lazy
from typing_extensions import Final

from djgrid.datagrid.errors import InvalidArgumentError
from djgrid.registries.registry import EntryPointRegistry, NOT_REGISTERED

if TYPE_CHECKING:
    from django.utils.safestring import SafeString

    from djgrid.datagrid.columns import Column


logger = logging.getLogger(__name__)


#: The ID of the renderer used when a column doesn't specify one.
DEFAULT_RENDERER_ID: Final[str] = 'Column'


class ColumnRenderer:
    """Base class for a column cell renderer.

    Subclasses must set :py:attr:`renderer_id` if they're going to be
    registered, and can override :py:meth:`render`.
    """

    #: The unique ID of the renderer.
    #:
    #: Type:
    #:     str
    renderer_id: Optional[str] = None

    def render(
        self,
        column: Column,
        value: Any,
        row: Any = None,
    ) -> SafeString:
        """Render the content of a cell.

        By default, this renders the column's formatted content, escaped.

        Args:
            column (djgrid.datagrid.columns.Column):
                The column being rendered.

            value (object):
                The raw value for the cell.

            row (object, optional):
                The data for the whole row.

        Returns:
            django.utils.safestring.SafeString:
            The rendered cell content.
        """
        return format_html('{}', column.format_content(value, row))

    def __repr__(self) -> str:
        return '<%s(renderer_id=%r)>' % (type(self).__name__,
                                         self.renderer_id)


class DefaultColumnRenderer(ColumnRenderer):
    """The renderer used for columns that don't specify one."""

    renderer_id = DEFAULT_RENDERER_ID


class RendererRef:
    """A reference to a column renderer.

    This is either a :py:class:`RendererById` or a
    :py:class:`RendererByInstance`.
    """

    @staticmethod
    def from_value(
        value: Union[str, ColumnRenderer, RendererRef],
    ) -> RendererRef:
        """Return a renderer reference for a value.

        Args:
            value (str or ColumnRenderer or RendererRef):
                A renderer ID, a renderer, or an existing reference.

        Returns:
            RendererRef:
            The renderer reference.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                The value was not a renderer ID or a renderer.
        """
        if isinstance(value, RendererRef):
            return value
        elif isinstance(value, str):
            return RendererById(value)
        elif isinstance(value, ColumnRenderer):
            return RendererByInstance(value)

        raise InvalidArgumentError(
            _('Renderer can only be a string ID or a renderer object, not '
              '%r.')
            % (value,))

    @property
    def value(self) -> Union[str, ColumnRenderer]:
        """The renderer ID or renderer instance.

        Type:
            str or ColumnRenderer
        """
        raise NotImplementedError

    def resolve(
        self,
        registry: Optional[ColumnRendererRegistry] = None,
    ) -> ColumnRenderer:
        """Return the renderer being referenced.

        Args:
            registry (ColumnRendererRegistry, optional):
                The registry used to look up renderer IDs. Defaults to
                :py:data:`column_renderer_registry`.

        Returns:
            ColumnRenderer:
            The renderer.

        Raises:
            djgrid.registries.errors.ItemLookupError:
                No renderer is registered with the ID.
        """
        raise NotImplementedError


@dataclass(frozen=True)
class RendererById(RendererRef):
    """A reference to a registered renderer, by ID."""

    #: The ID of the renderer.
    renderer_id: str

    @property
    def value(self) -> str:
        return self.renderer_id

    def resolve(self, registry=None):
        if registry is None:
            registry = column_renderer_registry

        return registry.get_renderer(self.renderer_id)


@dataclass(frozen=True)
class RendererByInstance(RendererRef):
    """A reference to a renderer instance."""

    #: The renderer.
    renderer: ColumnRenderer

    @property
    def value(self) -> ColumnRenderer:
        return self.renderer

    def resolve(self, registry=None):
        return self.renderer


class ColumnRendererRegistry(EntryPointRegistry[ColumnRenderer]):
    """A registry of column renderers, keyed by ID.

    The registry is populated with :py:class:`DefaultColumnRenderer` and any
    renderers provided through the ``djgrid.column_renderers`` entry point
    group. Entry points may refer to renderer classes or instances.
    """

    entry_point = 'djgrid.column_renderers'
    item_name = 'column renderer'
    lookup_attrs = ('renderer_id',)

    errors = {
        NOT_REGISTERED: gettext_lazy(
            'No column renderer is registered with ID "%(attr_value)s".'
        ),
    }

    def get_defaults(self) -> Iterable[ColumnRenderer]:
        """Return the default renderers.

        Yields:
            ColumnRenderer:
            Each default renderer.
        """
        yield DefaultColumnRenderer()
        yield from super().get_defaults()

    def process_value_from_entry_point(self, entry_point):
        value = entry_point.load()

        if isinstance(value, type):
            value = value()

        logger.debug('Loaded column renderer %r from entry point %s',
                     value, entry_point.name)

        return value

    def get_renderer(
        self,
        renderer_id: str,
    ) -> ColumnRenderer:
        """Return a renderer by ID.

        Args:
            renderer_id (str):
                The ID of the renderer.

        Returns:
            ColumnRenderer:
            The renderer.

        Raises:
            djgrid.registries.errors.ItemLookupError:
                No renderer is registered with the ID.
        """
        return self.get('renderer_id', renderer_id)


#: The registry of column renderers.
column_renderer_registry = ColumnRendererRegistry()
