"""The datagrid owning a set of columns.

A :py:class:`DataGrid` holds its columns, translates their captions, builds
links for sorting, and stores the default sorting and filtering state.
That state is kept as two query strings (see
:py:mod:`djgrid.datagrid.codec`), so it can be stored or pre-seeded from a
URL as-is.

The datagrid can also apply the default state to a queryset through
:py:meth:`DataGrid.get_queryset`.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import (Any, Callable, List, Mapping, Optional, TYPE_CHECKING,
                    Tuple)

from django.core.exceptions import FieldError, ImproperlyConfigured
from django.db.models import QuerySet
from django.http import QueryDict
from django.utils.translation import gettext, gettext as _
from typing_extensions import Final

from djgrid.datagrid.codec import (SORT_ASCENDING, SORT_DESCENDING,
                                   StateMap, decode_state, update_state)
from djgrid.datagrid.components import Container
from djgrid.datagrid.errors import InvalidArgumentError
from djgrid.datagrid.signals import default_state_changed

if TYPE_CHECKING:
    from django.http import HttpRequest
    from django.utils.safestring import SafeString

    from djgrid.datagrid.columns import Column
    from djgrid.util.typing import StrOrPromise


logger = logging.getLogger(__name__)


#: The names of the state fields that can be changed by
#: :py:meth:`DataGrid.update_state`.
STATE_FIELDS: Final[Tuple[str, ...]] = ('default_order', 'default_filters')


class DataGrid(Container):
    """A datagrid owning a set of columns.

    Columns are added through :py:meth:`add_column`, which names the column
    and attaches it to the datagrid.

    The default sorting and filtering state can be changed from multiple
    threads. All changes go through :py:attr:`state_lock`.
    """

    ######################
    # Instance variables #
    ######################

    #: The working queryset while default filters are being applied.
    #:
    #: Columns narrow this in
    #: :py:meth:`Column.apply_filter()
    #: <djgrid.datagrid.columns.Column.apply_filter>`.
    #:
    #: Type:
    #:     django.db.models.query.QuerySet
    data_source: Optional[QuerySet]

    #: The ID of the datagrid.
    #:
    #: This is used as a prefix for query arguments in links.
    #:
    #: Type:
    #:     str
    id: str

    #: The queryset of objects shown in the datagrid.
    #:
    #: Type:
    #:     django.db.models.query.QuerySet
    queryset: Optional[QuerySet]

    #: The HTTP request being handled.
    #:
    #: Type:
    #:     django.http.HttpRequest
    request: Optional[HttpRequest]

    #: A lock serializing changes to the default sorting and filtering.
    #:
    #: Type:
    #:     threading.RLock
    state_lock: RLock

    #: The function used to translate text.
    #:
    #: Type:
    #:     callable
    translator: Callable[[str], str]

    _default_filters: str
    _default_order: str

    def __init__(
        self,
        request: Optional[HttpRequest] = None,
        queryset: Optional[QuerySet] = None,
        translator: Optional[Callable[[str], str]] = None,
        default_order: str = '',
        default_filters: str = '',
        grid_id: str = 'datagrid',
    ) -> None:
        """Initialize the datagrid.

        Args:
            request (django.http.HttpRequest, optional):
                The HTTP request being handled. This is used to keep
                unrelated query arguments in links.

            queryset (django.db.models.QuerySet, optional):
                The queryset of objects shown in the datagrid.

            translator (callable, optional):
                The function used to translate text. Defaults to
                :py:func:`~django.utils.translation.gettext`.

            default_order (str, optional):
                The encoded default sorting.

            default_filters (str, optional):
                The encoded default filtering.

            grid_id (str, optional):
                The ID of the datagrid.
        """
        super().__init__()

        self.request = request
        self.queryset = queryset
        self.translator = translator or gettext
        self.id = grid_id
        self.data_source = None
        self.state_lock = RLock()
        self._default_order = default_order or ''
        self._default_filters = default_filters or ''

    @property
    def default_order(self) -> str:
        """The encoded default sorting.

        This maps column names to ``a`` (ascending) or ``d`` (descending).

        Type:
            str
        """
        with self.state_lock:
            return self._default_order

    @default_order.setter
    def default_order(
        self,
        value: str,
    ) -> None:
        with self.state_lock:
            self._default_order = value or ''

    @property
    def default_filters(self) -> str:
        """The encoded default filtering.

        This maps column names to filter values.

        Type:
            str
        """
        with self.state_lock:
            return self._default_filters

    @default_filters.setter
    def default_filters(
        self,
        value: str,
    ) -> None:
        with self.state_lock:
            self._default_filters = value or ''

    def add_column(
        self,
        name: str,
        column: Column,
    ) -> Column:
        """Add a column to the datagrid.

        Args:
            name (str):
                The unique name of the column.

            column (djgrid.datagrid.columns.Column):
                The column to add.

        Returns:
            djgrid.datagrid.columns.Column:
            The column, for chaining.

        Raises:
            djgrid.datagrid.errors.AttachmentError:
                The name is already used, or the column belongs to another
                datagrid.
        """
        self.add_component(column, name)

        return column

    def get_column(
        self,
        name: str,
        require: bool = True,
    ) -> Optional[Column]:
        """Return a column by name.

        Args:
            name (str):
                The name of the column.

            require (bool, optional):
                Whether to raise an exception if the column isn't found.

        Returns:
            djgrid.datagrid.columns.Column:
            The column, or ``None`` if not found and ``require`` is
            ``False``.

        Raises:
            KeyError:
                The column was not found, and ``require`` is ``True``.
        """
        return self.get_component(name, require)  # type: ignore

    def get_columns(self) -> List[Column]:
        """Return all columns, in the order they were added.

        Returns:
            list of djgrid.datagrid.columns.Column:
            The columns.
        """
        return self.get_components()  # type: ignore

    def remove_column(
        self,
        name: str,
    ) -> None:
        """Remove a column from the datagrid.

        The column stays bound to this datagrid, and can't be added to
        another one.

        Args:
            name (str):
                The name of the column.

        Raises:
            KeyError:
                The column was not found.
        """
        column = self.get_component(name)
        assert column is not None

        self.remove_component(column)

    def translate(
        self,
        text: Optional[StrOrPromise],
    ) -> str:
        """Translate text.

        Args:
            text (str):
                The text to translate. ``None`` is treated as an empty
                string.

        Returns:
            str:
            The translated text.
        """
        if text is None or text == '':
            return ''

        return self.translator(str(text))

    def link(
        self,
        signal: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Return a link for a datagrid action.

        The action and its parameters are prefixed with the datagrid's ID.
        Query arguments from the request not belonging to this datagrid are
        kept. Parameters set to ``None`` are left out.

        Args:
            signal (str):
                The name of the action, such as ``order``.

            params (dict, optional):
                Parameters for the action.

        Returns:
            str:
            The link, as a query string starting with ``?``.
        """
        prefix = '%s-' % self.id

        if self.request is not None:
            query = self.request.GET.copy()

            for key in list(query.keys()):
                if key.startswith(prefix):
                    del query[key]
        else:
            query = QueryDict(mutable=True)

        query['%sdo' % prefix] = signal

        for key, value in (params or {}).items():
            if value is not None:
                query['%s%s' % (prefix, key)] = str(value)

        return '?%s' % query.urlencode()

    def update_state(
        self,
        field: str,
        key: str,
        value: Optional[str] = None,
        remove: bool = False,
    ) -> str:
        """Change one entry of the default sorting or filtering.

        The state is read, decoded, changed, encoded and written back while
        holding :py:attr:`state_lock`. If any step fails, or a receiver of
        :py:data:`~djgrid.datagrid.signals.default_state_changed` raises,
        the state is left unchanged.

        Args:
            field (str):
                The state field to change. This is either
                ``default_order`` or ``default_filters``.

            key (str):
                The column name to change.

            value (str, optional):
                The new value. This is required unless removing.

            remove (bool, optional):
                Whether to remove the entry instead.

        Returns:
            str:
            The new encoded state.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                The field or the arguments were not valid.
        """
        if field not in STATE_FIELDS:
            raise InvalidArgumentError(
                _('"%(field)s" is not a datagrid state field. It must be one '
                  'of: %(fields)s.')
                % {
                    'field': field,
                    'fields': ', '.join(STATE_FIELDS),
                })

        if not remove and value is None:
            raise InvalidArgumentError(
                _('A value is required when changing "%s".') % field)

        with self.state_lock:
            old_value = getattr(self, field)
            new_value = update_state(old_value, key,
                                     new_value=value,
                                     remove=remove)

            if new_value != old_value:
                setattr(self, field, new_value)

                try:
                    default_state_changed.send(sender=type(self),
                                               datagrid=self,
                                               field=field,
                                               old_value=old_value,
                                               new_value=new_value)
                except Exception:
                    # A receiver failed, so the change is abandoned.
                    setattr(self, field, old_value)
                    raise

                logger.debug('Changed %s for datagrid %r from %r to %r',
                             field, self.id, old_value, new_value)

        return new_value

    def get_sort_list(self) -> List[Tuple[str, str]]:
        """Return the decoded default sorting.

        Returns:
            list of tuple:
            A list of ``(column_name, direction)`` pairs, in priority order.
        """
        return list(decode_state(self.default_order).items())

    def get_filter_values(self) -> StateMap:
        """Return the decoded default filtering.

        Returns:
            dict:
            A mapping of column names to filter values.
        """
        return decode_state(self.default_filters)

    def get_queryset(self) -> QuerySet:
        """Return the queryset with default filtering and sorting applied.

        Each default filter value is passed to the matching column's
        :py:meth:`~djgrid.datagrid.columns.Column.apply_filter`. Errors in
        columns are logged, and the filter is skipped. Unknown columns are
        logged and skipped, as are sort columns whose field can't be used for
        ordering.

        Returns:
            django.db.models.query.QuerySet:
            The resulting queryset.

        Raises:
            django.core.exceptions.ImproperlyConfigured:
                The datagrid doesn't have a queryset.
        """
        if self.queryset is None:
            raise ImproperlyConfigured(
                'DataGrid %r does not have a queryset.' % self.id)

        with self.state_lock:
            filter_values = decode_state(self._default_filters)
            sort_list = decode_state(self._default_order)

        request = self.request
        self.data_source = self.queryset.all()

        try:
            for name, value in filter_values.items():
                column = self.get_column(name, require=False)

                if column is None:
                    logger.error('Unknown column "%s" in the default filters '
                                 'for DataGrid %r',
                                 name, self.id,
                                 extra={'request': request})
                    continue

                try:
                    column.apply_filter(value)
                except Exception as e:
                    logger.exception('Error when calling apply_filter() for '
                                     'DataGrid Column %r: %s',
                                     column, e,
                                     extra={'request': request})

            queryset = self.data_source
            order_by: List[str] = []

            for name, direction in sort_list.items():
                column = self.get_column(name, require=False)

                if column is None or not column.is_orderable():
                    logger.error('Column "%s" in the default sorting for '
                                 'DataGrid %r does not exist or is not '
                                 'orderable',
                                 name, self.id,
                                 extra={'request': request})
                    continue

                if direction == SORT_ASCENDING:
                    sort_field = column.field_name
                elif direction == SORT_DESCENDING:
                    sort_field = '-%s' % column.field_name
                else:
                    logger.error('Invalid sort direction "%s" for column '
                                 '"%s" in DataGrid %r',
                                 direction, name, self.id,
                                 extra={'request': request})
                    continue

                try:
                    # Django checks the field when the ordering is added.
                    queryset.order_by(sort_field)
                except FieldError as e:
                    logger.error('Cannot sort DataGrid %r by column "%s": %s',
                                 self.id, name, e,
                                 extra={'request': request})
                    continue

                order_by.append(sort_field)

            if order_by:
                queryset = queryset.order_by(*order_by)

            return queryset
        finally:
            self.data_source = None

    def render_cell(
        self,
        column: Column,
        obj: Any,
    ) -> SafeString:
        """Render a cell for an object.

        The value is read from the object using the column's field name,
        and rendered by the column's renderer.

        Args:
            column (djgrid.datagrid.columns.Column):
                The column being rendered.

            obj (object):
                The object for the row. This may be a model instance or a
                dictionary.

        Returns:
            django.utils.safestring.SafeString:
            The rendered cell content.
        """
        field_name = column.field_name

        if isinstance(obj, Mapping):
            value = obj.get(field_name)
        else:
            value = getattr(obj, field_name, None)

        return column.resolve_renderer().render(column, value, obj)

    def __repr__(self) -> str:
        return '<%s(id=%r)>' % (type(self).__name__, self.id)
