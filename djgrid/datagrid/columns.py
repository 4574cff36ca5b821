"""Columns for datagrids.

A column describes how one field of a row is displayed, sorted and
filtered. Columns are created standalone and added to a
:py:class:`~djgrid.datagrid.grids.DataGrid` later::

    datagrid = DataGrid(request=request, queryset=User.objects.all())

    column = datagrid.add_column('username', TextColumn(_('Username')))
    column.add_filter()
    column.add_default_sorting('ASC')

Once added, a column is *attached* to the datagrid. Anything that needs the
datagrid, such as translating the caption, building links, or changing the
datagrid's default sorting and filtering, requires the column to be
attached first.
"""

from __future__ import annotations

import logging
import re
from typing import (Any, Callable, Dict, List, Optional, Pattern, Tuple,
                    Union)

import pytz
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.db.models import QuerySet
from django.forms.utils import flatatt
from django.template.defaultfilters import date, floatformat
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe
from django.utils.text import Truncator
from django.utils.translation import gettext as _
from typing_extensions import TypeAlias

from djgrid.datagrid.codec import normalize_sort_direction
from djgrid.datagrid.components import Component
from djgrid.datagrid.errors import (AttachmentError, InvalidArgumentError,
                                    NotAttachedError)
from djgrid.datagrid.filters import (CheckboxFilter, ColumnFilter,
                                     DateFilter, FilterRegistry,
                                     SelectboxFilter, SelectboxItems,
                                     TextFilter)
from djgrid.datagrid.grids import DataGrid
from djgrid.datagrid.renderers import (ColumnRenderer,
                                       DEFAULT_RENDERER_ID,
                                       RendererById,
                                       RendererRef)
from djgrid.datagrid.signals import column_attached
from djgrid.util.typing import StrOrPromise


logger = logging.getLogger(__name__)


#: A function used to transform a cell's value before display.
#:
#: This takes the value and the row data, and returns the new value.
FormatCallback: TypeAlias = Callable[[Any, Any], Any]

#: A pattern for a value replacement.
#:
#: A compiled regex is substituted anywhere in the value. A string replaces
#: the value only when the value matches it exactly.
ReplacementPattern: TypeAlias = Union[str, Pattern[str]]


#: The default maximum number of characters displayed in a cell.
DEFAULT_MAX_LENGTH = 100


class HtmlPrototype:
    """A template for an HTML element.

    This is used for column captions and for the header and cell elements
    of a column. Attributes can be changed before the element is rendered.
    An element without a tag name renders only its content.
    """

    ######################
    # Instance variables #
    ######################

    #: The attributes of the element.
    #:
    #: Type:
    #:     dict
    attrs: Dict[str, Any]

    #: The text content of the element.
    #:
    #: This is escaped when rendered.
    #:
    #: Type:
    #:     str
    content: StrOrPromise

    #: The tag name of the element.
    #:
    #: Type:
    #:     str
    tag_name: str

    def __init__(
        self,
        tag_name: str = '',
        content: StrOrPromise = '',
        **attrs,
    ) -> None:
        """Initialize the element.

        Args:
            tag_name (str, optional):
                The tag name of the element.

            content (str, optional):
                The text content of the element.

            **attrs (dict):
                The attributes of the element.
        """
        self.tag_name = tag_name
        self.content = content
        self.attrs = attrs

    @property
    def title(self) -> Optional[StrOrPromise]:
        """The value of the ``title`` attribute.

        Type:
            str
        """
        return self.attrs.get('title')

    def set(
        self,
        name: str,
        value: Any,
    ) -> HtmlPrototype:
        """Set an attribute.

        Args:
            name (str):
                The name of the attribute.

            value (object):
                The value of the attribute. ``None`` removes the attribute.

        Returns:
            HtmlPrototype:
            This element, for chaining.
        """
        if value is None:
            self.attrs.pop(name, None)
        else:
            self.attrs[name] = value

        return self

    def copy(self) -> HtmlPrototype:
        """Return a copy of the element.

        Returns:
            HtmlPrototype:
            The new element.
        """
        return HtmlPrototype(self.tag_name, self.content, **self.attrs)

    def render(self) -> SafeString:
        """Render the element.

        Returns:
            django.utils.safestring.SafeString:
            The rendered HTML.
        """
        if not self.tag_name:
            return conditional_escape(self.content)

        return format_html('<{0}{1}>{2}</{0}>',
                           self.tag_name,
                           flatatt(self.attrs),
                           self.content)

    def __html__(self) -> SafeString:
        return self.render()

    def __str__(self) -> str:
        return self.render()

    def __eq__(
        self,
        other: Any,
    ) -> bool:
        return (isinstance(other, HtmlPrototype) and
                self.tag_name == other.tag_name and
                self.content == other.content and
                self.attrs == other.attrs)

    def __repr__(self) -> str:
        return '<HtmlPrototype(tag_name=%r, attrs=%r)>' % (self.tag_name,
                                                          self.attrs)


class Column(Component):
    """Base class for a datagrid column.

    The base class implements attachment to the datagrid, caption and
    renderer handling, filter management, and the default sorting and
    filtering of the datagrid. Subclasses override :py:meth:`format_content`
    and :py:meth:`apply_filter` to format and filter their data.
    """

    #: The CSS class used for links that should be loaded through AJAX.
    #:
    #: Type:
    #:     str
    ajax_class: str = 'datagrid-ajax'

    ######################
    # Instance variables #
    ######################

    #: The caption shown in the column header.
    #:
    #: If not provided, this defaults to the column's name once attached.
    #:
    #: Type:
    #:     str or HtmlPrototype
    caption: Optional[Union[StrOrPromise, HtmlPrototype]]

    #: The template for the table cell element.
    #:
    #: Type:
    #:     HtmlPrototype
    cell: HtmlPrototype

    #: The name of the field containing the data for this column.
    #:
    #: This defaults to the column's name once attached.
    #:
    #: Type:
    #:     str
    field_name: Optional[str]

    #: The filter registry for the column.
    #:
    #: Type:
    #:     djgrid.datagrid.filters.FilterRegistry
    filters: FilterRegistry

    #: Functions applied, in order, to a cell's value before display.
    #:
    #: Type:
    #:     list of callable
    format_callback: List[FormatCallback]

    #: The template for the table header element.
    #:
    #: Type:
    #:     HtmlPrototype
    header: HtmlPrototype

    #: The maximum number of characters displayed in a cell.
    #:
    #: Type:
    #:     int
    max_length: int

    #: Whether the column can be sorted.
    #:
    #: Type:
    #:     bool
    orderable: bool

    #: The renderer for the column's cells.
    #:
    #: Type:
    #:     djgrid.datagrid.renderers.RendererRef
    renderer: RendererRef

    #: Replacements applied, in order, to a cell's displayed value.
    #:
    #: Type:
    #:     list of tuple
    replacement: List[Tuple[ReplacementPattern, str]]

    #: The datagrid this column is attached to.
    _datagrid: Optional[DataGrid]

    def __init__(
        self,
        caption: Optional[Union[StrOrPromise, HtmlPrototype]] = None,
        max_length: Optional[int] = None,
        field_name: Optional[str] = None,
    ) -> None:
        """Initialize the column.

        Args:
            caption (str or HtmlPrototype, optional):
                The caption shown in the column header.

            max_length (int, optional):
                The maximum number of characters displayed in a cell.
                Defaults to ``settings.DJGRID_DEFAULT_MAX_LENGTH``, or 100.

            field_name (str, optional):
                The name of the field containing the data for this column.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                ``max_length`` was not a positive integer.
        """
        super().__init__()

        if max_length is None:
            max_length = getattr(settings, 'DJGRID_DEFAULT_MAX_LENGTH',
                                 DEFAULT_MAX_LENGTH)

        if (not isinstance(max_length, int) or
            isinstance(max_length, bool) or
            max_length <= 0):
            raise InvalidArgumentError(
                _('The maximum length must be a positive integer, not %r.')
                % (max_length,))

        self.caption = caption
        self.max_length = max_length
        self.field_name = field_name
        self.header = HtmlPrototype()
        self.cell = HtmlPrototype()
        self.filters = FilterRegistry(self)
        self.format_callback = []
        self.replacement = []
        self.orderable = True
        self.renderer = RendererById(DEFAULT_RENDERER_ID)
        self._datagrid = None

        self.monitor(DataGrid)

    def attached(
        self,
        ancestor: Component,
    ) -> None:
        """Handle being attached to a datagrid.

        This binds the column to the datagrid and fills in the caption and
        field name if they weren't provided.

        Args:
            ancestor (djgrid.datagrid.components.Component):
                The ancestor that was found.

        Raises:
            djgrid.datagrid.errors.AttachmentError:
                The column is already attached to another datagrid.
        """
        if not isinstance(ancestor, DataGrid):
            return

        if self._datagrid is not None:
            if self._datagrid is ancestor:
                return

            raise AttachmentError(
                _('Column %(column)r is already attached to %(datagrid)r.')
                % {
                    'column': self,
                    'datagrid': self._datagrid,
                })

        old_caption = self.caption
        old_field_name = self.field_name

        self._datagrid = ancestor

        if self.caption is None:
            self.caption = self.name

        if self.field_name is None:
            self.field_name = self.name

        try:
            column_attached.send(sender=type(self),
                                 column=self,
                                 datagrid=ancestor)
        except Exception:
            # The datagrid won't keep the column, so it stays unbound.
            self._datagrid = None
            self.caption = old_caption
            self.field_name = old_field_name
            raise

    def get_owner(
        self,
        require: bool = True,
    ) -> Optional[DataGrid]:
        """Return the datagrid this column is attached to.

        Args:
            require (bool, optional):
                Whether to raise an exception if the column isn't attached.

        Returns:
            djgrid.datagrid.grids.DataGrid:
            The datagrid, or ``None`` if the column isn't attached and
            ``require`` is ``False``.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached, and ``require`` is ``True``.
        """
        if self._datagrid is None and require:
            raise NotAttachedError(
                _('Column %r is not attached to a datagrid.') % self)

        return self._datagrid

    get_datagrid = get_owner

    def get_header_prototype(self) -> HtmlPrototype:
        """Return the template for the table header element.

        Returns:
            HtmlPrototype:
            The header element template.
        """
        return self.header

    def get_cell_prototype(self) -> HtmlPrototype:
        """Return the template for the table cell element.

        Returns:
            HtmlPrototype:
            The cell element template.
        """
        return self.cell

    def get_caption(self) -> Union[str, HtmlPrototype]:
        """Return the translated caption.

        A plain caption is translated through the datagrid. An
        :py:class:`HtmlPrototype` caption with a ``title`` attribute is
        returned as a copy with the title translated.

        Returns:
            str or HtmlPrototype:
            The translated caption.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        datagrid = self.get_owner()
        caption = self.caption

        if isinstance(caption, HtmlPrototype):
            if caption.title:
                return caption.copy().set('title',
                                          datagrid.translate(caption.title))

            return caption

        return datagrid.translate(caption)

    def is_orderable(self) -> bool:
        """Return whether the column can be sorted.

        Returns:
            bool:
            ``True`` if the column can be sorted.
        """
        return self.orderable

    def get_order_link(
        self,
        direction: Optional[str] = None,
    ) -> str:
        """Return the link used to sort the datagrid by this column.

        Args:
            direction (str, optional):
                The sort direction (``a`` or ``d``). ``None`` clears
                sorting by this column.

        Returns:
            str:
            The link.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                The direction is not valid.

            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        if direction is not None:
            direction = normalize_sort_direction(direction)

        return self.get_owner().link('order', {
            'by': self.name,
            'dir': direction,
        })

    def has_filter(self) -> bool:
        """Return whether the column has a filter.

        Returns:
            bool:
            ``True`` if the column has a filter.
        """
        return self.filters.has()

    def get_filter(
        self,
        require: bool = True,
    ) -> Optional[ColumnFilter]:
        """Return the column's filter.

        Args:
            require (bool, optional):
                Whether to raise an exception if there's no filter.

        Returns:
            djgrid.datagrid.filters.ColumnFilter:
            The filter, or ``None`` if there's no filter and ``require`` is
            ``False``.

        Raises:
            djgrid.datagrid.errors.NoFilterError:
                There's no filter, and ``require`` is ``True``.
        """
        return self.filters.get(require)

    def format_content(
        self,
        value: Any,
        row: Any = None,
    ) -> str:
        """Format the content of a cell.

        By default, this converts the value to a string. ``None`` becomes
        an empty string. Subclasses can override this to customize
        formatting.

        Args:
            value (object):
                The raw value for the cell.

            row (object, optional):
                The data for the whole row.

        Returns:
            str:
            The formatted content.
        """
        if value is None:
            return ''

        return str(value)

    def apply_filter(
        self,
        value: Any,
    ) -> None:
        """Narrow the datagrid's data source by a filter value.

        By default, this does nothing. Subclasses can override this to
        narrow :py:attr:`DataGrid.data_source
        <djgrid.datagrid.grids.DataGrid.data_source>`.

        Args:
            value (object):
                The filter value.
        """
        pass

    def get_renderer(self) -> Union[str, ColumnRenderer]:
        """Return the renderer for the column.

        Returns:
            str or djgrid.datagrid.renderers.ColumnRenderer:
            The renderer ID, or the renderer itself.
        """
        return self.renderer.value

    def set_renderer(
        self,
        renderer: Union[str, ColumnRenderer, RendererRef],
    ) -> Column:
        """Set the renderer for the column.

        Args:
            renderer (str or djgrid.datagrid.renderers.ColumnRenderer):
                The ID of a registered renderer, or a renderer.

        Returns:
            Column:
            This column, for chaining.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                The renderer was not a string or a renderer.
        """
        self.renderer = RendererRef.from_value(renderer)

        return self

    def resolve_renderer(self) -> ColumnRenderer:
        """Return the renderer instance for the column.

        Returns:
            djgrid.datagrid.renderers.ColumnRenderer:
            The renderer.

        Raises:
            djgrid.registries.errors.ItemLookupError:
                The renderer ID is not registered.
        """
        return self.renderer.resolve()

    def add_format_callback(
        self,
        callback: FormatCallback,
    ) -> Column:
        """Add a function used to transform values before display.

        Args:
            callback (callable):
                A function taking the value and row data, and returning the
                new value.

        Returns:
            Column:
            This column, for chaining.
        """
        self.format_callback.append(callback)

        return self

    def add_replacement(
        self,
        pattern: ReplacementPattern,
        replacement: str,
    ) -> Column:
        """Add a replacement for displayed values.

        Args:
            pattern (str or re.Pattern):
                A compiled regex to substitute, or a string to match the
                whole value against.

            replacement (str):
                The replacement text.

        Returns:
            Column:
            This column, for chaining.
        """
        self.replacement.append((pattern, replacement))

        return self

    def add_default_sorting(
        self,
        order: str = 'ASC',
    ) -> Column:
        """Add this column to the datagrid's default sorting.

        Args:
            order (str, optional):
                The sort order. This is one of ``ASC``, ``DESC``, ``A`` or
                ``D``, in any case.

        Returns:
            Column:
            This column, for chaining.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                The sort order is not valid.

            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        direction = normalize_sort_direction(order)
        self.get_owner().update_state('default_order', self.name,
                                      value=direction)

        return self

    def remove_default_sorting(self) -> Column:
        """Remove this column from the datagrid's default sorting.

        This does nothing if the column isn't in the default sorting.

        Returns:
            Column:
            This column, for chaining.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        self.get_owner().update_state('default_order', self.name,
                                      remove=True)

        return self

    def add_default_filtering(
        self,
        value: str,
    ) -> Column:
        """Set the datagrid's default filter value for this column.

        Args:
            value (str):
                The filter value. This may be empty.

        Returns:
            Column:
            This column, for chaining.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        self.get_owner().update_state('default_filters', self.name,
                                      value=str(value))

        return self

    def remove_default_filtering(self) -> Column:
        """Remove the datagrid's default filter value for this column.

        This does nothing if there's no default filter value for the column.

        Returns:
            Column:
            This column, for chaining.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        self.get_owner().update_state('default_filters', self.name,
                                      remove=True)

        return self

    def add_filter(self) -> TextFilter:
        """Add a text filter to the column.

        This is an alias for :py:meth:`add_text_filter`.

        Returns:
            djgrid.datagrid.filters.TextFilter:
            The new filter.
        """
        return self.add_text_filter()

    def add_text_filter(self) -> TextFilter:
        """Add a single-line text filter to the column.

        Any existing filter is replaced.

        Returns:
            djgrid.datagrid.filters.TextFilter:
            The new filter.
        """
        return self.filters.set(TextFilter())

    def add_date_filter(self) -> DateFilter:
        """Add a date filter to the column.

        Any existing filter is replaced.

        Returns:
            djgrid.datagrid.filters.DateFilter:
            The new filter.
        """
        return self.filters.set(DateFilter())

    def add_checkbox_filter(self) -> CheckboxFilter:
        """Add a check box filter to the column.

        Any existing filter is replaced.

        Returns:
            djgrid.datagrid.filters.CheckboxFilter:
            The new filter.
        """
        return self.filters.set(CheckboxFilter())

    def add_selectbox_filter(
        self,
        items: Optional[SelectboxItems] = None,
        first_empty: bool = True,
        translate_items: bool = True,
    ) -> SelectboxFilter:
        """Add a select box filter to the column.

        Any existing filter is replaced.

        Args:
            items (list or dict, optional):
                The items to choose from.

            first_empty (bool, optional):
                Whether to offer an empty item first.

            translate_items (bool, optional):
                Whether item labels are translated through the datagrid.

        Returns:
            djgrid.datagrid.filters.SelectboxFilter:
            The new filter.
        """
        column_filter = self.filters.set(SelectboxFilter(items, first_empty))

        return column_filter.set_translate_items(translate_items)

    def _narrow_data_source(
        self,
        column_filter: ColumnFilter,
        value: Any,
    ) -> None:
        """Narrow the datagrid's data source using a filter.

        Args:
            column_filter (djgrid.datagrid.filters.ColumnFilter):
                The filter to apply.

            value (object):
                The filter value.

        Raises:
            django.core.exceptions.ValidationError:
                The value was not valid for the filter.
        """
        datagrid = self.get_owner()

        datagrid.data_source = column_filter.apply(
            self._get_data_source(datagrid),
            self.field_name,
            value)

    def _get_data_source(
        self,
        datagrid: DataGrid,
    ) -> QuerySet:
        """Return the queryset a filter should narrow.

        Outside of :py:meth:`DataGrid.get_queryset()
        <djgrid.datagrid.grids.DataGrid.get_queryset>`, this starts from the
        datagrid's queryset.

        Args:
            datagrid (djgrid.datagrid.grids.DataGrid):
                The datagrid the column is attached to.

        Returns:
            django.db.models.query.QuerySet:
            The queryset to narrow.

        Raises:
            django.core.exceptions.ImproperlyConfigured:
                The datagrid has neither a data source nor a queryset.
        """
        if datagrid.data_source is None:
            if datagrid.queryset is None:
                raise ImproperlyConfigured(
                    'DataGrid %r does not have a queryset.' % datagrid.id)

            datagrid.data_source = datagrid.queryset.all()

        return datagrid.data_source

    def __repr__(self) -> str:
        return '<%s(name=%r)>' % (type(self).__name__, self.name)


class TextColumn(Column):
    """A column displaying text.

    Values are formatted in three steps: :py:attr:`format_callback`
    functions are run first, then :py:attr:`replacement` pairs are applied,
    and finally the text is truncated to :py:attr:`max_length`.
    """

    #: The filter used when the column doesn't have one.
    default_filter_class = TextFilter

    def format_content(
        self,
        value: Any,
        row: Any = None,
    ) -> str:
        """Format the content of a cell.

        Args:
            value (object):
                The raw value for the cell.

            row (object, optional):
                The data for the whole row.

        Returns:
            str:
            The formatted content.
        """
        for callback in self.format_callback:
            value = callback(value, row)

        text = self.format_value(value)

        for pattern, replacement in self.replacement:
            if isinstance(pattern, str):
                if text == pattern:
                    text = replacement
            else:
                text = pattern.sub(replacement, text)

        return Truncator(text).chars(self.max_length)

    def format_value(
        self,
        value: Any,
    ) -> str:
        """Convert a value to text, after callbacks have been run.

        Args:
            value (object):
                The value to convert.

        Returns:
            str:
            The text.
        """
        return super().format_content(value)

    def apply_filter(
        self,
        value: Any,
    ) -> None:
        """Narrow the datagrid's data source by a filter value.

        The column's filter is used, or :py:attr:`default_filter_class` if
        there's no filter.

        Args:
            value (object):
                The filter value.

        Raises:
            django.core.exceptions.ValidationError:
                The value was not valid for the filter.

            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        column_filter = (self.get_filter(require=False) or
                         self.default_filter_class())
        self._narrow_data_source(column_filter, value)


class NumericColumn(TextColumn):
    """A column displaying numbers.

    Filter values may start with a comparison operator (``<``, ``<=``,
    ``>``, ``>=``, ``=`` or ``<>``). Without one, values must match exactly.
    """

    _filter_re = re.compile(r'^\s*(<=|>=|<>|<|>|=)?\s*(-?\d+(?:\.\d+)?)\s*$')

    _lookups = {
        '<': 'lt',
        '<=': 'lte',
        '>': 'gt',
        '>=': 'gte',
        '=': 'exact',
        '<>': 'exact',
    }

    ######################
    # Instance variables #
    ######################

    #: The number of decimal places shown.
    #:
    #: Type:
    #:     int
    precision: int

    def __init__(
        self,
        caption: Optional[Union[StrOrPromise, HtmlPrototype]] = None,
        precision: int = 2,
        *args,
        **kwargs,
    ) -> None:
        """Initialize the column.

        Args:
            caption (str or HtmlPrototype, optional):
                The caption shown in the column header.

            precision (int, optional):
                The number of decimal places shown.

            *args (tuple):
                Additional positional arguments for the column.

            **kwargs (dict):
                Additional keyword arguments for the column.
        """
        super().__init__(caption, *args, **kwargs)

        self.precision = precision

    def format_value(self, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return floatformat(value, self.precision)

        return super().format_value(value)

    def apply_filter(
        self,
        value: Any,
    ) -> None:
        """Narrow the datagrid's data source by a numeric comparison.

        Args:
            value (object):
                The filter value, such as ``>= 10``. An empty value does no
                filtering.

        Raises:
            django.core.exceptions.ValidationError:
                The value was not a valid comparison.

            djgrid.datagrid.errors.NotAttachedError:
                The column isn't attached.
        """
        datagrid = self.get_owner()

        if value is None or str(value).strip() == '':
            return

        m = self._filter_re.match(str(value))

        if not m:
            raise ValidationError(
                _('"%s" is not a valid numeric filter.') % value,
                code='invalid')

        operator = m.group(1) or '='
        lookup = {
            '%s__%s' % (self.field_name, self._lookups[operator]):
                m.group(2),
        }

        data_source = self._get_data_source(datagrid)

        if operator == '<>':
            datagrid.data_source = data_source.exclude(**lookup)
        else:
            datagrid.data_source = data_source.filter(**lookup)


class DateColumn(TextColumn):
    """A column displaying dates.

    Timezone-aware date/times are converted to the column's timezone before
    being formatted.
    """

    default_filter_class = DateFilter

    def __init__(
        self,
        caption: Optional[Union[StrOrPromise, HtmlPrototype]] = None,
        format: str = 'Y-m-d',
        timezone: Any = pytz.utc,
        *args,
        **kwargs,
    ) -> None:
        """Initialize the column.

        Args:
            caption (str or HtmlPrototype, optional):
                The caption shown in the column header.

            format (str, optional):
                The format used to show the date, in Django's
                :ttag:`date` filter syntax.

            timezone (object, optional):
                The timezone used to normalize the date/time to.

            *args (tuple):
                Additional positional arguments for the column.

            **kwargs (dict):
                Additional keyword arguments for the column.
        """
        super().__init__(caption, *args, **kwargs)

        self.format = format
        self.timezone = timezone

    def format_value(self, value):
        if value is None or value == '':
            return ''

        # If the datetime object is tz aware, convert it to local time.
        if getattr(value, 'tzinfo', None) is not None and settings.USE_TZ:
            value = value.astimezone(self.timezone)

        return date(value, self.format)


class CheckboxColumn(TextColumn):
    """A column displaying a boolean as a check box."""

    default_filter_class = CheckboxFilter

    def format_content(
        self,
        value: Any,
        row: Any = None,
    ) -> str:
        """Format the content of a cell as a disabled check box.

        Args:
            value (object):
                The raw value for the cell.

            row (object, optional):
                The data for the whole row.

        Returns:
            django.utils.safestring.SafeString:
            The check box HTML.
        """
        for callback in self.format_callback:
            value = callback(value, row)

        if value:
            checked = mark_safe(' checked="checked"')
        else:
            checked = ''

        return format_html('<input type="checkbox" disabled="disabled"{0} />',
                           checked)
