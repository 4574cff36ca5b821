"""Filters for datagrid columns.

Each column can have at most one filter, which is an input used to narrow
down the rows shown in the datagrid. The filter is held by the column's
:py:class:`FilterRegistry`, which makes sure that adding a filter replaces
any existing one.
"""

from __future__ import annotations

import datetime
import logging
from threading import RLock
from typing import (Any, Dict, List, Mapping, Optional, Sequence,
                    TYPE_CHECKING, Tuple, Union)

from dateutil.parser import parse as parse_date
from django import forms
from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db.models import DateTimeField, QuerySet
from django.utils.translation import gettext as _
from typing_extensions import TypeAlias

from djgrid.datagrid.errors import InvalidArgumentError, NoFilterError

if TYPE_CHECKING:
    from djgrid.datagrid.columns import Column


logger = logging.getLogger(__name__)


#: Items for a select box, either as a list of values or a value-to-label
#: mapping.
SelectboxItems: TypeAlias = Union[Sequence[Any], Mapping[Any, Any]]


class ColumnFilter:
    """Base class for a column filter.

    Subclasses provide the Django form field used to clean the filter's
    input, and the queryset lookup that applies a cleaned value.
    """

    #: The identifier for the type of filter.
    #:
    #: Type:
    #:     str
    filter_type: str = 'text'

    ######################
    # Instance variables #
    ######################

    #: The column owning this filter.
    #:
    #: This is set when the filter is registered on the column.
    #:
    #: Type:
    #:     djgrid.datagrid.columns.Column
    column: Optional[Column]

    #: The current value of the filter.
    #:
    #: Type:
    #:     object
    value: Any

    def __init__(self) -> None:
        """Initialize the filter."""
        self.column = None
        self.value = None

    @property
    def name(self) -> Optional[str]:
        """The name of the filter.

        This is always the name of the owning column.

        Type:
            str
        """
        if self.column is None:
            return None

        return self.column.name

    def get_form_field(self) -> forms.Field:
        """Return the form field used for the filter's input.

        Returns:
            django.forms.Field:
            The form field.
        """
        return forms.CharField(required=False)

    def clean(
        self,
        value: Any,
    ) -> Any:
        """Return a cleaned version of a filter value.

        Args:
            value (object):
                The raw value, usually a string from a query string.

        Returns:
            object:
            The cleaned value.

        Raises:
            django.core.exceptions.ValidationError:
                The value was not valid for this filter.
        """
        return self.get_form_field().clean(value)

    def is_empty(
        self,
        value: Any,
    ) -> bool:
        """Return whether a cleaned value means "don't filter".

        Args:
            value (object):
                The cleaned value.

        Returns:
            bool:
            ``True`` if no filtering should be done.
        """
        return value is None or value == ''

    def get_lookup(
        self,
        queryset: QuerySet,
        field_name: str,
        value: Any,
    ) -> Dict[str, Any]:
        """Return the queryset lookup for a cleaned value.

        Args:
            queryset (django.db.models.query.QuerySet):
                The queryset that will be filtered.

            field_name (str):
                The name of the field to filter on.

            value (object):
                The cleaned value.

        Returns:
            dict:
            Keyword arguments for :py:meth:`QuerySet.filter()
            <django.db.models.query.QuerySet.filter>`.
        """
        return {
            field_name: value,
        }

    def apply(
        self,
        queryset: QuerySet,
        field_name: str,
        value: Any,
    ) -> QuerySet:
        """Narrow a queryset by a filter value.

        Args:
            queryset (django.db.models.query.QuerySet):
                The queryset to narrow.

            field_name (str):
                The name of the field to filter on.

            value (object):
                The raw filter value.

        Returns:
            django.db.models.query.QuerySet:
            The narrowed queryset, or the original if the value is empty.

        Raises:
            django.core.exceptions.ValidationError:
                The value was not valid for this filter.
        """
        cleaned = self.clean(value)
        self.value = cleaned

        if self.is_empty(cleaned):
            return queryset

        return queryset.filter(**self.get_lookup(queryset, field_name,
                                                 cleaned))

    def __repr__(self) -> str:
        return '<%s(name=%r)>' % (type(self).__name__, self.name)


class TextFilter(ColumnFilter):
    """A single-line text filter.

    Rows match if the field contains the text, ignoring case.
    """

    filter_type = 'text'

    def get_lookup(self, queryset, field_name, value):
        return {
            '%s__icontains' % field_name: value,
        }


class DateFilter(ColumnFilter):
    """A single-line date filter.

    Values may be in any format understood by :pypi:`python-dateutil`.
    Rows match if the field falls on that date.
    """

    filter_type = 'date'

    def get_form_field(self) -> forms.Field:
        """Return the form field used for the filter's input.

        Returns:
            django.forms.DateField:
            The form field.
        """
        return forms.DateField(required=False)

    def clean(
        self,
        value: Any,
    ) -> Optional[datetime.date]:
        """Return the date for a filter value.

        Args:
            value (object):
                A date, a datetime, or a string containing a date.

        Returns:
            datetime.date:
            The parsed date, or ``None`` for an empty value.

        Raises:
            django.core.exceptions.ValidationError:
                The value could not be parsed as a date.
        """
        if isinstance(value, datetime.datetime):
            return value.date()
        elif isinstance(value, datetime.date):
            return value
        elif not value:
            return None

        try:
            return parse_date(str(value)).date()
        except (OverflowError, ValueError):
            raise ValidationError(_('"%s" is not a valid date.') % value,
                                  code='invalid')

    def get_lookup(self, queryset, field_name, value):
        try:
            field = queryset.model._meta.get_field(field_name)
        except FieldDoesNotExist:
            field = None

        if isinstance(field, DateTimeField):
            field_name = '%s__date' % field_name

        return {
            field_name: value,
        }


class CheckboxFilter(ColumnFilter):
    """A check box filter.

    When checked, only rows where the field is true will match. When
    unchecked, no filtering takes place.
    """

    filter_type = 'checkbox'

    def get_form_field(self) -> forms.Field:
        """Return the form field used for the filter's input.

        Returns:
            django.forms.BooleanField:
            The form field.
        """
        return forms.BooleanField(required=False)

    def is_empty(self, value):
        return not value

    def get_lookup(self, queryset, field_name, value):
        return {
            field_name: True,
        }


class SelectboxFilter(ColumnFilter):
    """A select box filter.

    The select box offers a fixed set of items. By default, an empty item
    is offered first, which disables filtering, and item labels are
    translated through the datagrid.
    """

    filter_type = 'selectbox'

    ######################
    # Instance variables #
    ######################

    #: Whether an empty item is offered before the other items.
    #:
    #: Type:
    #:     bool
    first_empty: bool

    #: Whether item labels are translated through the datagrid.
    #:
    #: Type:
    #:     bool
    translate_items: bool

    #: The items, as a mapping of values to labels.
    _items: Dict[Any, Any]

    def __init__(
        self,
        items: Optional[SelectboxItems] = None,
        first_empty: bool = True,
    ) -> None:
        """Initialize the filter.

        Args:
            items (list or dict, optional):
                The items to choose from. A list uses each item as both
                value and label. A dictionary maps values to labels.

            first_empty (bool, optional):
                Whether to offer an empty item first.
        """
        super().__init__()

        if items is None:
            items = []

        if isinstance(items, Mapping):
            self._items = dict(items)
        else:
            self._items = {
                item: item
                for item in items
            }

        self.first_empty = first_empty
        self.translate_items = True

    @property
    def items(self) -> List[Any]:
        """The values that can be chosen, in order.

        If :py:attr:`first_empty` is set, this starts with an empty string.

        Type:
            list
        """
        items = list(self._items.keys())

        if self.first_empty:
            items.insert(0, '')

        return items

    def set_translate_items(
        self,
        translate_items: bool,
    ) -> SelectboxFilter:
        """Set whether item labels are translated.

        Args:
            translate_items (bool):
                Whether item labels are translated through the datagrid.

        Returns:
            SelectboxFilter:
            This filter, for chaining.
        """
        self.translate_items = translate_items

        return self

    def get_choices(self) -> List[Tuple[Any, str]]:
        """Return the choices for the select box.

        Returns:
            list of tuple:
            A list of ``(value, label)`` pairs.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                Labels need translating, but the column isn't attached to a
                datagrid.
        """
        if self.translate_items and self._items:
            assert self.column is not None
            translate = self.column.get_owner().translate
        else:
            translate = str

        choices: List[Tuple[Any, str]] = [
            (value, translate(label))
            for value, label in self._items.items()
        ]

        if self.first_empty:
            choices.insert(0, ('', ''))

        return choices

    def get_form_field(self) -> forms.Field:
        """Return the form field used for the filter's input.

        Returns:
            django.forms.TypedChoiceField:
            The form field.
        """
        values = {
            str(value): value
            for value in self._items
        }

        return forms.TypedChoiceField(
            choices=[
                (str(value), label)
                for value, label in self.get_choices()
            ],
            coerce=lambda value: values.get(value, value),
            empty_value='',
            required=False)


class FilterRegistry:
    """Holds the filter for a column.

    A column has at most one filter. Setting a new filter removes the
    previous one first.
    """

    ######################
    # Instance variables #
    ######################

    #: The column owning this registry.
    #:
    #: Type:
    #:     djgrid.datagrid.columns.Column
    column: Column

    #: The registered filter.
    _filter: Optional[ColumnFilter]

    #: A lock guarding filter replacement.
    _lock: RLock

    def __init__(
        self,
        column: Column,
    ) -> None:
        """Initialize the registry.

        Args:
            column (djgrid.datagrid.columns.Column):
                The column owning this registry.
        """
        self.column = column
        self._filter = None
        self._lock = RLock()

    def has(self) -> bool:
        """Return whether a filter is registered.

        Returns:
            bool:
            ``True`` if the column has a filter.
        """
        return self._filter is not None

    def get(
        self,
        require: bool = True,
    ) -> Optional[ColumnFilter]:
        """Return the registered filter.

        Args:
            require (bool, optional):
                Whether to raise an exception if there's no filter.

        Returns:
            ColumnFilter:
            The filter, or ``None`` if there's no filter and ``require`` is
            ``False``.

        Raises:
            djgrid.datagrid.errors.NoFilterError:
                There's no filter, and ``require`` is ``True``.
        """
        column_filter = self._filter

        if column_filter is None and require:
            raise NoFilterError(
                _('Column "%s" does not have a filter.')
                % (self.column.name or self.column))

        return column_filter

    def set(
        self,
        column_filter: ColumnFilter,
    ) -> ColumnFilter:
        """Register a filter, replacing any existing one.

        Args:
            column_filter (ColumnFilter):
                The filter to register.

        Returns:
            ColumnFilter:
            The registered filter.

        Raises:
            djgrid.datagrid.errors.InvalidArgumentError:
                The filter is not a :py:class:`ColumnFilter`, or it belongs
                to another column.
        """
        if not isinstance(column_filter, ColumnFilter):
            raise InvalidArgumentError(
                _('%r is not a column filter.') % (column_filter,))

        with self._lock:
            owner = column_filter.column

            if owner is not None and owner is not self.column:
                raise InvalidArgumentError(
                    _('%(filter)r already belongs to column %(column)r.')
                    % {
                        'column': owner,
                        'filter': column_filter,
                    })

            if self._filter is not None:
                logger.debug('Replacing filter %r on column %r',
                             self._filter, self.column)
                self.remove()

            column_filter.column = self.column
            self._filter = column_filter

        return column_filter

    def remove(self) -> None:
        """Remove the registered filter.

        This does nothing if there's no filter.
        """
        with self._lock:
            column_filter = self._filter

            if column_filter is not None:
                column_filter.column = None
                self._filter = None

    def __len__(self) -> int:
        """Return the number of registered filters.

        Returns:
            int:
            Either 0 or 1.
        """
        return int(self._filter is not None)

    def __iter__(self):
        """Iterate through the registered filters.

        Yields:
            ColumnFilter:
            The registered filter, if any.
        """
        if self._filter is not None:
            yield self._filter
