"""Encoding of a datagrid's default sorting and filtering state.

A datagrid stores its default sort order and default filter values as
query strings, keyed by column name::

    default_order = 'age=d&name=a'
    default_filters = 'status=open&title=foo+bar'

This format is stable, so that callers can pre-seed the state from a URL.
The functions here convert between these strings and ordered
dictionaries. They don't touch any datagrid, so they can be used and tested
on their own.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from django.http import QueryDict
from django.utils.http import urlencode
from django.utils.translation import gettext as _
from typing_extensions import Final, TypeAlias

from djgrid.datagrid.errors import InvalidArgumentError


#: An ordered mapping of column names to state values.
StateMap: TypeAlias = Dict[str, str]


#: The direction code for ascending sorts.
SORT_ASCENDING: Final[str] = 'a'

#: The direction code for descending sorts.
SORT_DESCENDING: Final[str] = 'd'

#: The sort orders accepted by :py:func:`normalize_sort_direction`.
#:
#: These are matched case-insensitively.
SORT_ORDERS: Final[Tuple[str, ...]] = ('ASC', 'DESC', 'A', 'D')


def decode_state(
    value: Optional[str],
) -> StateMap:
    """Decode an encoded state string into an ordered dictionary.

    If a key appears more than once, the last value is used, but the key
    keeps the position of its first appearance. Keys with blank values are
    kept.

    Args:
        value (str):
            The encoded state. This may be empty or ``None``.

    Returns:
        dict:
        The decoded state.
    """
    if not value:
        return {}

    return dict(QueryDict(value).items())


def encode_state(
    state: Mapping[str, str],
) -> str:
    """Encode a state dictionary into a string.

    The result is a query string made of ``key=value`` pairs joined by
    ``&``, in the order of the dictionary.

    Args:
        state (dict):
            The state to encode.

    Returns:
        str:
        The encoded state. This is an empty string for an empty state.
    """
    return urlencode(list(state.items()))


def normalize_sort_direction(
    order: str,
) -> str:
    """Return the direction code for a sort order.

    Args:
        order (str):
            The sort order. This must be one of :py:data:`SORT_ORDERS`, in
            any case.

    Returns:
        str:
        Either :py:data:`SORT_ASCENDING` or :py:data:`SORT_DESCENDING`.

    Raises:
        djgrid.datagrid.errors.InvalidArgumentError:
            The sort order isn't supported.
    """
    if not isinstance(order, str) or order.upper() not in SORT_ORDERS:
        raise InvalidArgumentError(
            _('Order must be in "%(orders)s", "%(order)s" given.')
            % {
                'order': order,
                'orders': ', '.join(SORT_ORDERS),
            })

    return order[0].lower()


def update_state(
    value: Optional[str],
    key: str,
    new_value: Optional[str] = None,
    remove: bool = False,
) -> str:
    """Return an encoded state with one entry changed.

    An existing entry keeps its position. A new entry is added at the end.

    Args:
        value (str):
            The current encoded state.

        key (str):
            The key to change.

        new_value (str, optional):
            The new value for the key. This is required unless removing.

        remove (bool, optional):
            Whether to remove the key. Removing a key that isn't present
            is not an error.

    Returns:
        str:
        The new encoded state.
    """
    state = decode_state(value)

    if remove:
        state.pop(key, None)
    else:
        assert new_value is not None
        state[key] = new_value

    return encode_state(state)
