"""Registries of uniquely-identified items.

A registry holds a set of items, each of which can be found again through
one or more *lookup attributes*. Djgrid uses this for column renderers,
which are looked up by their ``renderer_id``.

Registries fill themselves with their default items the first time they're
used. :py:class:`EntryPointRegistry` takes those defaults from a Python
entry point group, so that other packages can contribute items.
"""

from __future__ import annotations

import logging
from enum import Enum
from threading import RLock
from typing import (Dict, Generic, Iterable, Iterator, Optional, Sequence,
                    Set, Type, TypeVar)

from django.utils.translation import gettext_lazy as _
from importlib_metadata import EntryPoint, entry_points
from typing_extensions import Final, TypeAlias

from djgrid.registries.errors import (AlreadyRegisteredError,
                                      ItemLookupError,
                                      RegistrationError)
from djgrid.registries.signals import registry_populating
from djgrid.util.typing import StrOrPromise

logger = logging.getLogger(__name__)


#: Error messages, keyed by error code.
RegistryErrorsDict: TypeAlias = Dict[str, StrOrPromise]


#: The type of item stored in a registry.
RegistryItemType = TypeVar('RegistryItemType')


#: The item being registered is already in the registry.
ALREADY_REGISTERED: Final[str] = 'already_registered'

#: Another item already uses one of the new item's lookup values.
ATTRIBUTE_REGISTERED: Final[str] = 'attribute_registered'

#: A lookup was made on an attribute the registry doesn't index.
INVALID_ATTRIBUTE: Final[str] = 'invalid_attribute'

#: The item being registered lacks a lookup attribute.
MISSING_ATTRIBUTE: Final[str] = 'missing_attribute'

#: The item being unregistered is not in the registry.
UNREGISTER: Final[str] = 'unregister'

#: No item matched a lookup.
NOT_REGISTERED: Final[str] = 'not_registered'

#: An entry point could not be loaded.
LOAD_ENTRY_POINT: Final[str] = 'load_entry_point'


#: The error messages used when a registry doesn't override them.
DEFAULT_ERRORS: Final[RegistryErrorsDict] = {
    ALREADY_REGISTERED: _(
        '%(item)s is already registered.'
    ),
    ATTRIBUTE_REGISTERED: _(
        'Cannot register %(item)s: %(duplicate)s already has '
        '%(attr_name)s = %(attr_value)s.'
    ),
    INVALID_ATTRIBUTE: _(
        'Items cannot be looked up by "%(attr_name)s".'
    ),
    LOAD_ENTRY_POINT: _(
        'Failed to load entry point %(entry_point)s: %(error)s'
    ),
    MISSING_ATTRIBUTE: _(
        'Cannot register %(item)s: it has no "%(attr_name)s" attribute.'
    ),
    UNREGISTER: _(
        'Cannot unregister %(item)s: it is not registered.'
    ),
    NOT_REGISTERED: _(
        'No item is registered with %(attr_name)s = %(attr_value)s.'
    ),
}


class RegistryState(Enum):
    """Where a registry is in its population lifecycle."""

    #: Default items have not been loaded yet.
    PENDING = 0

    #: Default items are being loaded.
    POPULATING = 1

    #: Default items have been loaded.
    READY = 2


class Registry(Generic[RegistryItemType]):
    """A set of unique items, indexed by lookup attributes.

    Subclasses list the attributes items are indexed by in
    :py:attr:`lookup_attrs`, and provide default items through
    :py:meth:`get_defaults`. No two items may share a value for any lookup
    attribute.

    All changes happen while holding a reentrant lock, so a registry can be
    shared between threads.
    """

    #: A human-readable name for the kind of item stored.
    #:
    #: Type:
    #:     str
    item_name: Optional[str] = None

    #: The attributes items are indexed by.
    #:
    #: Type:
    #:     list of str
    lookup_attrs: Sequence[str] = []

    #: Error messages overriding those in :py:attr:`default_errors`.
    #:
    #: Type:
    #:     dict
    errors: RegistryErrorsDict = {}

    #: The fallback error messages.
    #:
    #: Type:
    #:     dict
    default_errors: RegistryErrorsDict = DEFAULT_ERRORS

    #: The exception raised when an item or lookup value is a duplicate.
    #:
    #: Type:
    #:     type
    already_registered_error_class: Type[AlreadyRegisteredError] = \
        AlreadyRegisteredError

    #: The exception raised when a lookup or unregistration fails.
    #:
    #: Type:
    #:     type
    lookup_error_class: Type[ItemLookupError] = ItemLookupError

    ######################
    # Instance variables #
    ######################

    #: Where the registry is in its population lifecycle.
    #:
    #: Type:
    #:     RegistryState
    state: RegistryState

    #: All registered items.
    _items: Set[RegistryItemType]

    #: The lock guarding population and changes.
    _lock: RLock

    #: Lookup attribute names, mapped to value-to-item indexes.
    _registry: Dict[str, Dict[object, RegistryItemType]]

    def __init__(self) -> None:
        """Initialize the registry."""
        self.state = RegistryState.PENDING
        self._items = set()
        self._lock = RLock()
        self._registry = {}
        self._clear_indexes()

    def format_error(
        self,
        error_name: str,
        **error_kwargs,
    ) -> str:
        """Return the message for an error.

        Args:
            error_name (str):
                The error code, such as :py:data:`NOT_REGISTERED`.

            **error_kwargs (dict):
                Values interpolated into the message.

        Returns:
            str:
            The error message.

        Raises:
            ValueError:
                No message exists for the error code.
        """
        try:
            fmt = self.errors[error_name]
        except KeyError:
            try:
                fmt = self.default_errors[error_name]
            except KeyError:
                raise ValueError('%s has no message for error "%s".'
                                 % (type(self).__name__, error_name))

        return fmt % error_kwargs

    def get(
        self,
        attr_name: str,
        attr_value: object,
    ) -> RegistryItemType:
        """Return the item with the given lookup value.

        Args:
            attr_name (str):
                The lookup attribute.

            attr_value (object):
                The value of the attribute.

        Returns:
            object:
            The matching item.

        Raises:
            djgrid.registries.errors.ItemLookupError:
                The attribute is not a lookup attribute, or no item matched.
        """
        self.populate()

        index = self._registry.get(attr_name)

        if index is None:
            raise self.lookup_error_class(
                self.format_error(INVALID_ATTRIBUTE, attr_name=attr_name))

        try:
            return index[attr_value]
        except KeyError:
            raise self.lookup_error_class(
                self.format_error(NOT_REGISTERED,
                                  attr_name=attr_name,
                                  attr_value=attr_value))

    def get_or_none(
        self,
        attr_name: str,
        attr_value: object,
    ) -> Optional[RegistryItemType]:
        """Return the item with the given lookup value, if any.

        Args:
            attr_name (str):
                The lookup attribute.

            attr_value (object):
                The value of the attribute.

        Returns:
            object:
            The matching item, or ``None``.
        """
        try:
            return self.get(attr_name, attr_value)
        except ItemLookupError:
            return None

    def register(
        self,
        item: RegistryItemType,
    ) -> None:
        """Add an item.

        Args:
            item (object):
                The item to add.

        Raises:
            djgrid.registries.errors.AlreadyRegisteredError:
                The item, or another item with one of its lookup values, is
                already registered.

            djgrid.registries.errors.RegistrationError:
                The item lacks a lookup attribute.
        """
        self.populate()

        with self._lock:
            if item in self._items:
                raise self.already_registered_error_class(
                    self.format_error(ALREADY_REGISTERED, item=item))

            lookup_values = self._get_lookup_values(item)

            for attr_name, attr_value in lookup_values.items():
                self._registry[attr_name][attr_value] = item

            self._items.add(item)

    def unregister(
        self,
        item: RegistryItemType,
    ) -> None:
        """Remove an item.

        Args:
            item (object):
                The item to remove.

        Raises:
            djgrid.registries.errors.ItemLookupError:
                The item is not registered.
        """
        self.populate()

        with self._lock:
            if item not in self._items:
                raise self.lookup_error_class(
                    self.format_error(UNREGISTER, item=item))

            self._items.discard(item)

            for attr_name, index in self._registry.items():
                index.pop(getattr(item, attr_name), None)

    def populate(self) -> None:
        """Load the default items, if not already loaded.

        Only the first call has any effect. Concurrent callers wait for
        population to finish.
        """
        if self.state is RegistryState.READY:
            return

        with self._lock:
            # Another thread may have populated while we waited, or this
            # thread may be populating already.
            if self.state is not RegistryState.PENDING:
                return

            self.state = RegistryState.POPULATING

            for item in self.get_defaults():
                self.register(item)

            self.state = RegistryState.READY

        logger.debug('Populated %s with %d item(s)',
                     type(self).__name__, len(self._items))

        registry_populating.send(sender=type(self),
                                 registry=self)

    def get_defaults(self) -> Iterable[RegistryItemType]:
        """Return the items the registry starts out with.

        Subclasses can override this.

        Returns:
            list:
            The default items.
        """
        return []

    def reset(self) -> None:
        """Remove all items and mark the registry as unpopulated.

        The default items will be loaded again on next use.
        """
        with self._lock:
            self._items.clear()
            self._clear_indexes()
            self.state = RegistryState.PENDING

    def _get_lookup_values(
        self,
        item: RegistryItemType,
    ) -> Dict[str, object]:
        """Return the lookup values for a new item.

        Args:
            item (object):
                The item being registered.

        Returns:
            dict:
            A mapping of lookup attribute names to the item's values.

        Raises:
            djgrid.registries.errors.AlreadyRegisteredError:
                Another item already has one of the values.

            djgrid.registries.errors.RegistrationError:
                The item lacks a lookup attribute.
        """
        lookup_values: Dict[str, object] = {}

        for attr_name in self.lookup_attrs:
            if not hasattr(item, attr_name):
                raise RegistrationError(
                    self.format_error(MISSING_ATTRIBUTE,
                                      item=item,
                                      attr_name=attr_name))

            attr_value = getattr(item, attr_name)
            duplicate = self._registry[attr_name].get(attr_value)

            if duplicate is not None:
                raise self.already_registered_error_class(
                    self.format_error(ATTRIBUTE_REGISTERED,
                                      item=item,
                                      duplicate=duplicate,
                                      attr_name=attr_name,
                                      attr_value=attr_value))

            lookup_values[attr_name] = attr_value

        return lookup_values

    def _clear_indexes(self) -> None:
        """Reset the lookup indexes to be empty."""
        self._registry = {
            attr_name: {}
            for attr_name in self.lookup_attrs
        }

    def __iter__(self) -> Iterator[RegistryItemType]:
        """Iterate through the registered items, in no particular order.

        Yields:
            object:
            Each registered item.
        """
        self.populate()

        yield from list(self._items)

    def __len__(self) -> int:
        """Return the number of registered items.

        Returns:
            int:
            The number of items.
        """
        self.populate()

        return len(self._items)

    def __contains__(
        self,
        item: RegistryItemType,
    ) -> bool:
        """Return whether an item is registered.

        Args:
            item (object):
                The item to check.

        Returns:
            bool:
            ``True`` if the item is registered.
        """
        self.populate()

        return item in self._items


class EntryPointRegistry(Registry[RegistryItemType]):
    """A registry whose default items come from a Python entry point group.

    Entry points that fail to load are logged and skipped.
    """

    #: The name of the entry point group.
    #:
    #: Type:
    #:     str
    entry_point: Optional[str] = None

    def get_defaults(self) -> Iterable[RegistryItemType]:
        """Yield an item for each entry point in the group.

        Yields:
            object:
            Each loaded item.
        """
        if self.entry_point is None:
            return

        for ep in entry_points(group=self.entry_point):
            try:
                item = self.process_value_from_entry_point(ep)
            except Exception as e:
                logger.exception(self.format_error(LOAD_ENTRY_POINT,
                                                   entry_point=ep.name,
                                                   error=e))
            else:
                yield item

    def process_value_from_entry_point(
        self,
        entry_point: EntryPoint,
    ) -> RegistryItemType:
        """Return the item to register for an entry point.

        By default, this is whatever the entry point refers to.

        Args:
            entry_point (importlib_metadata.EntryPoint):
                The entry point.

        Returns:
            object:
            The item to register.
        """
        return entry_point.load()
