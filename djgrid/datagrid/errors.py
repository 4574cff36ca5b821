"""Exception classes for datagrid columns and their filters."""

from djgrid.registries.errors import ItemLookupError


class NotAttachedError(Exception):
    """An operation required a datagrid, but the column isn't attached.

    Columns are created standalone and only learn about their datagrid once
    they're added to one. Anything that translates, builds links, or reads
    or writes the datagrid's default state needs that datagrid.
    """


class AttachmentError(Exception):
    """A component could not be attached to a container.

    This is raised when attaching a component that already belongs to
    another container, or when a name is already taken.
    """


class InvalidArgumentError(ValueError):
    """A value was outside of the allowed set of values.

    This is used for sort directions and renderers.
    """


class NoFilterError(ItemLookupError):
    """A filter was required for a column, but none was registered."""
