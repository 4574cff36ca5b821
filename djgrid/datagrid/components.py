"""A component tree with lazy discovery of ancestors.

Columns are declared standalone and only later added to a datagrid. They
can't be given their datagrid when constructed, so instead they *monitor*
for an ancestor of a given type. Once the tree changes in a way that makes
such an ancestor reachable, :py:meth:`Component.attached` is called with it.

This module provides the two building blocks for that:

* :py:class:`Component`, a node in the tree that can monitor for ancestors.

* :py:class:`Container`, a component holding named child components. Adding
  a component to a container is what triggers the ancestor notifications.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterator, List, Optional, Type, TypeVar

from django.utils.translation import gettext as _

from djgrid.datagrid.errors import AttachmentError, NotAttachedError


logger = logging.getLogger(__name__)


_AncestorT = TypeVar('_AncestorT', bound='Component')


class AttachmentState(Enum):
    """Whether a component has found the ancestor it monitors for."""

    #: The component has not been attached to a monitored ancestor.
    DETACHED = 0

    #: The component has been attached to a monitored ancestor.
    ATTACHED = 1


class Component:
    """A node in a component tree.

    A component has an optional name and parent. Components can monitor for
    ancestors of specific types by calling :py:meth:`monitor`. Subclasses
    then override :py:meth:`attached` to be told about them.
    """

    ######################
    # Instance variables #
    ######################

    #: The name of the component within its parent.
    #:
    #: This is assigned when the component is added to a container.
    #:
    #: Type:
    #:     str
    name: Optional[str]

    #: The container owning this component.
    #:
    #: Type:
    #:     Container
    parent: Optional[Container]

    #: Monitored ancestor types, mapped to the ancestors already notified.
    _monitors: Dict[type, List[Component]]

    def __init__(self) -> None:
        """Initialize the component."""
        self.name = None
        self.parent = None
        self._monitors = {}

    @property
    def state(self) -> AttachmentState:
        """Whether a monitored ancestor has been found.

        Type:
            AttachmentState
        """
        if any(self._monitors.values()):
            return AttachmentState.ATTACHED

        return AttachmentState.DETACHED

    @property
    def is_attached(self) -> bool:
        """Whether a monitored ancestor has been found.

        Type:
            bool
        """
        return self.state == AttachmentState.ATTACHED

    def monitor(
        self,
        ancestor_type: Type[Component],
    ) -> None:
        """Monitor for an ancestor of the given type.

        If such an ancestor is already reachable, :py:meth:`attached` will
        be called right away.

        Args:
            ancestor_type (type):
                The type of ancestor to look for.
        """
        self._monitors.setdefault(ancestor_type, [])
        self._notify_monitors()

    def lookup(
        self,
        ancestor_type: Type[_AncestorT],
        require: bool = True,
    ) -> Optional[_AncestorT]:
        """Return the closest ancestor of the given type.

        Args:
            ancestor_type (type):
                The type of ancestor to look for.

            require (bool, optional):
                Whether to raise an exception if the ancestor isn't found.

        Returns:
            Component:
            The ancestor, or ``None`` if it wasn't found and ``require`` is
            ``False``.

        Raises:
            djgrid.datagrid.errors.NotAttachedError:
                No ancestor of the type was found, and ``require`` is
                ``True``.
        """
        ancestor = self.parent

        while ancestor is not None:
            if isinstance(ancestor, ancestor_type):
                return ancestor

            ancestor = ancestor.parent

        if require:
            raise NotAttachedError(
                _('%(component)r is not attached to a %(type)s.')
                % {
                    'component': self,
                    'type': ancestor_type.__name__,
                })

        return None

    def attached(
        self,
        ancestor: Component,
    ) -> None:
        """Handle being attached to a monitored ancestor.

        This is called once for each monitored ancestor that becomes
        reachable. Subclasses can override this. It should not be called
        directly.

        Args:
            ancestor (Component):
                The ancestor that was found.
        """
        pass

    def _notify_monitors(self) -> None:
        """Notify this component of any newly-reachable ancestors."""
        for ancestor_type, notified in self._monitors.items():
            ancestor = self.lookup(ancestor_type, require=False)

            if (ancestor is not None and
                not any(item is ancestor for item in notified)):
                self.attached(ancestor)
                notified.append(ancestor)
                logger.debug('%r attached to %r', self, ancestor)

    def _on_tree_changed(self) -> None:
        """Handle this component being inserted into a tree."""
        self._notify_monitors()


class Container(Component):
    """A component holding named child components.

    Children keep the order they were added in.
    """

    ######################
    # Instance variables #
    ######################

    #: The child components, keyed by name.
    _children: Dict[str, Component]

    def __init__(self) -> None:
        """Initialize the container."""
        super().__init__()

        self._children = {}

    def add_component(
        self,
        component: Component,
        name: str,
    ) -> None:
        """Add a child component.

        The component's name is set to ``name``, and any components in its
        sub-tree that are monitoring for ancestors will be notified.

        Args:
            component (Component):
                The component to add.

            name (str):
                The name of the component within this container.

        Raises:
            djgrid.datagrid.errors.AttachmentError:
                The component already belongs to a container, the name is
                already used, or the component rejected being attached to
                an ancestor.
        """
        if component.parent is not None:
            raise AttachmentError(
                _('%(component)r already belongs to %(parent)r.')
                % {
                    'component': component,
                    'parent': component.parent,
                })

        if name in self._children:
            raise AttachmentError(
                _('A component named "%(name)s" already exists in '
                  '%(container)r.')
                % {
                    'container': self,
                    'name': name,
                })

        if component is self or self._has_ancestor(component):
            raise AttachmentError(
                _('%r cannot be added to its own sub-tree.') % component)

        old_name = component.name
        component.name = name
        component.parent = self
        self._children[name] = component

        try:
            component._on_tree_changed()
        except Exception:
            # The component rejected its new ancestors. Leave the tree as
            # it was.
            del self._children[name]
            component.name = old_name
            component.parent = None
            raise

    def remove_component(
        self,
        component: Component,
    ) -> None:
        """Remove a child component.

        Components are not notified about removal.

        Args:
            component (Component):
                The component to remove.

        Raises:
            KeyError:
                The component is not a child of this container.
        """
        name = component.name

        if name is None or self._children.get(name) is not component:
            raise KeyError('%r is not a child of %r' % (component, self))

        del self._children[name]
        component.parent = None

    def get_component(
        self,
        name: str,
        require: bool = True,
    ) -> Optional[Component]:
        """Return a child component by name.

        Args:
            name (str):
                The name of the component.

            require (bool, optional):
                Whether to raise an exception if the component isn't found.

        Returns:
            Component:
            The component, or ``None`` if not found and ``require`` is
            ``False``.

        Raises:
            KeyError:
                The component was not found, and ``require`` is ``True``.
        """
        try:
            return self._children[name]
        except KeyError:
            if require:
                raise KeyError('"%s" is not a child of %r' % (name, self))

            return None

    def get_components(self) -> List[Component]:
        """Return all child components, in the order they were added.

        Returns:
            list of Component:
            The child components.
        """
        return list(self._children.values())

    def _has_ancestor(
        self,
        component: Component,
    ) -> bool:
        """Return whether a component is an ancestor of this container.

        Args:
            component (Component):
                The component to look for.

        Returns:
            bool:
            ``True`` if the component is an ancestor.
        """
        ancestor = self.parent

        while ancestor is not None:
            if ancestor is component:
                return True

            ancestor = ancestor.parent

        return False

    def _on_tree_changed(self) -> None:
        """Handle this container being inserted into a tree.

        This notifies the container and then its whole sub-tree.
        """
        super()._on_tree_changed()

        for child in self._children.values():
            child._on_tree_changed()

    def __iter__(self) -> Iterator[Component]:
        """Iterate through the child components.

        Yields:
            Component:
            Each child component.
        """
        yield from self._children.values()

    def __len__(self) -> int:
        """Return the number of child components.

        Returns:
            int:
            The number of child components.
        """
        return len(self._children)

    def __contains__(
        self,
        name: str,
    ) -> bool:
        """Return whether a child with the given name exists.

        Args:
            name (str):
                The name to look for.

        Returns:
            bool:
            ``True`` if there's a child with the name.
        """
        return name in self._children
