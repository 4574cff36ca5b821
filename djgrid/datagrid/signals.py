"""Signals for being notified on datagrid column operations."""

from django.dispatch import Signal


#: Emitted when a column is attached to a datagrid.
#:
#: This is only emitted once per column.
#:
#: Args:
#:     column (djgrid.datagrid.columns.Column):
#:         The column that was attached.
#:
#:     datagrid (djgrid.datagrid.grids.DataGrid):
#:         The datagrid the column now belongs to.
column_attached = Signal()


#: Emitted when a datagrid's default sorting or filtering changes.
#:
#: Args:
#:     datagrid (djgrid.datagrid.grids.DataGrid):
#:         The datagrid whose state changed.
#:
#:     field (str):
#:         The name of the state field that changed (``default_order`` or
#:         ``default_filters``).
#:
#:     old_value (str):
#:         The previous encoded state.
#:
#:     new_value (str):
#:         The new encoded state.
default_state_changed = Signal()
