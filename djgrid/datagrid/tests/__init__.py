"""Unit tests for djgrid.datagrid."""
