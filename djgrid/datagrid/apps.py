from django.apps import AppConfig


class DatagridAppConfig(AppConfig):
    name = 'djgrid.datagrid'
    label = 'djgrid_datagrid'
