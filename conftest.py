"""Configures pytest and Django environment setup for Djgrid.

.. important::

   Do not define plugins in this file! Plugins must be in a different
   package (such as in tests/). pytest overrides importers for plugins and
   all modules descending from that module level, which will cause
   importers to fail, breaking unit tests.
"""

import os
import sys

import django

import djgrid


sys.path.insert(0, os.path.join(os.path.dirname(__file__)))


def pytest_report_header(config):
    """Return information for the report header.

    This will log the versions of Django and Djgrid.

    Args:
        config (object):
            The pytest configuration object.

    Returns:
        list of str:
        The report header entries to log.
    """
    return [
        'django version: %s' % django.get_version(),
        'djgrid version: %s' % djgrid.__version__,
    ]
