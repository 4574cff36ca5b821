"""Version information for Djgrid dependencies.

This contains constants used by :file:`setup.py` and consumers of Djgrid to
look up information on the major dependencies of Djgrid.
"""

# NOTE: This file may not import other (non-Python) modules! It's used for
#       packaging and may be needed before any dependencies have been
#       installed.

from typing import Dict


###########################################################################
# Python and Django compatibility
###########################################################################

#: The minimum supported version of Python 3.x.
PYTHON_3_MIN_VERSION = (3, 8)

#: A string representation of the minimum supported version of Python 3.x.
PYTHON_3_MIN_VERSION_STR = '%s.%s' % PYTHON_3_MIN_VERSION

#: A dependency version range for Python 3.x.
PYTHON_3_RANGE = ">=%s" % PYTHON_3_MIN_VERSION_STR

#: The version range required for Django.
django_version = '~=4.2.17'


###########################################################################
# Python dependencies
###########################################################################

#: All dependencies required to install Djgrid.
package_dependencies: Dict[str, str] = {
    'Django': django_version,
    'python-dateutil': '>=2.7',
    'pytz': '',
    'typing_extensions': '>=4.12.2',

    # importlib.metadata compatibility import.
    #
    # 6.6 is equivalent to importlib.metadata in Python 3.12.
    'importlib-metadata': '>=6.6',
}

#: Dependencies required to run the test suite.
test_dependencies: Dict[str, str] = {
    'kgb': '>=7.1.1',
    'pytest': '>=8.0',
    'pytest-django': '>=4.8',
}


###########################################################################
# Packaging utilities
###########################################################################

def build_dependency_list(deps, version_prefix=''):
    """Build a list of dependency specifiers from a dependency map.

    This can be used along with :py:data:`package_dependencies` or
    :py:data:`test_dependencies` to build a list of dependency specifiers
    for use in :file:`setup.py`.

    Args:
        deps (dict):
            A dictionary of dependencies.

        version_prefix (str, optional):
            A prefix placed between the package name and the version.

    Returns:
        list of str:
        A list of dependency specifiers.
    """
    return sorted(
        (
            '%s%s%s' % (dep_name, version_prefix, dep_version)
            for dep_name, dep_version in deps.items()
        ),
        key=lambda s: s.lower())
