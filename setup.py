#!/usr/bin/env python3

import sys

from setuptools import find_packages, setup

from djgrid import get_package_version
from djgrid.dependencies import (PYTHON_3_MIN_VERSION,
                                 PYTHON_3_RANGE,
                                 build_dependency_list,
                                 package_dependencies,
                                 test_dependencies)


# Make sure this is a version of Python we are compatible with. This should
# prevent people on older versions from unintentionally trying to install
# the source tarball, and failing.
if sys.version_info < PYTHON_3_MIN_VERSION:
    sys.stderr.write('This version of Djgrid is incompatible with your '
                     'version of Python.\n')
    sys.exit(1)


PACKAGE_NAME = 'Djgrid'


setup(
    name=PACKAGE_NAME,
    version=get_package_version(),
    license='MIT',
    description=(
        'Datagrid columns for Django, with filters, pluggable cell '
        'renderers, and persisted default sorting and filtering.'
    ),
    packages=find_packages(exclude=['tests']),
    python_requires=PYTHON_3_RANGE,
    install_requires=build_dependency_list(package_dependencies),
    extras_require={
        'test': build_dependency_list(test_dependencies),
    },
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Web Environment',
        'Framework :: Django',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
)
