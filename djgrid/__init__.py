"""Basic version and package information."""

# The version of Djgrid, as:
#
#   (Major, Minor, Micro, alpha/beta/rc/final, Release Number, Released)
#
VERSION = (1, 0, 0, 'final', 0, False)


def get_package_version():
    """Return the version as a Python package version string.

    Returns:
        str:
        The version, such as ``1.0`` or ``1.1b2``.
    """
    major, minor, micro, tag, release_num = VERSION[:5]
    version = '%d.%d' % (major, minor)

    if micro:
        version += '.%d' % micro

    if tag != 'final':
        version += '%s%d' % ({'alpha': 'a', 'beta': 'b'}.get(tag, tag),
                             release_num)

    if not VERSION[5]:
        version += '.dev0'

    return version


__version_info__ = VERSION[:-1]
__version__ = get_package_version()
