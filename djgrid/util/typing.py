"""Common type definitions used for Djgrid and consuming projects."""

from __future__ import annotations

from typing import Union

from django.utils.functional import Promise
from typing_extensions import TypeAlias


#: A string or a lazily-translated string.
#:
#: Lazily-translated strings are produced by
#: :py:func:`~django.utils.translation.gettext_lazy`.
StrOrPromise: TypeAlias = Union[str, Promise]


__all__ = [
    'StrOrPromise',
]
