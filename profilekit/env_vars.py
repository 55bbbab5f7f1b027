"""Ordered environment variables and token helpers

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern.pkcollections import PKDict
import os


class EnvVars:
    """Environment variables in insertion order

    Values are strings. A variable that is set to the empty string is
    still present, see `contains`.

    Args:
        values (dict): initial variables [empty]
    """

    def __init__(self, values=None):
        self._values = PKDict(values or {})

    def __contains__(self, key):
        return key in self._values

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"EnvVars({self.to_slice()})"

    @classmethod
    def from_os(cls):
        """Copy of `os.environ`

        Returns:
            EnvVars: process environment
        """
        return cls(os.environ)

    @classmethod
    def from_slice(cls, env):
        """Parse ``K=V`` strings, later values win

        Args:
            env (iterable): ``K=V`` strings
        Returns:
            EnvVars: parsed variables
        """
        return cls(slice_to_map(env))

    def contains(self, key):
        return key in self._values

    def delete(self, key):
        self._values.pop(key, None)

    def get(self, key, default=""):
        return self._values.get(key, default)

    def get_tokens(self, key, separator):
        """Value split on separator without empty tokens

        Args:
            key (str): variable
            separator (str): e.g. ``:``
        Returns:
            list: tokens, empty if not set
        """
        return split_tokens(self.get(key), separator)

    def set(self, key, value):
        self._values[key] = value

    def set_tokens(self, key, tokens, separator):
        """Join non-empty tokens with separator and set key

        Args:
            key (str): variable
            tokens (iterable): values
            separator (str): e.g. ``:``
        """
        self.set(key, join_tokens(tokens, separator))

    def to_map(self):
        """Copy of variables

        Returns:
            PKDict: name to value
        """
        return PKDict(self._values)

    def to_slice(self):
        """Sorted ``K=V`` strings

        Returns:
            list: sorted by string
        """
        return sorted(join_key_value(k, v) for k, v in self._values.items())


def join_key_value(key, value):
    return f"{key}={value}"


def join_tokens(tokens, separator):
    return separator.join(t for t in tokens if t)


def slice_to_map(env):
    """Map of ``K=V`` strings, later values win

    Args:
        env (iterable): ``K=V`` strings
    Returns:
        PKDict: name to value
    """
    rv = PKDict()
    for e in env:
        k, v = split_key_value(e)
        rv[k] = v
    return rv


def split_key_value(value):
    """Split at the first ``=``

    Args:
        value (str): ``K=V`` or ``K``
    Returns:
        tuple: key and value (empty if there is no ``=``)
    """
    k, _, v = value.partition("=")
    return k, v


def split_tokens(value, separator):
    return [t for t in value.split(separator) if t]
