"""Versions supported by a profile implementation

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern.pkcollections import PKDict


class UnsupportedVersion(ValueError):
    """Requested version is not one of the supported versions"""

    def __init__(self, fmt, *args, **kwargs):
        super().__init__(fmt.format(*args, **kwargs))


class VersionInfo:
    """Supported versions of a profile with per version metadata

    Versions are ordered in reverse lexicographic order which is
    newest first for the usual version strings.

    Args:
        name (str): profile name
        supported (dict): version to metadata
        default (str): version used when none is requested
    """

    def __init__(self, name, supported, default):
        self.name = name
        self.default = default
        self._data = PKDict(supported)
        self._ordered = sorted(self._data, reverse=True)

    def __str__(self):
        return self.name + ":" + "".join(
            " " + v + ("*" if v == self.default else "") for v in self._ordered
        )

    def is_newer_than_default(self, version):
        return self.default < version

    def is_older_than_default(self, version):
        return self.default > version

    def lookup(self, version, expect_type):
        """Metadata for version, checked against expect_type

        Args:
            version (str): empty selects the default
            expect_type (type): class the metadata must be an instance of
        Returns:
            object: metadata
        """
        v = version or self.default
        if v not in self._data:
            raise UnsupportedVersion("unsupported version: {!r} for {}", v, self)
        rv = self._data[v]
        if not isinstance(rv, expect_type):
            raise TypeError(
                "mismatched types: {} is not {} for version={} of {}".format(
                    type(rv).__name__, expect_type.__name__, v, self.name
                )
            )
        return rv

    def select(self, requested):
        """Validate requested version

        Args:
            requested (str): empty selects the default
        Returns:
            str: version
        """
        if not requested:
            return self.default
        if requested in self._data:
            return requested
        raise UnsupportedVersion("unsupported version: {!r} for {}", requested, self)

    def supported(self):
        return list(self._ordered)
