"""Compilation targets for profiles.

A target identifies compiled code by architecture, operating system and
version. On the command line it is written ``<arch>-<os>[@<version>]``,
e.g. ``amd64-linux@1.5``, and its environment is written as comma
separated ``<var>=<val>`` pairs.

Targets are kept in lists sorted by `Target.less`: architecture and
operating system ascending, then version descending with the empty
version first, since an unpinned version stands for the latest.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern.pkcollections import PKDict
from pykern.pkdebug import pkdc
from profilekit import env_vars
import os
import platform
import sys

#: Separator of the components of a version
VERSION_SEP = "."

#: Command line form of a target, used in error messages
USAGE = "<arch>-<os>[@<version>]"

#: Command line form of an environment, used in error messages
ENV_USAGE = "<var>=[<val>],..."

# Python's names for machines and platforms mapped to the names profiles use
_ARCH_ALIASES = PKDict(
    aarch64="arm64",
    amd64="amd64",
    arm64="arm64",
    armv6l="arm",
    armv7l="arm",
    i386="386",
    i686="386",
    x86="386",
    x86_64="amd64",
)

_OS_PREFIXES = (
    ("darwin", "darwin"),
    ("freebsd", "freebsd"),
    ("linux", "linux"),
    ("win32", "windows"),
    ("cygwin", "windows"),
)


class TargetError(ValueError):
    """Target or environment string could not be parsed"""

    def __init__(self, fmt, *args, **kwargs):
        super().__init__(fmt.format(*args, **kwargs))


class Target:
    """Specification of the environment a profile is built for

    `env` is the environment as modified by the profile
    implementation. `command_line_env` is the environment supplied on
    the command line; it is fixed at construction, and a copy is
    returned on each access.

    Args:
        arch (str): cpu architecture, e.g. ``amd64``
        os (str): operating system, e.g. ``linux``
        version (str): version or empty for the default
        env (list): ``K=V`` strings
        command_line_env (list): ``K=V`` strings
        installation_dir (str): where the target is installed
        update_time (datetime): when the target was last changed
        is_set (bool): arch and os were explicitly supplied [True if arch]
    """

    def __init__(
        self,
        arch="",
        os="",
        version="",
        env=None,
        command_line_env=None,
        installation_dir="",
        update_time=None,
        is_set=None,
    ):
        self.arch = arch
        self.os = os
        self.version = version
        self.env = list(env or [])
        self._command_line_env = tuple(command_line_env or ())
        self.installation_dir = installation_dir
        self.update_time = update_time
        self.is_set = bool(arch) if is_set is None else is_set

    def __repr__(self):
        return f"Target({self.debug_string()})"

    def __str__(self):
        return format_target(self)

    @property
    def command_line_env(self):
        return list(self._command_line_env)

    def copy(self):
        """Copy with independent environment lists

        Returns:
            Target: new object
        """
        return Target(
            arch=self.arch,
            os=self.os,
            version=self.version,
            env=self.env,
            command_line_env=self._command_line_env,
            installation_dir=self.installation_dir,
            update_time=self.update_time,
            is_set=self.is_set,
        )

    def cross_compiling(self):
        """Is the target different from the host?

        Returns:
            bool: True if arch or os differs from `native_target`
        """
        n = native_target()
        return self.arch != n.arch or self.os != n.os

    def debug_string(self):
        """Target with its directory and environments

        Returns:
            str: single line representation
        """
        return "{} dir:{} --env={} envvars:{}".format(
            format_target(self),
            self.installation_dir,
            format_env(self._command_line_env),
            self.env,
        )

    def less(self, other):
        """Ordering used to keep lists of targets sorted

        Architecture and operating system are ascending.  Versions
        are descending, except that the empty version is highest.

        Args:
            other (Target): to compare against
        Returns:
            bool: True if self sorts before other
        """
        if self.arch != other.arch:
            return self.arch < other.arch
        if self.os != other.os:
            return self.os < other.os
        if not self.version:
            return bool(other.version)
        if not other.version:
            return False
        return compare_versions(self.version, other.version) > 0

    def match(self, other):
        """Same arch and os and compatible versions

        An empty version on either side matches any version.

        Args:
            other (Target): installed or requested target
        Returns:
            bool: True if the targets match
        """
        if self.arch != other.arch or self.os != other.os:
            return False
        if not self.version or not other.version:
            return True
        return self.version == other.version

    def target_specific_dirname(self):
        """Directory name specific to arch, os and command line env

        ``GOARM`` is included for ``arm`` targets, e.g. ``arm_linux_armv7``.

        Returns:
            str: directory basename
        """
        rv = f"{self.arch}_{self.os}"
        if self.arch == "arm":
            v = env_vars.slice_to_map(self._command_line_env).get("GOARM")
            if v is not None:
                rv += "_armv" + v
        return rv

    def use_command_line_env(self):
        """Copy the command line environment into `env`

        Called once command line parsing is complete and before
        the target is otherwise used.
        """
        self.env = self.command_line_env


def compare_versions(v1, v2):
    """Compare dotted versions numerically where possible

    Components are compared as integers if both are ASCII decimal
    integers with an optional sign, else as strings. More components
    is greater if all shared components are equal.

    Args:
        v1 (str): version
        v2 (str): version
    Returns:
        int: -1, 0, or 1 as v1 is less, equal or greater than v2
    """

    def _cmp(a, b):
        return (a > b) - (a < b)

    p1 = v1.split(VERSION_SEP)
    p2 = v2.split(VERSION_SEP)
    for a, b in zip(p1, p2):
        x = _int(a)
        y = _int(b)
        if x is None or y is None:
            return _cmp(a, b)
        rv = _cmp(x, y)
        if rv:
            return rv
    return _cmp(len(p1), len(p2))


def default_target():
    """Host target, which is "not set" unless ``$GOARCH`` is

    Use for targets that are expected to be set from the command line.

    Returns:
        Target: host arch and os with no version
    """
    a = os.environ.get("GOARCH")
    return Target(
        arch=a or _native_arch(),
        os=_native_os(),
        is_set=bool(a),
    )


def find_target(targets, target):
    """First target in targets that matches target

    Args:
        targets (list): sorted targets
        target (Target): requested target
    Returns:
        Target: a copy or None
    """
    for t in targets:
        if target.match(t):
            return t.copy()
    return None


def find_target_with_default(targets, target):
    """Like `find_target`, but an unset target selects a lone target

    Args:
        targets (list): sorted targets
        target (Target): requested target
    Returns:
        Target: a copy or None
    """
    if len(targets) == 1 and not target.is_set:
        return targets[0].copy()
    return find_target(targets, target)


def format_env(env):
    """Command line form of an environment

    Args:
        env (list): ``K=V`` strings
    Returns:
        str: comma separated
    """
    return ",".join(env)


def format_target(target):
    """Command line form of a target

    An unset target is formatted with the host's arch and os.

    Args:
        target (Target): what to format
    Returns:
        str: ``<arch>-<os>@<version>``
    """
    t = target
    if not t.is_set:
        t = default_target()
    return f"{t.arch}-{t.os}@{target.version}"


def insert_target(targets, target):
    """Insert target before the first element it does not sort after

    Args:
        targets (list): sorted targets, modified in place
        target (Target): to add
    Returns:
        list: targets
    """
    for i, t in enumerate(targets):
        if not t.less(target):
            targets.insert(i, target)
            return targets
    targets.append(target)
    return targets


def native_target():
    """Target for the host this is running on

    Returns:
        Target: set, with no version
    """
    return Target(
        arch=os.environ.get("GOARCH") or _native_arch(),
        os=_native_os(),
        is_set=True,
    )


def parse_env(value):
    """Parse ``<var>=[<val>],...``

    Args:
        value (str): comma separated assignments
    Returns:
        list: ``K=V`` strings
    """
    rv = []
    for v in value.split(","):
        k, s, _ = v.partition("=")
        if not s or not k:
            raise TargetError("{!r} doesn't look like {}", v, ENV_USAGE)
        rv.append(v)
    return rv


def parse_target(value, *env):
    """Parse ``<arch>-<os>[@<version>]`` and optional environments

    Args:
        value (str): target spec
        env (str): command line environment specs, see `parse_env`
    Returns:
        Target: set target
    """
    s, _, v = value.partition("@")
    p = s.split("-")
    if len(p) != 2 or not p[0] or not p[1]:
        raise TargetError("{!r} doesn't look like {}", s, USAGE)
    c = []
    for e in env:
        if e:
            c.extend(parse_env(e))
    pkdc("target={} version={} env={}", s, v, c)
    return Target(arch=p[0], os=p[1], version=v, command_line_env=c, is_set=True)


def remove_target(targets, target):
    """Remove the first element matching target

    Args:
        targets (list): sorted targets, modified in place
        target (Target): to match
    Returns:
        list: targets
    """
    for i, t in enumerate(targets):
        if target.match(t):
            del targets[i]
            break
    return targets


def with_default_version(target):
    """Copy of target without a version

    Args:
        target (Target): to copy
    Returns:
        Target: copy with empty version
    """
    rv = target.copy()
    rv.version = ""
    return rv


def _int(value):
    d = value[1:] if value[:1] in ("+", "-") else value
    if d.isascii() and d.isdigit():
        return int(value)
    return None


def _native_arch():
    m = platform.machine().lower()
    return _ARCH_ALIASES.get(m, m)


def _native_os():
    for p, n in _OS_PREFIXES:
        if sys.platform.startswith(p):
            return n
    return sys.platform
