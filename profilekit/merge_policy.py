"""Merge environment variables from profiles into a base environment

Each variable has a `MergePolicy` which says whether values from the
base (inherited) environment and from profiles are used, and how
multiple values are combined. Variables without a policy use the
first value encountered.

Policies are configured on the command line with a compact syntax,
see `merge_policy_usage`.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern.pkcollections import PKDict
from pykern.pkdebug import pkdc
from profilekit import env_vars
import collections
import enum

#: Separator for path-like variables
PATH_SEP = ":"

#: Separator for flag-like variables
FLAG_SEP = " "

_USAGE = """<var> - use the first value of <var> encountered, this is the default action.
<var>* - use the last value of <var> encountered.
-<var> - ignore the variable, regardless of where it occurs.
:<var> - append instances of <var> using : as a separator.
<var>: - prepend instances of <var> using : as a separator.
+<var> - append instances of <var> using space as a separator.
<var>+ - prepend instances of <var> using space as a separator.
^:<var> - ignore <var> from the base/inherited environment but append in profiles as per :<var>.
^<var>: - ignore <var> from the base/inherited environment but prepend in profiles as per <var>:.
^+<var> - ignore <var> from the base/inherited environment but append in profiles as per +<var>.
^<var>+ - ignore <var> from the base/inherited environment but prepend in profiles as per <var>+.
^<var> - ignore <var> from the base/inherited environment but use the first value encountered in profiles.
^<var>* - ignore <var> from the base/inherited environment but use the last value encountered in profiles.
<var>^ - ignore <var> from profiles."""


class MergeAction(enum.Enum):
    FIRST = 1
    LAST = 2
    IGNORE = 3
    APPEND = 4
    PREPEND = 5
    IGNORE_BASE_AND_APPEND = 6
    IGNORE_BASE_AND_PREPEND = 7
    IGNORE_BASE_AND_USE_FIRST = 8
    IGNORE_BASE_AND_USE_LAST = 9
    IGNORE_PROFILES = 10

    def ignores_base(self):
        return self in _IGNORES_BASE

    def in_profiles(self):
        """Action applied to values from profiles

        Returns:
            MergeAction: with the base part removed
        """
        return _IN_PROFILES.get(self, self)


_IGNORES_BASE = frozenset(
    (
        MergeAction.IGNORE,
        MergeAction.IGNORE_BASE_AND_APPEND,
        MergeAction.IGNORE_BASE_AND_PREPEND,
        MergeAction.IGNORE_BASE_AND_USE_FIRST,
        MergeAction.IGNORE_BASE_AND_USE_LAST,
    )
)

_IN_PROFILES = {
    MergeAction.IGNORE_BASE_AND_APPEND: MergeAction.APPEND,
    MergeAction.IGNORE_BASE_AND_PREPEND: MergeAction.PREPEND,
    MergeAction.IGNORE_BASE_AND_USE_FIRST: MergeAction.FIRST,
    MergeAction.IGNORE_BASE_AND_USE_LAST: MergeAction.LAST,
}


class MergePolicyError(ValueError):
    """Merge policy string could not be parsed"""

    def __init__(self, fmt, *args, **kwargs):
        super().__init__(fmt.format(*args, **kwargs))


class MergePolicy(collections.namedtuple("MergePolicy", ("action", "separator"))):
    """How values of one variable are combined

    `separator` is only used by the append and prepend actions.
    """

    __slots__ = ()

    def __new__(cls, action, separator=""):
        return super().__new__(cls, action, separator)

    def describe(self):
        """Human readable form

        Returns:
            str: e.g. "append using ':'"
        """
        a = self.action
        if a is MergeAction.FIRST:
            return "use first"
        if a is MergeAction.LAST:
            return "use last"
        if a is MergeAction.IGNORE:
            return "ignore"
        if a is MergeAction.APPEND:
            return f"append using '{self.separator}'"
        if a is MergeAction.PREPEND:
            return f"prepend using '{self.separator}'"
        if a is MergeAction.IGNORE_BASE_AND_APPEND:
            return f"ignore in environment/base, append using '{self.separator}'"
        if a is MergeAction.IGNORE_BASE_AND_PREPEND:
            return f"ignore in environment/base, prepend using '{self.separator}'"
        if a is MergeAction.IGNORE_BASE_AND_USE_LAST:
            return "ignore in environment/base, use last value from profiles"
        if a is MergeAction.IGNORE_BASE_AND_USE_FIRST:
            return "ignore in environment/base, use first value from profiles"
        if a is MergeAction.IGNORE_PROFILES:
            return "ignore in profiles"
        raise AssertionError(f"unknown action={a}")


USE_FIRST = MergePolicy(MergeAction.FIRST)
USE_LAST = MergePolicy(MergeAction.LAST)
IGNORE_VARIABLE = MergePolicy(MergeAction.IGNORE)
APPEND_PATH = MergePolicy(MergeAction.APPEND, PATH_SEP)
APPEND_FLAG = MergePolicy(MergeAction.APPEND, FLAG_SEP)
PREPEND_PATH = MergePolicy(MergeAction.PREPEND, PATH_SEP)
PREPEND_FLAG = MergePolicy(MergeAction.PREPEND, FLAG_SEP)
IGNORE_BASE_APPEND_PATH = MergePolicy(MergeAction.IGNORE_BASE_AND_APPEND, PATH_SEP)
IGNORE_BASE_APPEND_FLAG = MergePolicy(MergeAction.IGNORE_BASE_AND_APPEND, FLAG_SEP)
IGNORE_BASE_PREPEND_PATH = MergePolicy(MergeAction.IGNORE_BASE_AND_PREPEND, PATH_SEP)
IGNORE_BASE_PREPEND_FLAG = MergePolicy(MergeAction.IGNORE_BASE_AND_PREPEND, FLAG_SEP)
IGNORE_BASE_USE_FIRST = MergePolicy(MergeAction.IGNORE_BASE_AND_USE_FIRST)
IGNORE_BASE_USE_LAST = MergePolicy(MergeAction.IGNORE_BASE_AND_USE_LAST)
USE_BASE_IGNORE_PROFILES = MergePolicy(MergeAction.IGNORE_PROFILES)


def debug_string(policies):
    """Variables and their descriptions

    Args:
        policies (dict): name to `MergePolicy`
    Returns:
        str: ``VAR: description, ...`` sorted by name
    """
    return ", ".join(f"{k}: {policies[k].describe()}" for k in sorted(policies))


def default_merge_policies():
    """Policies for tools that build with profiles

    Returns:
        PKDict: name to `MergePolicy`
    """
    return profile_merge_policies().pkupdate(
        GOPATH=PREPEND_PATH,
        VDLPATH=PREPEND_PATH,
        GOARCH=USE_FIRST,
        GOOS=USE_FIRST,
        GOROOT=IGNORE_BASE_USE_LAST,
    )


def format_merge_policies(policies):
    """Command line form of policies

    Args:
        policies (dict): name to `MergePolicy`
    Returns:
        str: comma separated entries sorted by name
    """
    return ",".join(_format_one(k, policies[k]) for k in sorted(policies))


def merge_env(policies, base, *sources):
    """Merge sources into base according to policies

    Variables whose policy ignores the base are removed from base
    first. Then each ``K=V`` of each source is applied in order.

    Args:
        policies (dict): name to `MergePolicy`; missing names are `USE_FIRST`
        base (EnvVars): modified in place
        sources (list): lists of ``K=V`` strings
    Returns:
        EnvVars: base
    """
    for k in list(base.to_map()):
        if policies.get(k, USE_FIRST).action.ignores_base():
            base.delete(k)
    for s in sources:
        for e in s:
            k, v = env_vars.split_key_value(e)
            p = policies.get(k, USE_FIRST)
            a = p.action.in_profiles()
            if a in (MergeAction.IGNORE, MergeAction.IGNORE_PROFILES):
                continue
            if a is MergeAction.APPEND:
                base.set_tokens(
                    k,
                    base.get_tokens(k, p.separator)
                    + env_vars.split_tokens(v, p.separator),
                    p.separator,
                )
            elif a is MergeAction.PREPEND:
                base.set_tokens(
                    k,
                    env_vars.split_tokens(v, p.separator)
                    + base.get_tokens(k, p.separator),
                    p.separator,
                )
            elif a is MergeAction.FIRST:
                if not base.contains(k):
                    base.set(k, v)
            else:
                base.set(k, v)
    pkdc("merged={}", base)
    return base


def merge_policy_usage():
    return _USAGE


def parse_merge_policies(text, into=None):
    """Parse the command line form of policies

    Args:
        text (str): comma separated entries, see `merge_policy_usage`
        into (dict): updated in place [new PKDict]
    Returns:
        PKDict: name to `MergePolicy`
    """
    rv = PKDict() if into is None else into
    if not text:
        raise MergePolicyError("no value!")
    for e in text.split(","):
        k, p = _parse_one(e)
        if not k:
            raise MergePolicyError("{!r} does not name a variable", e)
        rv[k] = p
    return rv


def profile_merge_policies():
    """Policies for profile implementations

    Returns:
        PKDict: name to `MergePolicy`
    """
    return PKDict(
        PATH=APPEND_PATH,
        CCFLAGS=APPEND_FLAG,
        CXXFLAGS=APPEND_FLAG,
        LDFLAGS=APPEND_FLAG,
        CGO_CFLAGS=APPEND_FLAG,
        CGO_CXXFLAGS=APPEND_FLAG,
        CGO_LDFLAGS=APPEND_FLAG,
        GOPATH=IGNORE_BASE_APPEND_PATH,
        GOARCH=USE_BASE_IGNORE_PROFILES,
        GOOS=USE_BASE_IGNORE_PROFILES,
    )


def _format_one(name, policy):
    a = policy.action
    s = PATH_SEP if policy.separator == PATH_SEP else "+"
    if a is MergeAction.FIRST:
        return name
    if a is MergeAction.LAST:
        return name + "*"
    if a is MergeAction.IGNORE:
        return "-" + name
    if a is MergeAction.APPEND:
        return s + name
    if a is MergeAction.PREPEND:
        return name + s
    if a is MergeAction.IGNORE_BASE_AND_APPEND:
        return "^" + s + name
    if a is MergeAction.IGNORE_BASE_AND_PREPEND:
        return "^" + name + s
    if a is MergeAction.IGNORE_BASE_AND_USE_LAST:
        return "^" + name + "*"
    if a is MergeAction.IGNORE_BASE_AND_USE_FIRST:
        return "^" + name
    if a is MergeAction.IGNORE_PROFILES:
        return name + "^"
    raise AssertionError(f"unknown action={a}")


def _parse_ignore_base(value):
    if not value:
        return value, IGNORE_BASE_USE_LAST
    if value[0] == ":":
        return value[1:], IGNORE_BASE_APPEND_PATH
    if value[0] == "+":
        return value[1:], IGNORE_BASE_APPEND_FLAG
    return _parse_suffix(
        value,
        IGNORE_BASE_USE_FIRST,
        {
            ":": IGNORE_BASE_PREPEND_PATH,
            "+": IGNORE_BASE_PREPEND_FLAG,
            "*": IGNORE_BASE_USE_LAST,
        },
    )


def _parse_one(value):
    if not value:
        raise MergePolicyError("empty merge policy in list")
    p = {
        "-": IGNORE_VARIABLE,
        ":": APPEND_PATH,
        "+": APPEND_FLAG,
    }.get(value[0])
    if p:
        return value[1:], p
    if value[0] == "^":
        return _parse_ignore_base(value[1:])
    return _parse_suffix(
        value,
        USE_FIRST,
        {
            ":": PREPEND_PATH,
            "+": PREPEND_FLAG,
            "*": USE_LAST,
            "^": USE_BASE_IGNORE_PROFILES,
        },
    )


def _parse_suffix(value, default, suffixes):
    p = suffixes.get(value[-1])
    if p:
        return value[:-1], p
    return value, default
