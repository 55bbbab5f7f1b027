"""Show installed profiles and the environments they produce

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
from profilekit import env_vars
from profilekit import merge_policy
from profilekit import profile_db
from profilekit import reader
from profilekit import target as profilekit_target


def env(target, *names, db_path=None, merge_policies=None):
    """Environment of profiles for target

    Starts with an empty environment and merges each profile's
    environment in order.

    Args:
        target (str): ``<arch>-<os>[@<version>]``
        names (str): qualified profile names [cfg.profiles]
        db_path (str): database file or directory [cfg.db_path]
        merge_policies (str): see `policies`
    Returns:
        str: sorted ``K=V`` lines
    """
    t = _target(target)
    r = _reader(db_path)
    n = names or reader.cfg.profiles
    try:
        r.validate_requested_profiles_and_target(n, t)
    except profile_db.ProfileNotInstalled as e:
        pkcli.command_error("{}", e)
    r.merge_env_from_profiles(_policies(merge_policies), t, *n)
    return "\n".join(r.env.to_slice())


def list(db_path=None, show_targets=False):
    """Installed profiles

    Args:
        db_path (str): database file or directory [cfg.db_path]
        show_targets (bool): include each target with its directory
    Returns:
        str: one line per profile
    """
    rv = []
    for p in _reader(db_path).profiles():
        rv.append(p.qualified_name)
        if show_targets:
            rv.extend("  {} {}".format(t, t.installation_dir) for t in p.targets)
    return "\n".join(rv)


def policies(merge_policies=None):
    """Normalize and describe merge policies

    Args:
        merge_policies (str): comma separated policies [defaults for tools]
    Returns:
        str: normalized form followed by a description of each variable
    """
    p = _policies(merge_policies)
    return "\n".join(
        [merge_policy.format_merge_policies(p)]
        + ["{}: {}".format(k, p[k].describe()) for k in sorted(p)]
    )


def _policies(value):
    if value is None:
        return merge_policy.default_merge_policies()
    try:
        return merge_policy.parse_merge_policies(value)
    except merge_policy.MergePolicyError as e:
        pkcli.command_error("{}\n{}", e, merge_policy.merge_policy_usage())


def _reader(db_path):
    p = reader.cfg.db_path if db_path is None else db_path
    if not p:
        pkcli.command_error("db_path must be supplied")
    try:
        return reader.Reader(db_path=p, env=env_vars.EnvVars())
    except profile_db.DBError as e:
        pkcli.command_error("{}", e)


def _target(value):
    try:
        return profilekit_target.parse_target(value)
    except profilekit_target.TargetError as e:
        pkcli.command_error("{}", e)
