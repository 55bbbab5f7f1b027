"""Profiles and an environment to merge them into

`Reader` is what tools use to build an environment from installed
profiles. Profile names are qualified, see
`profile_db.qualified_profile_name`.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkconfig
from pykern import pkio
from pykern.pkdebug import pkdc
from profilekit import env_vars
from profilekit import merge_policy
from profilekit import profile_db

cfg = pkconfig.init(
    db_path=("", str, "profiles database file or directory"),
    root_dir=(None, str, "value of the root variable [current directory]"),
    root_env=("JIRI_ROOT", str, "name of the root variable in profiles"),
    profiles=((), tuple, "default profiles for commands"),
)


class Reader:
    """Profiles database with an environment

    Args:
        db_path (str): database to read [cfg.db_path]
        skip_profiles (bool): do not read the database
        env (EnvVars): initial environment [OS environment]
    """

    def __init__(self, db_path=None, skip_profiles=False, env=None):
        self.path = cfg.db_path if db_path is None else db_path
        self.skip_profiles = skip_profiles
        self.env = env_vars.EnvVars.from_os() if env is None else env
        self.db = profile_db.ProfileDB()
        if not skip_profiles and self.path:
            self.db.read(self.path)

    def env_from_profile(self, name, target):
        return self.db.env_from_profile(
            *profile_db.split_profile_name(name),
            target,
        )

    def lookup_profile(self, name):
        return self.db.lookup_profile(*profile_db.split_profile_name(name))

    def lookup_profile_target(self, name, target):
        return self.db.lookup_profile_target(
            *profile_db.split_profile_name(name),
            target,
        )

    def merge_env(self, policies, *sources):
        """Merge sources into `env`

        Args:
            policies (dict): name to `merge_policy.MergePolicy`
            sources (list): lists of ``K=V`` strings
        """
        merge_policy.merge_env(policies, self.env, *sources)

    def merge_env_from_profiles(self, policies, target, *names):
        """Merge environments of profiles into `env`

        Profiles or targets which are not installed are skipped. The
        root variable is expanded in all values afterwards.

        Args:
            policies (dict): name to `merge_policy.MergePolicy`
            target (target.Target): to look up in each profile
            names (str): qualified profile names
        """
        s = []
        for n in names:
            e = self.env_from_profile(n, target)
            if e is None:
                pkdc("skipping profile={} target={}", n, target)
                continue
            s.append(e)
        self.merge_env(policies, *s)
        _expand_root(self.env)

    def prepend_to_path(self, path):
        self.env.set_tokens(
            "PATH",
            [str(path)] + self.env.get_tokens("PATH", merge_policy.PATH_SEP),
            merge_policy.PATH_SEP,
        )

    def profile_names(self):
        return self.db.names()

    def profiles(self):
        return self.db.profiles()

    def schema_version(self):
        return self.db.schema_version()

    def validate_requested_profiles_and_target(self, names, target):
        """Ensure every profile has target installed

        Args:
            names (iterable): qualified profile names
            target (target.Target): to look up
        """
        if self.skip_profiles:
            return
        for n in names:
            if self.lookup_profile_target(n, target) is None:
                raise profile_db.ProfileNotInstalled(
                    '{!r} for {!r} is not available or not installed, use the "list" command to see the installed/available profiles.',
                    str(target),
                    n,
                )


def _expand_root(env):
    v = "${" + cfg.root_env + "}"
    r = cfg.root_dir or str(pkio.py_path())
    for k, x in env.to_map().items():
        if v in x:
            env.set(k, x.replace(v, r))
