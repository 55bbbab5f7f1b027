"""Database of installed profiles and their targets

A profile is identified by its qualified name ``<installer>:<name>``
or just ``<name>`` when there is no installer. Each profile has one or
more targets sorted by `target.Target.less`.

The database is persisted as XML, see `profilekit.db_schema`. A
database path is either a file or a directory with one file per
installer.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkio
from pykern.pkcollections import PKDict
from pykern.pkdebug import pkdc, pkdlog
from profilekit import db_schema
import datetime
import profilekit.target
import threading
import time

#: Backup suffix, these files are skipped when reading a directory
PREV_SUFFIX = ".prev"

_QUALIFIER_SEP = ":"


class DBError(Exception):
    """Base class of database errors"""

    def __init__(self, fmt, *args, **kwargs):
        super().__init__(fmt.format(*args, **kwargs) if args or kwargs else fmt)


class ProfileNotInstalled(DBError):
    pass


class SchemaError(DBError):
    """File could not be read or written in the expected format"""

    pass


class TargetConflict(DBError):
    pass


class TargetNotFound(DBError):
    pass


class Profile:
    """Installed software with its targets

    Args:
        installer (str): may be empty
        name (str): unqualified name
        root (str): directory of the profile's sources
        targets (list): sorted `target.Target` objects
    """

    def __init__(self, installer, name, root, targets=None):
        self.installer = installer
        self.name = name
        self.root = root
        self.targets = targets or []

    def __repr__(self):
        return f"Profile({self.qualified_name} root={self.root} targets={self.targets})"

    def copy(self):
        return Profile(
            self.installer,
            self.name,
            self.root,
            [t.copy() for t in self.targets],
        )

    @property
    def qualified_name(self):
        return qualified_profile_name(self.installer, self.name)


class ProfileDB:
    """Profiles keyed by qualified name

    All operations are serialized by a lock.  `install_profile`
    returns the stored `Profile`; everything else returns copies.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._clear()

    @property
    def path(self):
        return self._path

    def add_profile_target(self, installer, name, target):
        """Add a copy of target to the profile

        The copy's `update_time` is set to now.

        Args:
            installer (str): may be empty
            name (str): profile name
            target (target.Target): must not match an existing target
        """
        q = qualified_profile_name(installer, name)
        with self._lock:
            p = self._profile(q)
            for t in p.targets:
                if target.match(t):
                    raise TargetConflict(
                        "{} is already used by profile {} {}",
                        target,
                        q,
                        [str(x) for x in p.targets],
                    )
            pkdc("profile={} target={}", q, target)
            _insert(p.targets, target)

    def clear(self):
        """Remove all profiles and reset version and path"""
        with self._lock:
            self._clear()

    def env_from_profile(self, installer, name, target):
        """Environment of the target

        Args:
            installer (str): may be empty
            name (str): profile name
            target (target.Target): to match
        Returns:
            list: ``K=V`` strings or None if profile or target is not found
        """
        t = self.lookup_profile_target(installer, name, target)
        return None if t is None else t.env

    def install_profile(self, installer, name, root):
        """Create profile if it does not exist

        Args:
            installer (str): may be empty
            name (str): profile name
            root (str): only set when the profile is created
        Returns:
            Profile: new or existing profile
        """
        q = qualified_profile_name(installer, name)
        with self._lock:
            rv = self._profiles.get(q)
            if rv is None:
                pkdc("profile={} root={}", q, root)
                rv = self._profiles[q] = Profile(
                    *split_profile_name(q),
                    root=root,
                )
            return rv

    def lookup_profile(self, installer, name):
        """Copy of profile

        Args:
            installer (str): may be empty
            name (str): profile name
        Returns:
            Profile: copy or None
        """
        with self._lock:
            rv = self._profiles.get(qualified_profile_name(installer, name))
            return None if rv is None else rv.copy()

    def lookup_profile_target(self, installer, name, target):
        """First target matching target

        Args:
            installer (str): may be empty
            name (str): profile name
            target (target.Target): to match
        Returns:
            target.Target: copy or None
        """
        with self._lock:
            p = self._profiles.get(qualified_profile_name(installer, name))
            if p is None:
                return None
            return profilekit.target.find_target(p.targets, target)

    def names(self):
        with self._lock:
            return sorted(self._profiles)

    def profiles(self):
        """Copies of all profiles sorted by qualified name

        Returns:
            list: `Profile` objects
        """
        with self._lock:
            return [self._profiles[k].copy() for k in sorted(self._profiles)]

    def read(self, path):
        """Replace contents with the database at path

        A missing path is an empty database with version `ORIGINAL`.
        An empty path is an error.
        Files in a directory must all be the same version, which must be
        at least V5.

        Args:
            path (str or py.path): file or directory
        """
        if not path:
            raise DBError("please specify a profiles database path")
        with self._lock:
            self._clear()
            self._version = db_schema.SchemaVersion.ORIGINAL
            self._path = path
            d, files = _db_files(path)
            for i, f in enumerate(files):
                try:
                    b = pkio.read_binary(f)
                except Exception as e:
                    if pkio.exception_is_not_found(e):
                        continue
                    raise
                try:
                    r = db_schema.decode(b, f)
                except Exception:
                    pkdlog("failed to read profiles database file={}", f)
                    raise
                if d:
                    if i >= 1 and self._version != r.version:
                        raise SchemaError(
                            "Profile database files must have the same version ({} != {}) when more than one is found in a directory",
                            int(self._version),
                            int(r.version),
                        )
                    if r.version < db_schema.SchemaVersion.V5:
                        raise SchemaError(
                            "Profile database files must be at version {} (not {}) when more than one is found in a directory",
                            int(db_schema.SchemaVersion.V5),
                            int(r.version),
                        )
                self._version = r.version
                for p in db_schema.migrate(r):
                    self._profiles[p.qualified_name] = p
            pkdc("path={} version={} profiles={}", path, self._version, len(self._profiles))

    def remove_profile_target(self, installer, name, target):
        """Remove first target matching target

        The profile is deleted when it has no more targets.

        Args:
            installer (str): may be empty
            name (str): profile name
            target (target.Target): to match
        Returns:
            bool: True if the profile was deleted or did not exist
        """
        q = qualified_profile_name(installer, name)
        with self._lock:
            p = self._profiles.get(q)
            if p is None:
                return True
            profilekit.target.remove_target(p.targets, target)
            if p.targets:
                return False
            pkdc("deleting profile={}", q)
            del self._profiles[q]
            return True

    def schema_version(self):
        with self._lock:
            return self._version

    def update_profile_target(self, installer, name, target):
        """Replace the first target matching target with a copy of target

        If target has no version, the copy keeps the version of the
        target it replaces so that no two targets match.

        Args:
            installer (str): may be empty
            name (str): profile name
            target (target.Target): new values
        """
        q = qualified_profile_name(installer, name)
        with self._lock:
            p = self._profiles.get(q)
            if p is None:
                raise ProfileNotInstalled("profile {} is not installed", q)
            for i, t in enumerate(p.targets):
                if target.match(t):
                    n = _now(target)
                    if not n.version:
                        n.version = t.version
                    p.targets[i] = n
                    return
            raise TargetNotFound("profile {} does not have target: {}", q, target)

    def write(self, installer, path):
        """Write profiles of installer to path

        If path is a directory, writes ``path/installer``. An existing
        file is renamed with `PREV_SUFFIX` first. The two renames are
        separate so a crash between them leaves only the backup.

        Args:
            installer (str): empty selects profiles without an installer
            path (str or py.path): file or directory
        """
        with self._lock:
            if not path:
                raise DBError("please specify a profiles database path")
            f = pkio.py_path(path)
            if f.check(dir=1):
                if not installer:
                    raise DBError("no installer specified for directory path {}", path)
                f = f.join(installer)
            p = [
                self._profiles[k]
                for k in sorted(self._profiles)
                if self._profiles[k].installer == installer
            ]
            for x in p:
                for t in x.targets:
                    if not t.version:
                        raise SchemaError(
                            "missing version for profile {} target: {}",
                            x.qualified_name,
                            t,
                        )
            n = f.new(basename=f"{f.basename}.{time.time_ns()}")
            n.write_binary(db_schema.encode(installer, p))
            try:
                f.rename(f.new(basename=f.basename + PREV_SUFFIX))
            except Exception as e:
                if not pkio.exception_is_not_found(e):
                    raise
            n.rename(f)
            pkdc("wrote file={} profiles={}", f, [x.qualified_name for x in p])

    def _clear(self):
        self._profiles = PKDict()
        self._version = db_schema.LATEST
        self._path = ""

    def _profile(self, qualified_name):
        rv = self._profiles.get(qualified_name)
        if rv is None:
            raise ProfileNotInstalled("profile {} is not installed", qualified_name)
        return rv


def qualified_profile_name(installer, name):
    """Join installer and name

    Any qualifier on name is replaced by installer.

    Args:
        installer (str): may be empty
        name (str): qualified or unqualified name
    Returns:
        str: ``installer:name`` or ``name``
    """
    i, n = split_profile_name(name)
    if installer:
        i = installer
    return i + _QUALIFIER_SEP + n if i else n


def split_profile_name(name):
    """Split a qualified name

    Args:
        name (str): ``installer:name`` or ``name``
    Returns:
        tuple: installer (may be empty) and name
    """
    i, s, n = name.partition(_QUALIFIER_SEP)
    if not s:
        return "", name
    return i, n


def _db_files(path):
    p = pkio.py_path(path)
    if not p.check(dir=1):
        return False, [p]
    return True, [
        f
        for f in sorted(p.listdir(), key=str)
        if not f.basename.endswith(PREV_SUFFIX)
    ]


def _insert(targets, value):
    profilekit.target.insert_target(targets, _now(value))


def _now(value):
    rv = value.copy()
    rv.update_time = datetime.datetime.now(datetime.timezone.utc)
    return rv
