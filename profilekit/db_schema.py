"""XML codec for profile database files

Each schema version has its own decoder which produces a record::

    PKDict(
        version=SchemaVersion,
        profiles=[
            PKDict(
                installer=str,
                name=str,
                root=str,
                targets=[
                    PKDict(
                        arch=str,
                        os=str,
                        version=str,
                        installation_dir=str,
                        update_time=datetime or None,
                        env=list,
                        command_line_env=list,
                    ),
                ],
            ),
        ],
    )

`migrate` turns any record into `profile_db.Profile` objects, and
`encode` always writes the latest version.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from lxml import etree
from pykern.pkcollections import PKDict
from pykern.pkdebug import pkdc
from profilekit import profile_db
from profilekit import target
import dateutil.parser
import enum


class SchemaVersion(enum.IntEnum):
    # old style profiles without a version attribute
    ORIGINAL = 0
    V2 = 2
    # records the command line environment used at install
    V3 = 3
    # paths may be relative to the root variable
    V4 = 4
    # one file per installer
    V5 = 5


#: Version written by `encode`
LATEST = SchemaVersion.V5


class _InvalidDate(ValueError):
    pass


def decode(data, filename):
    """Parse a database file into a versioned record

    Args:
        data (bytes): contents of filename
        filename (object): used in error messages
    Returns:
        PKDict: record, see module doc
    """
    try:
        r = etree.fromstring(data)
    except etree.XMLSyntaxError as e:
        raise profile_db.SchemaError("Unmarshal({}) failed: {}", filename, e)
    if r.tag != "profiles":
        raise profile_db.SchemaError(
            "Unmarshal({}) failed: root element={} is not profiles", filename, r.tag
        )
    v = r.get("version", "0")
    try:
        v = SchemaVersion(int(v))
    except ValueError:
        raise profile_db.SchemaError(
            "unsupported profiles version={} in file={}", v, filename
        )
    pkdc("file={} version={}", filename, v)
    try:
        p = _DECODERS[v](r)
    except _InvalidDate as e:
        raise profile_db.SchemaError(
            "Unmarshal({}) failed: bad date={!r}: {}", filename, *e.args
        )
    return PKDict(version=v, profiles=p)


def encode(installer, profiles):
    """Serialize profiles at the latest schema version

    Targets must have versions, which `profile_db.ProfileDB.write` checks.

    Args:
        installer (str): written as an attribute if not empty
        profiles (list): `profile_db.Profile` objects, written in order
    Returns:
        bytes: indented XML with declaration
    """
    r = etree.Element("profiles", version=str(int(LATEST)))
    if installer:
        r.set("installer", installer)
    for p in profiles:
        try:
            e = etree.SubElement(r, "profile", name=p.name, root=p.root)
        except ValueError as x:
            raise profile_db.SchemaError(
                "invalid value in profile {}: {}", p.qualified_name, x
            )
        for t in p.targets:
            try:
                _encode_target(e, t)
            except ValueError as x:
                raise profile_db.SchemaError(
                    "invalid value in profile {} target: {}: {}",
                    p.qualified_name,
                    t,
                    x,
                )
    return etree.tostring(
        r,
        encoding="UTF-8",
        pretty_print=True,
        xml_declaration=True,
    )


def migrate(record):
    """Convert a record of any version into profiles

    Names which are qualified by an installer are split unless the
    record has an installer, which takes precedence.

    Args:
        record (PKDict): from `decode`
    Returns:
        list: `profile_db.Profile` objects in file order
    """
    rv = []
    for p in record.profiles:
        i, n = profile_db.split_profile_name(p.name)
        rv.append(
            profile_db.Profile(
                installer=p.installer or i,
                name=n,
                root=p.root,
                targets=[
                    target.Target(
                        arch=t.arch,
                        os=t.os,
                        version=t.version,
                        env=t.env,
                        command_line_env=t.command_line_env,
                        installation_dir=t.installation_dir,
                        update_time=t.update_time,
                        is_set=True,
                    )
                    for t in p.targets
                ],
            ),
        )
    return rv


def _decode_original(root):
    # Names may be qualified; targets may carry an obsolete tag attribute
    return [
        PKDict(
            installer="",
            name=p.get("name", ""),
            root=p.get("root", ""),
            targets=[
                PKDict(
                    _target_attrs(t),
                    env=_decode_vars(t, "envvars"),
                    command_line_env=[],
                )
                for t in p.iterfind("target")
            ],
        )
        for p in root.iterfind("profile")
    ]


def _decode_v2(root):
    # Adds the version attribute only
    return _decode_original(root)


def _decode_v3(root):
    return [
        PKDict(
            installer="",
            name=p.get("name", ""),
            root=p.get("root", ""),
            targets=[
                PKDict(
                    _target_attrs(t),
                    env=_decode_vars(t, "envvars"),
                    command_line_env=_decode_vars(t, "command-line"),
                )
                for t in p.iterfind("target")
            ],
        )
        for p in root.iterfind("profile")
    ]


def _decode_v4(root):
    # Paths and values may start with the root variable, which are kept as is
    return _decode_v3(root)


def _decode_v5(root):
    i = root.get("installer", "")
    return [
        PKDict(
            installer=i,
            name=p.get("name", ""),
            root=p.get("root", ""),
            targets=[
                PKDict(
                    _target_attrs(t),
                    env=_decode_vars(t, "envvars"),
                    command_line_env=_decode_vars(t, "command-line"),
                )
                for t in p.iterfind("target")
            ],
        )
        for p in root.iterfind("profile")
    ]


def _decode_vars(element, tag):
    e = element.find(tag)
    if e is None:
        return []
    return [v.text or "" for v in e.iterfind("var")]


def _encode_target(profile, target):
    x = etree.SubElement(
        profile,
        "target",
        arch=target.arch,
        os=target.os,
        version=target.version,
    )
    x.set("installation-directory", target.installation_dir)
    if target.update_time is not None:
        x.set("date", target.update_time.isoformat())
    _encode_vars(x, "envvars", sorted(target.env))
    _encode_vars(x, "command-line", target.command_line_env)


def _encode_vars(element, tag, values):
    e = etree.SubElement(element, tag)
    for v in values:
        etree.SubElement(e, "var").text = v


def _parse_date(value):
    if not value:
        return None
    try:
        return dateutil.parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        raise _InvalidDate(value, e)


def _target_attrs(element):
    return PKDict(
        arch=element.get("arch", ""),
        os=element.get("os", ""),
        version=element.get("version", ""),
        installation_dir=element.get("installation-directory", ""),
        update_time=_parse_date(element.get("date")),
    )


_DECODERS = {
    SchemaVersion.ORIGINAL: _decode_original,
    SchemaVersion.V2: _decode_v2,
    SchemaVersion.V3: _decode_v3,
    SchemaVersion.V4: _decode_v4,
    SchemaVersion.V5: _decode_v5,
}
