"""test profilekit.reader

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""


def test_merge_env_from_profiles():
    from pykern.pkcollections import PKDict
    from pykern.pkunit import pkeq
    from profilekit import env_vars
    from profilekit import merge_policy as mp
    from profilekit import target

    r = _reader(env_vars.EnvVars())
    t = target.parse_target("cpu1-os1@1")
    r.merge_env_from_profiles(
        PKDict(
            A=mp.APPEND_FLAG,
            B=mp.USE_LAST,
            Z=mp.IGNORE_BASE_USE_LAST,
        ),
        t,
        "a",
        "t:b",
        "not-installed",
    )
    pkeq(["A=B C=D Z", "B=Z", "Z=Z1"], r.env.to_slice())


def test_expand_root(monkeypatch):
    from pykern.pkcollections import PKDict
    from pykern.pkunit import pkeq
    from profilekit import env_vars
    from profilekit import reader
    from profilekit import target

    monkeypatch.setitem(reader.cfg, "root_dir", "/top")
    r = reader.Reader(db_path="", env=env_vars.EnvVars())
    r.db.install_profile("", "a", "")
    x = target.parse_target("cpu1-os1@1")
    x.env = ["P=${JIRI_ROOT}/bin:${JIRI_ROOT}/sbin", "Q=$JIRI_ROOT"]
    r.db.add_profile_target("", "a", x)
    r.merge_env_from_profiles(PKDict(), x, "a")
    pkeq(["P=/top/bin:/top/sbin", "Q=$JIRI_ROOT"], r.env.to_slice())


def test_validate():
    from pykern.pkunit import pkexcept
    from profilekit import env_vars
    from profilekit import profile_db
    from profilekit import target

    r = _reader(env_vars.EnvVars())
    r.validate_requested_profiles_and_target(
        ["a", "t:b"],
        target.parse_target("cpu1-os1"),
    )
    with pkexcept(profile_db.ProfileNotInstalled):
        r.validate_requested_profiles_and_target(
            ["a"],
            target.parse_target("cpu2-os1"),
        )
    with pkexcept("'cpu1-os1@1' for 'b' is not available or not installed"):
        r.validate_requested_profiles_and_target(
            ["a", "b"],
            target.parse_target("cpu1-os1@1"),
        )
    r.skip_profiles = True
    r.validate_requested_profiles_and_target(["b"], target.parse_target("x-y"))


def test_read_db(monkeypatch):
    from pykern import pkunit
    from pykern.pkunit import pkeq, pkok
    from profilekit import db_schema
    from profilekit import env_vars
    from profilekit import reader
    from profilekit import target

    p = pkunit.data_dir().join("m1.xml")
    monkeypatch.setitem(reader.cfg, "db_path", str(p))
    r = reader.Reader(env=env_vars.EnvVars())
    pkeq(str(p), r.path)
    pkeq(["test:a", "test:b"], r.profile_names())
    pkeq(db_schema.SchemaVersion.V5, r.schema_version())
    pkeq("test", r.lookup_profile("test:a").installer)
    pkeq(
        "bar",
        r.lookup_profile_target("test:b", target.parse_target("cpu2-os2"))
        .installation_dir,
    )
    pkeq(
        ["A=B", "C=D"],
        r.env_from_profile("test:a", target.parse_target("cpu1-os1@1")),
    )
    pkeq(2, len(r.profiles()))
    r = reader.Reader(skip_profiles=True, env=env_vars.EnvVars())
    pkeq([], r.profile_names())
    pkok(r.skip_profiles, "skip_profiles")


def test_env_and_path(monkeypatch):
    from pykern.pkcollections import PKDict
    from pykern.pkunit import pkeq
    from profilekit import env_vars
    from profilekit import merge_policy as mp
    from profilekit import reader

    monkeypatch.setenv("PATH", "/usr/bin:/bin")
    r = reader.Reader(db_path="")
    pkeq("/usr/bin:/bin", r.env.get("PATH"))
    r.prepend_to_path("/opt/bin")
    pkeq("/opt/bin:/usr/bin:/bin", r.env.get("PATH"))
    r = reader.Reader(db_path="", env=env_vars.EnvVars.from_slice(["X=1"]))
    r.merge_env(PKDict(X=mp.APPEND_PATH), ["X=2"], ["X=3", "Y=4"])
    pkeq(["X=1:2:3", "Y=4"], r.env.to_slice())


def _reader(env):
    from profilekit import reader
    from profilekit import target

    rv = reader.Reader(db_path="", env=env)
    for i, n, e in (
        ("", "a", ["A=B C=D", "B=C", "Z=Z"]),
        ("t", "b", ["A=Z", "B=Z", "Z=Z1"]),
    ):
        rv.db.install_profile(i, n, "")
        x = target.parse_target("cpu1-os1@1")
        x.env = e
        rv.db.add_profile_target(i, n, x)
    return rv
