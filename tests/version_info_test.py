"""test profilekit.version_info

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""


def test_version_info():
    from pykern.pkcollections import PKDict
    from pykern.pkunit import pkeq, pkexcept, pkok
    from profilekit import version_info

    class _Spec:
        pass

    s = _Spec()
    v = version_info.VersionInfo(
        "test",
        {"3": "3x", "5": "5x", "4": "4x", "6": s},
        "3",
    )
    pkeq(["6", "5", "4", "3"], v.supported())
    v.supported().append("x")
    pkeq(4, len(v.supported()))
    pkeq("3", v.default)
    pkeq("4x", v.lookup("4", str))
    pkeq("3x", v.lookup("", str))
    pkok(v.lookup("6", _Spec) is s, "lookup returns stored object")
    with pkexcept(TypeError):
        v.lookup("6", str)
    with pkexcept("mismatched types: str is not int"):
        v.lookup("5", int)
    with pkexcept(version_info.UnsupportedVersion):
        v.lookup("7", str)
    pkeq("3", v.select(""))
    pkeq("5", v.select("5"))
    with pkexcept("unsupported version: '2' for test: 6 5 4 3\\*"):
        v.select("2")
    pkeq("test: 6 5 4 3*", str(v))
    pkok(v.is_newer_than_default("4"), "4 newer than 3")
    pkok(not v.is_newer_than_default("3"), "3 not newer than 3")
    pkok(v.is_older_than_default("2"), "2 older than 3")
    pkok(not v.is_older_than_default("4"), "4 not older than 3")
    x = version_info.VersionInfo("meta", PKDict(a=PKDict(x=1)), "a")
    pkeq(1, x.lookup("a", dict).x)
