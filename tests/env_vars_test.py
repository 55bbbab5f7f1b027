"""test profilekit.env_vars

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""


def test_tokens():
    from pykern.pkunit import pkeq
    from profilekit import env_vars

    pkeq(["a", "b"], env_vars.split_tokens(":a::b:", ":"))
    pkeq([], env_vars.split_tokens("", ":"))
    pkeq("a b", env_vars.join_tokens(["", "a", "", "b"], " "))
    pkeq(("A", "B=C"), env_vars.split_key_value("A=B=C"))
    pkeq(("A", ""), env_vars.split_key_value("A"))
    pkeq("A=", env_vars.join_key_value("A", ""))
    pkeq(dict(A="2", B=""), env_vars.slice_to_map(["A=1", "B=", "A=2"]))


def test_env_vars():
    from pykern.pkunit import pkeq, pkok
    from profilekit import env_vars

    e = env_vars.EnvVars.from_slice(["Z=1", "PATH=/a:/b", "E="])
    pkok(e.contains("E"), "empty value is present")
    pkok("Z" in e, "in operator")
    pkeq(["/a", "/b"], e.get_tokens("PATH", ":"))
    e.set_tokens("PATH", ["/c"] + e.get_tokens("PATH", ":"), ":")
    pkeq("/c:/a:/b", e.get("PATH"))
    e.delete("Z")
    e.delete("not-there")
    pkok(not e.contains("Z"), "deleted")
    pkeq("", e.get("Z"))
    pkeq(["E=", "PATH=/c:/a:/b"], e.to_slice())
    m = e.to_map()
    m.E = "changed"
    pkeq("", e.get("E"))
    pkeq(2, len(e))


def test_from_os(monkeypatch):
    from pykern.pkunit import pkeq
    from profilekit import env_vars

    monkeypatch.setenv("PROFILEKIT_ENV_VARS_TEST", "x")
    e = env_vars.EnvVars.from_os()
    pkeq("x", e.get("PROFILEKIT_ENV_VARS_TEST"))
    e.set("PROFILEKIT_ENV_VARS_TEST", "y")
    import os

    pkeq("x", os.environ["PROFILEKIT_ENV_VARS_TEST"])
