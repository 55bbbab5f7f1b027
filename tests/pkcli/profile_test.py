"""test profilekit.pkcli.profile

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

import pytest


def test_env(monkeypatch):
    from pykern import pkunit
    from pykern.pkunit import pkeq
    from profilekit import reader
    from profilekit.pkcli import profile

    monkeypatch.setitem(reader.cfg, "root_dir", "/r")
    p = str(pkunit.data_dir().join("profiles.xml"))
    pkeq(
        "\n".join(
            [
                "CGO_CFLAGS=-I/go -I/tools",
                "GOPATH=/r/tools",
                "GOROOT=/go",
                "PATH=/go/bin:/tools/bin",
            ]
        ),
        profile.env("amd64-linux", "go", "tools", db_path=p),
    )
    pkeq(
        "CGO_CFLAGS=-I/tools -I/go\nGOPATH=/r/tools\nGOROOT=/go\nPATH=/tools/bin:/go/bin",
        profile.env(
            "amd64-linux",
            "tools",
            "go",
            db_path=p,
            merge_policies="+CGO_CFLAGS,^GOROOT*,:PATH",
        ),
    )
    monkeypatch.setitem(reader.cfg, "db_path", p)
    monkeypatch.setitem(reader.cfg, "profiles", ("tools",))
    pkeq("GOARM=7", profile.env("arm-linux@2"))


def test_env_errors(monkeypatch):
    from pykern import pkunit
    from pykern.pkcli import CommandError
    from pykern.pkunit import pkexcept
    from profilekit.pkcli import profile

    p = str(pkunit.data_dir().join("profiles.xml"))
    with pkexcept("doesn't look like <arch>-<os>"):
        profile.env("amd64", "go", db_path=p)
    with pkexcept(r"'arm-linux@' for 'go' is not available"):
        profile.env("arm-linux", "go", "tools", db_path=p)
    with pkexcept(r"(?s)does not name a variable.*\^:<var>"):
        profile.env("amd64-linux", "go", db_path=p, merge_policies="^")
    with pkexcept(CommandError):
        profile.env("amd64-linux", "go", db_path="")
    with pkunit.save_chdir_work():
        with open("bad.xml", "w") as f:
            f.write("<profiles>")
        with pkexcept("Unmarshal.*failed"):
            profile.list(db_path="bad.xml")
        with open("bad_date.xml", "w") as f:
            f.write(
                '<profiles version="5"><profile name="p">'
                '<target arch="a" os="b" version="1" date="yesterday"/>'
                "</profile></profiles>"
            )
        with pkexcept(CommandError):
            profile.list(db_path="bad_date.xml")


def test_list():
    from pykern import pkunit
    from pykern.pkunit import pkeq
    from profilekit.pkcli import profile

    p = str(pkunit.data_dir().join("profiles.xml"))
    pkeq("go\ntools", profile.list(db_path=p))
    pkeq(
        "\n".join(
            [
                "go",
                "  amd64-linux@1.5 /go",
                "tools",
                "  amd64-linux@2 /tools",
                "  arm-linux@2 /tools_arm",
            ]
        ),
        profile.list(db_path=p, show_targets=True),
    )
    pkeq("", profile.list(db_path=str(pkunit.work_dir().join("missing.xml"))))


def test_policies():
    from pykern.pkcli import CommandError
    from pykern.pkunit import pkeq, pkexcept, pkre
    from profilekit.pkcli import profile

    pkeq(
        "x:,-y\nx: prepend using ':'\ny: ignore",
        profile.policies("-y,x:"),
    )
    pkre(r"^\+CCFLAGS,.*GOARCH,.*\nCCFLAGS: append using ' '\n", profile.policies())
    with pkexcept(CommandError):
        profile.policies("a,,b")
