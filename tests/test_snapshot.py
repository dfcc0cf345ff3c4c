"""Tests for sxsgen.snapshot."""

from __future__ import annotations

from pathlib import Path

import pytest

from sxsgen.config import ConfigError
from sxsgen.models import canonical_path
from sxsgen.snapshot import load_snapshot, parse_snapshot

SNAPSHOT = """
typelibs:
  "{5A1B2C3D-0001-4E5F-8A9B-0C1D2E3F4A5B}":
    "2.1": bin/Widgets.ocx
classes:
  "{5A1B2C3D-0002-4E5F-8A9B-0C1D2E3F4A5B}":
    threading_model: Apartment
    prog_id: Widgets.Gauge.2
    version_independent_prog_id: Widgets.Gauge
    misc_status: {0: 131473}
interfaces:
  "{5A1B2C3D-0003-4E5F-8A9B-0C1D2E3F4A5B}": "{00020424-0000-0000-C000-000000000046}"
binaries:
  bin/Widgets.ocx:
    version: 2.1.0.7
    typelib:
      id: "{5A1B2C3D-0001-4E5F-8A9B-0C1D2E3F4A5B}"
      version: "2.1"
      flags: 10
      classes:
        - id: "{5A1B2C3D-0002-4E5F-8A9B-0C1D2E3F4A5B}"
          flags: 34
          default_interface: {name: _Gauge, id: "{5A1B2C3D-0003-4E5F-8A9B-0C1D2E3F4A5B}"}
"""


def test_load_snapshot_populates_all_collaborators(tmp_path: Path) -> None:
    path = tmp_path / "registry.yml"
    path.write_text(SNAPSHOT, encoding="utf-8")

    snapshot = load_snapshot(path)

    widgets = canonical_path(tmp_path / "bin" / "Widgets.ocx")
    assert snapshot.root == tmp_path.resolve()
    assert snapshot.directory.type_library_path("{5a1b2c3d-0001-4e5f-8a9b-0c1d2e3f4a5b}", "2.1") == (
        "bin/Widgets.ocx"
    )
    registration = snapshot.directory.class_registration("{5A1B2C3D-0002-4E5F-8A9B-0C1D2E3F4A5B}")
    assert registration is not None
    assert registration.version_independent_prog_id == "Widgets.Gauge"
    assert registration.misc_status == {0: 131473}
    assert snapshot.directory.proxy_stub_class_id("{5A1B2C3D-0003-4E5F-8A9B-0C1D2E3F4A5B}") == (
        "{00020424-0000-0000-C000-000000000046}"
    )
    assert snapshot.version_reader.read(widgets) == (2, 1, 0, 7)
    info = snapshot.introspector.inspect(widgets)
    assert (info.major_version, info.minor_version, info.flags) == (2, 1, 10)
    assert info.classes[0].flags == 34
    assert info.classes[0].default_interface is not None
    assert info.classes[0].default_interface.name == "_Gauge"


def test_empty_snapshot(tmp_path: Path) -> None:
    snapshot = parse_snapshot({}, root=tmp_path)

    assert snapshot.directory.type_library_versions("{5A1B2C3D-0001-4E5F-8A9B-0C1D2E3F4A5B}") == []


def test_missing_snapshot_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_snapshot(tmp_path / "missing.yml")


@pytest.mark.parametrize(
    "data",
    [
        {"typelibs": ["not", "a", "mapping"]},
        {"typelibs": {"{X}": "path.dll"}},
        {"classes": {"{X}": "Apartment"}},
        {"binaries": {"a.dll": {"version": "1.0"}}},
        {"binaries": {"a.dll": {"version": "1.0.x.0"}}},
        {"binaries": {"a.dll": {"typelib": {"version": "1.0"}}}},
    ],
)
def test_malformed_snapshots_are_rejected(tmp_path: Path, data: dict) -> None:
    with pytest.raises(ConfigError):
        parse_snapshot(data, root=tmp_path)
