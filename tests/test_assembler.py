"""Tests for sxsgen.assembler."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from sxsgen.assembler import ManifestAssembler
from sxsgen.dependencies import COMMON_CONTROLS_IDENTITY
from sxsgen.directory import InMemoryComponentDirectory
from sxsgen.models import (
    AssemblyIdentity,
    ComClassRecord,
    DependentAssemblyEntry,
    FileEntry,
    InterfaceRecord,
    ManifestDocument,
    RawDependentAssemblyEntry,
    TypeLibraryRecord,
)
from tests._fixtures.component_builder import GAUGE_CLSID, GAUGE_IID, PROXY_STUB_CLSID, WIDGETS_LIB

NS = {"asm": "urn:schemas-microsoft-com:asm.v1"}


def _document() -> ManifestDocument:
    typelib = TypeLibraryRecord(
        library_id=WIDGETS_LIB,
        version="2.1",
        flags="control",
        classes=(
            ComClassRecord(
                class_id=GAUGE_CLSID,
                type_library_id=WIDGETS_LIB,
                prog_id="Widgets.Gauge.2",
                nested_prog_id="Widgets.Gauge",
                threading_model="Apartment",
                misc_status=(("miscStatus", "recomposeOnResize"),),
            ),
        ),
    )
    return ManifestDocument(
        identity=AssemblyIdentity(name="App", version="1.2.0.3"),
        description="Demo & friends",
        entries=[
            DependentAssemblyEntry(COMMON_CONTROLS_IDENTITY),
            FileEntry(name="Widgets.ocx", typelib=typelib),
        ],
        interfaces=[
            InterfaceRecord(name="_Gauge", interface_id=GAUGE_IID),
            InterfaceRecord(name="_Unregistered", interface_id="{00000000-0000-0000-0000-00000000000A}"),
        ],
    )


def _assembler() -> ManifestAssembler:
    return ManifestAssembler(InMemoryComponentDirectory(interfaces={GAUGE_IID: PROXY_STUB_CLSID}))


def test_render_starts_with_declaration_and_root() -> None:
    text = _assembler().render(_document())

    lines = text.splitlines()
    assert lines[0] == '<?xml version="1.0" encoding="utf-8" standalone="yes"?>'
    assert lines[1] == (
        '<assembly manifestVersion="1.0" xmlns="urn:schemas-microsoft-com:asm.v1" '
        'xmlns:asmv3="urn:schemas-microsoft-com:asm.v3">'
    )
    assert lines[2] == (
        '    <assemblyIdentity name="App" processorArchitecture="X86" type="win32" version="1.2.0.3" />'
    )
    assert "\r" not in text
    assert text.endswith("</assembly>\n")


def test_assemble_round_trips_through_an_xml_parser() -> None:
    data = _assembler().assemble(_document())

    assert data.tell() == 0
    root = ET.fromstring(data.getvalue())
    identity = root.find("asm:assemblyIdentity", NS)
    assert identity is not None
    assert identity.attrib["name"] == "App"
    assert identity.attrib["version"] == "1.2.0.3"
    assert root.findtext("asm:description", namespaces=NS) == "Demo & friends"

    dependency = root.find("asm:dependency/asm:dependentAssembly/asm:assemblyIdentity", NS)
    assert dependency is not None
    assert dependency.attrib["name"] == "Microsoft.Windows.Common-Controls"
    assert dependency.attrib["publicKeyToken"] == "6595b64144ccf1df"

    file_element = root.find("asm:file", NS)
    assert file_element is not None
    assert file_element.attrib["name"] == "Widgets.ocx"
    typelib = file_element.find("asm:typelib", NS)
    assert typelib is not None
    assert typelib.attrib == {"tlbid": WIDGETS_LIB, "version": "2.1", "flags": "control", "helpdir": ""}
    com_class = file_element.find("asm:comClass", NS)
    assert com_class is not None
    assert com_class.attrib["progid"] == "Widgets.Gauge.2"
    assert com_class.attrib["threadingModel"] == "Apartment"
    assert com_class.attrib["miscStatus"] == "recomposeOnResize"
    assert com_class.findtext("asm:progid", namespaces=NS) == "Widgets.Gauge"


def test_proxy_stubs_are_looked_up_at_render_time() -> None:
    root = ET.fromstring(_assembler().assemble(_document()).getvalue())

    stubs = root.findall("asm:comInterfaceExternalProxyStub", NS)
    assert [stub.attrib["name"] for stub in stubs] == ["_Gauge", "_Unregistered"]
    assert stubs[0].attrib["proxyStubClsid32"] == PROXY_STUB_CLSID
    assert stubs[1].attrib["proxyStubClsid32"] == ""


def test_entries_render_in_order_before_interfaces() -> None:
    text = _assembler().render(_document())

    assert text.index("<dependency>") < text.index("<file ") < text.index("<comInterfaceExternalProxyStub")


def test_class_without_nested_prog_id_is_self_closing() -> None:
    document = _document()
    record = ComClassRecord(class_id=GAUGE_CLSID, type_library_id=WIDGETS_LIB, threading_model="Both")
    document.entries = [
        FileEntry(
            name="Widgets.ocx",
            typelib=TypeLibraryRecord(library_id=WIDGETS_LIB, version="2.1", flags="", classes=(record,)),
        )
    ]

    text = _assembler().render(document)

    assert f'<comClass clsid="{GAUGE_CLSID}" tlbid="{WIDGETS_LIB}" threadingModel="Both" />' in text
    assert 'flags=""' in text


def test_raw_dependencies_are_emitted_verbatim() -> None:
    markup = '<assemblyIdentity name="Vendor.Grid" type="win32" version="5.0.0.0" />'
    document = ManifestDocument(
        identity=AssemblyIdentity(name="Suite", version="1.0.0.0"),
        description="",
        entries=[RawDependentAssemblyEntry(markup)],
    )

    text = _assembler().render(document)

    assert f"            {markup}\n" in text


def test_rendering_is_deterministic() -> None:
    assembler = _assembler()

    assert assembler.assemble(_document()).getvalue() == assembler.assemble(_document()).getvalue()


def test_manifest_without_dependencies() -> None:
    document = ManifestDocument(identity=AssemblyIdentity(name="App", version="1.2.0.3"), description="Demo")

    text = _assembler().render(document)

    assert "<description>Demo</description>" in text
    assert "<dependency>" not in text
    assert "<file" not in text
