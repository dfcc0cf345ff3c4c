"""Type library introspection through ``comtypes`` (Windows only)."""

from __future__ import annotations

from typing import List, Optional

import comtypes
import comtypes.typeinfo

from ..logging import get_logger
from ..models import CoClassInfo, InterfaceInfo, TypeLibraryInfo
from .base import IntrospectionError, TypeLibraryIntrospector

_LOGGER = get_logger("introspection.comtypes")


class ComTypesIntrospector(TypeLibraryIntrospector):
    """Loads a type library without registering it and lists its CoClasses."""

    def inspect(self, path: str) -> TypeLibraryInfo:
        try:
            type_lib = comtypes.typeinfo.LoadTypeLibEx(path, comtypes.typeinfo.REGKIND_NONE)
            lib_attr = type_lib.GetLibAttr()
        except (comtypes.COMError, OSError) as exc:
            raise IntrospectionError(f"Cannot load type library from {path}: {exc}") from exc

        classes: List[CoClassInfo] = []
        for index in range(type_lib.GetTypeInfoCount()):
            type_info = type_lib.GetTypeInfo(index)
            type_attr = type_info.GetTypeAttr()
            if type_attr.typekind != comtypes.typeinfo.TKIND_COCLASS:
                continue
            classes.append(
                CoClassInfo(
                    class_id=str(type_attr.guid),
                    flags=int(type_attr.wTypeFlags),
                    default_interface=_default_interface(type_info, type_attr.cImplTypes),
                )
            )

        _LOGGER.debug("Loaded type library %s with %d classes", path, len(classes))
        return TypeLibraryInfo(
            library_id=str(lib_attr.guid),
            major_version=int(lib_attr.wMajorVerNum),
            minor_version=int(lib_attr.wMinorVerNum),
            flags=int(lib_attr.wLibFlags),
            classes=tuple(classes),
        )


def _default_interface(type_info, impl_count: int) -> Optional[InterfaceInfo]:
    for index in range(impl_count):
        impl_flags = type_info.GetImplTypeFlags(index)
        if not impl_flags & comtypes.typeinfo.IMPLTYPEFLAG_FDEFAULT:
            continue
        if impl_flags & comtypes.typeinfo.IMPLTYPEFLAG_FSOURCE:
            continue
        ref_info = type_info.GetRefTypeInfo(type_info.GetRefTypeOfImplType(index))
        name = ref_info.GetDocumentation(-1)[0]
        return InterfaceInfo(name=name, interface_id=str(ref_info.GetTypeAttr().guid))
    return None


__all__ = ["ComTypesIntrospector"]
