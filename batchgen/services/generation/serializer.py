"""Deterministic XML serialization of a generated copy."""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from typing import Optional

INDENT = "    "


def serialize(root: ET.Element, default_namespace: Optional[str] = None) -> bytes:
    """Render *root* as indented UTF-8 bytes.

    The input tree is left untouched: indentation is applied to a private
    copy, so the same tree always yields the same bytes.

    Args:
        root: Root element to write.
        default_namespace: Namespace to emit as ``xmlns="..."`` instead of a
            generated prefix.  Ignored when the tree holds unqualified
            elements, which would otherwise be pulled into that namespace.
    """
    tree = copy.deepcopy(root)
    ET.indent(tree, space=INDENT)

    if default_namespace and _all_qualified(tree):
        _unqualify(tree, default_namespace)

    rendered = ET.tostring(tree, encoding="utf-8", xml_declaration=True)
    return rendered.strip()


def _all_qualified(root: ET.Element) -> bool:
    return all(
        el.tag.startswith("{") for el in root.iter() if isinstance(el.tag, str)
    )


def _unqualify(root: ET.Element, namespace: str) -> None:
    # ElementTree's own default_namespace option rejects unqualified
    # attributes (Ccy="EUR"), so the declaration is written by hand
    prefix = "{%s}" % namespace
    for el in root.iter():
        if isinstance(el.tag, str) and el.tag.startswith(prefix):
            el.tag = el.tag[len(prefix):]
    attrib = {"xmlns": namespace, **root.attrib}
    root.attrib.clear()
    root.attrib.update(attrib)
