"""Element lookups and the tolerant field setters used during replication.

All lookups match on the element's local name and search descendants in
document order, so ``{urn:...pain.001.001.03}PmtInf`` and ``p:PmtInf`` are
both found as ``PmtInf``.

Two setters encode the write policy per call site:

* ``set_required_text`` - the field is expected (message id, creation
  date, batch id); a missing target is logged and recorded as a diagnostic.
* ``set_optional_text`` - the field only exists in some schema variants
  (counts, sums, transaction ids, execution date); a missing target is
  silently ignored.

Neither setter writes into an element that has children unless asked to
descend, which is how ``ReqdExctnDt/Dt`` style wrappers are filled.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Iterator, List, Optional

from batchgen.core.logging import get_logger
from batchgen.schemas.generation import Diagnostic, DiagnosticKind

logger = get_logger(__name__)


def local_name(tag: str) -> str:
    """``{uri}PmtInf`` -> ``PmtInf``."""
    return tag.rsplit("}", 1)[-1]


def namespace_of(tag: str) -> Optional[str]:
    """``{uri}PmtInf`` -> ``uri``; None for unqualified tags."""
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def iter_named(scope: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield descendants of *scope* (not *scope* itself) named *name*."""
    for el in scope.iter():
        if el is scope or not isinstance(el.tag, str):
            continue
        if local_name(el.tag) == name:
            yield el


def find_all(scope: ET.Element, name: str) -> List[ET.Element]:
    """Snapshot of matching descendants, safe to mutate the tree afterwards."""
    return list(iter_named(scope, name))


def find_first(scope: ET.Element, name: str) -> Optional[ET.Element]:
    return next(iter_named(scope, name), None)


def find_path(scope: ET.Element, path: tuple[str, ...]) -> Optional[ET.Element]:
    """Follow a chain of local names, each searched below the previous hit."""
    current: Optional[ET.Element] = scope
    for name in path:
        if current is None:
            return None
        current = find_first(current, name)
    return current


def parent_map(scope: ET.Element) -> dict[ET.Element, ET.Element]:
    """Map every descendant of *scope* to its parent."""
    return {child: parent for parent in scope.iter() for child in parent}


def insert_after(parent: ET.Element, anchor: ET.Element, new: ET.Element) -> None:
    """Insert *new* as the sibling directly following *anchor*."""
    for idx, child in enumerate(parent):
        if child is anchor:
            parent.insert(idx + 1, new)
            return
    parent.append(new)


def _first_leaf(el: ET.Element) -> ET.Element:
    while len(el):
        el = el[0]
    return el


def read_text(el: Optional[ET.Element]) -> Optional[str]:
    """Stripped text of an element (or its first leaf), or None."""
    if el is None:
        return None
    text = _first_leaf(el).text
    if text is None:
        return None
    return text.strip()


def _writable_target(
    scope: ET.Element, name: str, descend: bool
) -> Optional[ET.Element]:
    target = find_first(scope, name)
    if target is None or not len(target):
        return target
    # Containers only take a value through *descend* (ReqdExctnDt/Dt)
    return _first_leaf(target) if descend else None


def set_optional_text(
    scope: ET.Element, name: str, value: str, descend: bool = False
) -> bool:
    """Set the first *name* below *scope*; no-op when it does not exist.

    A match with child elements counts as missing unless *descend* is set,
    in which case its first leaf receives the value.
    """
    target = _writable_target(scope, name, descend)
    if target is None:
        return False
    target.text = value
    return True


def set_required_text(
    scope: ET.Element,
    name: str,
    value: str,
    diagnostics: Optional[List[Diagnostic]] = None,
    copy_index: Optional[int] = None,
) -> bool:
    """Set the first *name* below *scope*; warn when it cannot be written."""
    if set_optional_text(scope, name, value):
        return True

    message = f"No writable '{name}' element within '{local_name(scope.tag)}'"
    logger.warning(message)
    if diagnostics is not None:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.MISSING_REQUIRED_FIELD,
                message=message,
                copy_index=copy_index,
            )
        )
    return False
