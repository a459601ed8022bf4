"""Template loading: bytes -> namespace-aware element tree."""

from __future__ import annotations

import copy
import io
import re
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Optional

from batchgen.core.exceptions import TemplateParseError
from batchgen.core.logging import get_logger

logger = get_logger(__name__)

# ElementTree reserves ns0, ns1, ... for prefixes it invents itself
_RESERVED_PREFIX = re.compile(r"ns\d+$")
_register_lock = threading.Lock()


@dataclass(frozen=True)
class TemplateDocument:
    """A parsed template, shared read-only by every copy of a job.

    Attributes:
        root: Root element of the parsed document.
        namespaces: Prefix -> URI declarations found in the source bytes.
            The default namespace is stored under the empty prefix.
    """

    root: ET.Element
    namespaces: dict[str, str] = field(default_factory=dict)

    @property
    def default_namespace(self) -> Optional[str]:
        return self.namespaces.get("")

    def clone(self) -> ET.Element:
        """Return a deep copy of the root that shares no nodes with it."""
        return copy.deepcopy(self.root)


def load_template(content: bytes) -> TemplateDocument:
    """Parse template bytes once per job.

    Raises:
        TemplateParseError: If the bytes are empty or not well-formed XML.
    """
    if not content or not content.strip():
        raise TemplateParseError("template is empty")

    namespaces: dict[str, str] = {}
    try:
        events = ET.iterparse(io.BytesIO(content), events=("start-ns",))
        for _event, (prefix, uri) in events:
            namespaces.setdefault(prefix, uri)
        root = events.root
    except ET.ParseError as exc:
        logger.error("Failed to parse template: %s", exc)
        raise TemplateParseError(str(exc)) from exc

    _register_prefixes(namespaces)

    logger.info(
        "Template parsed: root=%s namespaces=%d size=%d",
        root.tag,
        len(namespaces),
        len(content),
    )
    return TemplateDocument(root=root, namespaces=namespaces)


def _register_prefixes(namespaces: dict[str, str]) -> None:
    """Keep the template's own prefixes when the tree is written back out."""
    with _register_lock:
        for prefix, uri in namespaces.items():
            if not prefix or _RESERVED_PREFIX.match(prefix):
                continue
            try:
                ET.register_namespace(prefix, uri)
            except ValueError:
                logger.debug("Prefix %r not registrable, ElementTree will pick one", prefix)
