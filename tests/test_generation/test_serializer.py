"""Tests for template loading and XML serialization."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from batchgen.core.exceptions import TemplateParseError
from batchgen.services.generation.loader import load_template
from batchgen.services.generation.serializer import serialize

PAIN001_NS = "urn:iso:std:iso:20022:tech:xsd:pain.001.001.03"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"


class TestLoadTemplate:
    @pytest.mark.parametrize("content", [b"", b"   \n  "])
    def test_empty_template(self, content):
        with pytest.raises(TemplateParseError):
            load_template(content)

    def test_malformed_template(self):
        with pytest.raises(TemplateParseError) as exc_info:
            load_template(b"<Document><GrpHdr></Document>")
        assert exc_info.value.code == "TEMPLATE_PARSE_ERROR"

    def test_namespaces_captured(self, pain001_bytes):
        template = load_template(pain001_bytes)

        assert template.namespaces == {"": PAIN001_NS, "xsi": XSI_NS}
        assert template.default_namespace == PAIN001_NS
        assert template.root.tag == f"{{{PAIN001_NS}}}Document"

    def test_no_namespace(self):
        template = load_template(b"<Document><A/></Document>")
        assert template.namespaces == {}
        assert template.default_namespace is None

    def test_clone_shares_no_nodes(self, pain001_bytes):
        template = load_template(pain001_bytes)
        clone = template.clone()

        clone[0].remove(clone[0][0])
        assert len(template.root[0]) == 3
        assert len(clone[0]) == 2


class TestSerialize:
    def test_declaration_and_stripping(self, pain001_bytes):
        template = load_template(pain001_bytes)
        output = serialize(template.root, template.default_namespace)

        assert output.startswith(b"<?xml version='1.0' encoding='utf-8'?>")
        assert output.endswith(b"</Document>")
        assert output == output.strip()

    def test_default_namespace_without_generated_prefixes(self, pain001_bytes):
        template = load_template(pain001_bytes)
        output = serialize(template.root, template.default_namespace)

        assert f'<Document xmlns="{PAIN001_NS}">'.encode() in output
        assert b"ns0:" not in output
        assert b'<InstdAmt Ccy="EUR">1000.25</InstdAmt>' in output

    def test_four_space_indent(self, pain001_bytes):
        template = load_template(pain001_bytes)
        output = serialize(template.root, template.default_namespace)

        assert b"\n    <CstmrCdtTrfInitn>" in output
        assert b"\n        <GrpHdr>" in output
        assert b"\t" not in output

    def test_deterministic_and_input_untouched(self, pain001_bytes):
        template = load_template(pain001_bytes)
        before = ET.tostring(template.root)

        first = serialize(template.root, template.default_namespace)
        second = serialize(template.root, template.default_namespace)

        assert first == second
        assert ET.tostring(template.root) == before

    def test_output_parses_back_to_same_namespace(self, pain001_bytes):
        template = load_template(pain001_bytes)
        reparsed = load_template(serialize(template.root, template.default_namespace))

        assert reparsed.default_namespace == PAIN001_NS
        assert [el.tag for el in reparsed.root.iter()] == [
            el.tag for el in template.root.iter()
        ]

    def test_prefixed_template_keeps_its_prefix(self):
        content = (
            b'<p:Document xmlns:p="urn:example:prefixed">'
            b"<p:GrpHdr><p:MsgId>1</p:MsgId></p:GrpHdr></p:Document>"
        )
        template = load_template(content)
        output = serialize(template.root, template.default_namespace)

        assert b'<p:Document xmlns:p="urn:example:prefixed">' in output
        assert b"<p:MsgId>1</p:MsgId>" in output

    def test_unqualified_tree_ignores_default_namespace(self):
        root = ET.fromstring(b"<Document><A>1</A></Document>")
        output = serialize(root, "urn:example:ignored")

        assert b"xmlns" not in output
        assert b"<A>1</A>" in output
