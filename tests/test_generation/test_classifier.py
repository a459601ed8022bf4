"""Tests for message type classification."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from batchgen.schemas.generation import DiagnosticKind
from batchgen.services.generation.classifier import (
    ClassificationOutcome,
    classify,
    detect_type_code,
    type_code_from_namespace,
)
from batchgen.services.generation.profiles import DEFAULT_PROFILE, PROFILES


class TestTypeCodeFromNamespace:
    @pytest.mark.parametrize(
        "namespace, expected",
        [
            ("urn:iso:std:iso:20022:tech:xsd:pain.001.001.03", "PAIN1V3"),
            ("urn:iso:std:iso:20022:tech:xsd:pain.001.001.09", "PAIN1V9"),
            ("urn:iso:std:iso:20022:tech:xsd:pacs.008.001.02", "PACS8V2"),
            ("urn:iso:std:iso:20022:tech:xsd:camt.053.001.02", "CAMT53V2"),
        ],
    )
    def test_iso_namespaces(self, namespace, expected):
        assert type_code_from_namespace(namespace) == expected

    @pytest.mark.parametrize(
        "namespace",
        [None, "", "urn:example:payments", "urn:x:pain.001.03", "urn:x:pain.abc.001.03"],
    )
    def test_unusable_namespaces(self, namespace):
        assert type_code_from_namespace(namespace) is None


class TestClassifyTemplates:
    @pytest.mark.parametrize(
        "filename, code",
        [
            ("pain.001.001.03.xml", "PAIN1V3"),
            ("pain.001.001.09.xml", "PAIN1V9"),
            ("pain.007.001.02.xml", "PAIN7V2"),
            ("pain.008.001.02.xml", "PAIN8V2"),
            ("pacs.008.001.02.xml", "PACS8V2"),
            ("camt.053.001.02.xml", "CAMT53V2"),
        ],
    )
    def test_recognized_families(self, template_bytes, filename, code):
        root = ET.fromstring(template_bytes(filename))
        result = classify(root)

        assert result.outcome is ClassificationOutcome.RECOGNIZED
        assert result.recognized
        assert result.code == code
        assert result.type_code == code
        assert result.profile is PROFILES[code]
        assert result.diagnostic is None

    def test_local_name_fallback_without_namespace(self):
        """No namespace: the message wrapper's local name decides."""
        root = ET.fromstring(
            b"<Document><CstmrPmtRvsl><GrpHdr/></CstmrPmtRvsl></Document>"
        )
        assert detect_type_code(root) == "PAIN7V2"
        assert classify(root).profile is PROFILES["PAIN7V2"]

    def test_first_element_child_is_the_wrapper(self):
        root = ET.fromstring(
            b"<Document><!-- note --><FIToFICstmrCdtTrf/><Other/></Document>"
        )
        assert detect_type_code(root) == "PACS8V2"


class TestUnknownMessageType:
    def test_unregistered_version_uses_default_profile(self, template_bytes):
        """pain.001.001.11 parses to a code with no profile of its own."""
        root = ET.fromstring(template_bytes("pain.001.001.11.xml"))
        result = classify(root)

        assert result.outcome is ClassificationOutcome.UNKNOWN
        assert not result.recognized
        assert result.code == "PAIN1V11"
        assert result.type_code == "PAIN1V11"
        assert result.profile is DEFAULT_PROFILE
        assert result.diagnostic is not None
        assert result.diagnostic.kind is DiagnosticKind.UNKNOWN_MESSAGE_TYPE

    def test_unresolvable_template_names_with_default_code(self):
        root = ET.fromstring(b"<Document><Something><PmtInf/></Something></Document>")
        result = classify(root)

        assert result.code == "UNKNOWN"
        assert result.type_code == DEFAULT_PROFILE.type_code
        assert result.profile is DEFAULT_PROFILE

    def test_empty_document(self):
        root = ET.fromstring(b"<Document/>")
        assert detect_type_code(root) == "UNKNOWN"
        assert classify(root).outcome is ClassificationOutcome.UNKNOWN
