"""
Tests: Relationship Matcher (requirement vs. whole corpus).

Run with:
    pytest compliance_matching/tests/test_relationship_matcher.py -v
"""

import pytest
from compliance_matching.catalog.loader import load_catalog
from compliance_matching.matching.document_matcher import DocumentMatcher
from compliance_matching.matching.relationship_matcher import CorpusView, RelationshipMatcher
from compliance_matching.matching.rules_config import MatchingConfig, RelationshipConfig
from compliance_matching.models.enums import (
    DocumentType,
    FulfillmentType,
    MatchType,
    RelationshipType,
)
from compliance_matching.models.schemas import MatchResult, OrgDocument, StandardRequirement


class _StubMatcher:
    """Document matcher returning canned results per document id."""

    def __init__(self, results: dict[str, MatchResult]):
        self.results = results

    def match_document(self, doc, requirement):
        return self.results.get(doc.id, MatchResult())


def _hit(confidence: float = 0.5) -> MatchResult:
    return MatchResult(is_match=True, confidence=confidence, match_type=MatchType.TITLE)


@pytest.fixture(scope="module")
def catalog() -> list[StandardRequirement]:
    return load_catalog()


@pytest.fixture(scope="module")
def by_id(catalog) -> dict[str, StandardRequirement]:
    return {r.id: r for r in catalog}


@pytest.fixture
def matcher() -> RelationshipMatcher:
    return RelationshipMatcher(DocumentMatcher(MatchingConfig()), RelationshipConfig())


PLAIN_REQ = StandardRequirement(id="req-x", title="Widget Register", standard_id="ISO_9001_2015")


class TestDirectAndFulfillment:
    def test_direct_match(self, matcher, by_id):
        docs = [OrgDocument(id="d1", title="Information Security Policy v2.docx")]
        result = matcher.check_requirement_fulfillment(by_id["ISO27001-01"], docs)
        assert result.is_match is True
        assert result.match_type == FulfillmentType.DIRECT
        assert result.confidence == pytest.approx(0.85)
        assert result.matched_by.document_id == "d1"
        assert result.matched_by.relationship_type == RelationshipType.DIRECT

    def test_manual_covers_by_keywords(self, matcher, by_id):
        docs = [
            OrgDocument(id="m1", title="ISMS Security Manual", document_type=DocumentType.MANUAL)
        ]
        result = matcher.check_requirement_fulfillment(by_id["ISO27001-01"], docs)
        assert result.is_match is True
        assert result.match_type == FulfillmentType.FULFILLS
        assert result.confidence == pytest.approx(0.9)
        assert result.matched_by.relationship_type == RelationshipType.FULFILLS

    def test_can_be_fulfilled_by_title(self, matcher, by_id):
        docs = [OrgDocument(id="d1", title="Quality & ISMS Manual.pdf")]
        result = matcher.check_requirement_fulfillment(by_id["ISO9001-01"], docs)
        assert result.is_match is True
        assert result.match_type == FulfillmentType.CAN_BE_FULFILLED_BY
        assert result.confidence == pytest.approx(0.85)
        assert result.matched_by.document_title == "Quality & ISMS Manual.pdf"

    def test_catalog_fulfills_link(self, matcher, catalog, by_id):
        docs = [OrgDocument(id="d1", title="Quality & ISMS Manual.docx")]
        scope = by_id["ISO9001-03"]

        with_catalog = matcher.check_requirement_fulfillment(scope, docs, catalog)
        assert with_catalog.is_match is True
        assert with_catalog.match_type == FulfillmentType.FULFILLS
        assert with_catalog.confidence == pytest.approx(0.85)

        without_catalog = matcher.check_requirement_fulfillment(scope, docs)
        assert without_catalog.is_match is False

    def test_policy_title_with_ampersand(self, matcher):
        req = StandardRequirement(
            id="req-acp",
            title="Access Control Policy",
            standard_id="ISO_27001_2022",
            document_type=DocumentType.POLICY,
        )
        doc = OrgDocument(id="p1", title="Access&Control Policy", document_type=DocumentType.POLICY)
        result = matcher.check_requirement_fulfillment(req, [doc])
        assert result.match_type == FulfillmentType.FULFILLS
        assert result.confidence == pytest.approx(0.9)

    def test_policy_needs_same_requirement_type(self, matcher):
        req = StandardRequirement(
            id="req-acp",
            title="Access Control Policy",
            standard_id="ISO_27001_2022",
            document_type=DocumentType.PROCEDURE,
        )
        doc = OrgDocument(id="p1", title="Access&Control Policy", document_type=DocumentType.POLICY)
        assert matcher.document_can_fulfill_standard(doc, req) is False

    def test_no_match_on_empty_corpus(self, matcher, by_id):
        result = matcher.check_requirement_fulfillment(by_id["ISO9001-01"], [])
        assert result.is_match is False
        assert result.confidence == 0.0
        assert result.match_type == FulfillmentType.DIRECT
        assert result.matched_by is None


class TestHierarchy:
    def test_manual_parent_discounted(self):
        docs = [
            OrgDocument(id="c1", title="Annex", parent_id="m1"),
            OrgDocument(id="m1", title="Group Manual", document_type=DocumentType.MANUAL),
        ]
        matcher = RelationshipMatcher(_StubMatcher({"m1": _hit()}), RelationshipConfig())
        result = matcher.check_requirement_fulfillment(PLAIN_REQ, docs)
        assert result.match_type == FulfillmentType.PARENT
        assert result.confidence == pytest.approx(0.4)
        assert result.matched_by.document_id == "m1"
        assert result.matched_by.relationship_type == RelationshipType.PARENT

    def test_non_manual_parent_ignored(self):
        docs = [
            OrgDocument(id="c1", title="Annex", parent_id="m1"),
            OrgDocument(id="m1", title="Group Policy", document_type=DocumentType.POLICY),
        ]
        matcher = RelationshipMatcher(_StubMatcher({"m1": _hit(0.4)}), RelationshipConfig())
        result = matcher.check_requirement_fulfillment(PLAIN_REQ, docs)
        # only manual parents are followed upward
        assert result.is_match is False

    def test_child_discounted(self):
        docs = [
            OrgDocument(id="p1", title="Overview", child_ids=["c1"]),
            OrgDocument(id="c1", title="Detail"),
        ]
        matcher = RelationshipMatcher(_StubMatcher({"c1": _hit()}), RelationshipConfig())
        result = matcher.check_requirement_fulfillment(PLAIN_REQ, docs)
        assert result.match_type == FulfillmentType.PARENT
        assert result.confidence == pytest.approx(0.45)
        assert result.matched_by.relationship_type == RelationshipType.CHILD

    def test_dangling_parent_skipped(self):
        docs = [OrgDocument(id="c1", title="Annex", parent_id="gone")]
        matcher = RelationshipMatcher(_StubMatcher({}), RelationshipConfig())
        assert matcher.check_requirement_fulfillment(PLAIN_REQ, docs).is_match is False


class TestCrossReferences:
    def test_outgoing_reference(self):
        docs = [
            OrgDocument(id="a", title="Handbook", reference_ids=["b"]),
            OrgDocument(id="b", title="Appendix"),
        ]
        matcher = RelationshipMatcher(_StubMatcher({"b": _hit()}), RelationshipConfig())
        result = matcher.check_requirement_fulfillment(PLAIN_REQ, docs)
        assert result.match_type == FulfillmentType.REFERENCE
        assert result.confidence == pytest.approx(0.35)
        assert result.matched_by.document_id == "b"
        assert result.matched_by.relationship_type == RelationshipType.REFERENCES

    def test_incoming_reference(self):
        docs = [
            OrgDocument(id="a", title="Handbook", referenced_by_ids=["b"]),
            OrgDocument(id="b", title="Appendix"),
        ]
        matcher = RelationshipMatcher(_StubMatcher({"b": _hit()}), RelationshipConfig())
        result = matcher.check_requirement_fulfillment(PLAIN_REQ, docs)
        assert result.match_type == FulfillmentType.REFERENCE
        assert result.confidence == pytest.approx(0.35)
        assert result.matched_by.relationship_type == RelationshipType.REFERENCED_BY


class TestCorpusView:
    def test_links_read_from_both_ends(self):
        view = CorpusView(
            documents=[
                OrgDocument(id="p1", title="Parent"),
                OrgDocument(id="c1", title="Child", parent_id="p1"),
                OrgDocument(id="r1", title="Ref", reference_ids=["p1"]),
            ]
        )
        assert view.children["p1"] == ["c1"]
        assert view.referenced_by["p1"] == ["r1"]

    def test_resolve_unknown(self):
        view = CorpusView(documents=[OrgDocument(id="p1", title="Parent")])
        assert view.resolve("nope") is None
        assert view.resolve(None) is None
        assert view.resolve("p1").title == "Parent"

    def test_repeated_ids_rejected(self):
        with pytest.raises(ValueError, match="repeated document ids: p1"):
            CorpusView(
                documents=[
                    OrgDocument(id="p1", title="Quality Manual"),
                    OrgDocument(id="p1", title="Risk Register"),
                ]
            )


class TestMatcherContract:
    def test_out_of_range_confidence_rejected(self):
        bad = MatchResult.model_construct(is_match=True, confidence=1.5, match_type=MatchType.TITLE)
        matcher = RelationshipMatcher(_StubMatcher({"d1": bad}), RelationshipConfig())
        with pytest.raises(ValueError, match="confidence"):
            matcher.check_requirement_fulfillment(PLAIN_REQ, [OrgDocument(id="d1", title="X")])

    def test_repeated_ids_rejected(self, matcher):
        corpus = [OrgDocument(id="d1", title="X"), OrgDocument(id="d1", title="Y")]
        with pytest.raises(ValueError, match="d1"):
            matcher.check_requirement_fulfillment(PLAIN_REQ, corpus)

    def test_self_parent_rejected(self):
        with pytest.raises(ValueError):
            OrgDocument(id="d1", title="Loop", parent_id="d1")
