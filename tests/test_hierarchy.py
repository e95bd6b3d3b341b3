"""Tests for derivation chains, derived types and field attribution."""

from __future__ import annotations

from canon_docs.hierarchy import MAX_CHAIN_DEPTH, TypeHierarchy
from canon_docs.model import TypeRef
from conftest import META_TYPE_REF, make_record


def _meta():
    return make_record("type", "0.2.0", publisher="canon-protocol.org")


class TestChain:
    """Tests for TypeHierarchy.chain."""

    def test_stops_at_meta_type(self, meta_type):
        post = make_record("post", declared=META_TYPE_REF)
        hello = make_record("hello", declared="example.com/post@1.0.0")
        hierarchy = TypeHierarchy([_meta(), post, hello], meta_type=meta_type)

        chain = hierarchy.chain(hello)
        assert [r.key for r in chain.refs] == ["post@1.0.0", "type@0.2.0"]
        assert not chain.circular
        assert not chain.truncated

    def test_unknown_parent_ends_chain(self, meta_type):
        hello = make_record("hello", declared="example.com/missing@1.0.0")
        chain = TypeHierarchy([hello], meta_type=meta_type).chain(hello)
        assert [r.key for r in chain.refs] == ["missing@1.0.0"]
        assert not chain.circular

    def test_cycle_is_flagged(self, meta_type):
        a = make_record("a", declared="example.com/b@1.0.0")
        b = make_record("b", declared="example.com/a@1.0.0")
        chain = TypeHierarchy([a, b], meta_type=meta_type).chain(a)

        assert chain.circular
        assert [r.key for r in chain.refs] == ["b@1.0.0", "a@1.0.0"]
        assert len(chain.refs) <= MAX_CHAIN_DEPTH

    def test_self_reference_is_flagged(self, meta_type):
        a = make_record("a", declared="example.com/a@1.0.0")
        chain = TypeHierarchy([a], meta_type=meta_type).chain(a)
        assert chain.circular
        assert len(chain.refs) == 1

    def test_depth_is_capped(self, meta_type):
        records = [
            make_record(f"t{i}", declared=f"example.com/t{i + 1}@1.0.0")
            for i in range(MAX_CHAIN_DEPTH + 3)
        ]
        chain = TypeHierarchy(records, meta_type=meta_type).chain(records[0])
        assert chain.truncated
        assert not chain.circular
        assert len(chain.refs) == MAX_CHAIN_DEPTH

    def test_meta_type_has_empty_chain(self, meta_type):
        meta = _meta()
        assert TypeHierarchy([meta], meta_type=meta_type).chain(meta).refs == ()


class TestDerivedTypes:
    """Tests for the reverse lookup."""

    def test_children_sorted_by_name(self, meta_type):
        meta = _meta()
        zeta = make_record("zeta", declared=META_TYPE_REF)
        alpha = make_record("alpha", declared=META_TYPE_REF)
        other = make_record("other", declared="canon-protocol.org/type@0.1.0")
        hierarchy = TypeHierarchy([meta, zeta, alpha, other], meta_type=meta_type)

        assert [r.name for r in hierarchy.derived_types(meta)] == ["alpha", "zeta"]
        assert hierarchy.derived_types(alpha) == []


class TestAttributeFields:
    """Tests for field attribution to base and composed types."""

    def _hierarchy(self, meta_type, instance):
        base = make_record(
            "post",
            declared=META_TYPE_REF,
            schema_fields={
                "title": {"type": "string", "required": True},
                "body": {"type": "string"},
            },
        )
        taggable = make_record(
            "taggable",
            declared=META_TYPE_REF,
            schema_fields={"tags": {"type": "array"}, "title": {"type": "string"}},
        )
        ratable = make_record(
            "ratable",
            declared=META_TYPE_REF,
            schema_fields={"type": "object", "properties": {"rating": {"type": "integer"}, "tags": {}}},
        )
        return TypeHierarchy([_meta(), base, taggable, ratable, instance], meta_type=meta_type)

    def test_base_and_composed(self, meta_type):
        instance = make_record(
            "hello",
            declared="example.com/post@1.0.0",
            includes=("example.com/taggable@1.0.0",),
            content_fields={"tags": ["a"], "title": "Hello"},
        )
        result = self._hierarchy(meta_type, instance).attribute_fields(instance)

        assert result.base_type == TypeRef("example.com", "post", "1.0.0")
        assert result.base == ["title"]
        assert result.composed == {TypeRef("example.com", "taggable", "1.0.0"): ["tags"]}
        assert result.unattributed == []

    def test_first_include_wins(self, meta_type):
        instance = make_record(
            "hello",
            declared="example.com/post@1.0.0",
            includes=("example.com/ratable@1.0.0", "example.com/taggable@1.0.0"),
            content_fields={"tags": ["a"], "rating": 4},
        )
        result = self._hierarchy(meta_type, instance).attribute_fields(instance)

        ratable = TypeRef("example.com", "ratable", "1.0.0")
        assert result.composed == {ratable: ["rating", "tags"]}

    def test_composed_in_include_order(self, meta_type):
        instance = make_record(
            "hello",
            declared="example.com/post@1.0.0",
            includes=("example.com/taggable@1.0.0", "example.com/ratable@1.0.0"),
            content_fields={"rating": 4, "tags": ["a"]},
        )
        result = self._hierarchy(meta_type, instance).attribute_fields(instance)
        assert [ref.name for ref in result.composed] == ["taggable", "ratable"]

    def test_unknown_fields_unattributed(self, meta_type):
        instance = make_record(
            "hello",
            declared="example.com/post@1.0.0",
            content_fields={"mood": "happy", "body": "text", "title": "Hi"},
        )
        result = self._hierarchy(meta_type, instance).attribute_fields(instance)
        assert result.base == ["title", "body"]
        assert result.unattributed == ["mood"]

    def test_unknown_base_type(self, meta_type):
        instance = make_record(
            "hello",
            declared="example.com/nowhere@1.0.0",
            content_fields={"title": "Hi"},
        )
        result = self._hierarchy(meta_type, instance).attribute_fields(instance)
        assert result.unattributed == ["title"]
        assert not result.is_empty
