"""Tests for ContentSource (F1).

Manifest parsing, tree caching, index lookups and content reads.
"""

import json

import pytest

from roadmap.core.content_source import ContentSource, parse_manifest
from roadmap.core.errors import ContentLoadError, ContentNotFound
from roadmap.core.models import Phase, Subtopic


class TestLoadTree:
    """Tests for load_tree."""

    def test_returns_phases_sorted_by_order(self, content_source):
        """Phases come back sorted by their order field."""
        phases = content_source.load_tree()
        assert [p.id for p in phases] == ["p1", "p2"]
        assert all(isinstance(p, Phase) for p in phases)

    def test_preserves_topic_and_subtopic_order(self, content_source):
        """Topics and subtopics keep manifest order."""
        phases = content_source.load_tree()
        topic = phases[0].topics[0]
        assert topic.id == "t1"
        assert [s.id for s in topic.subtopics] == ["s1", "s2"]

    def test_parses_examples(self, content_source):
        """Examples are parsed with contentKey mapped to content_key."""
        phases = content_source.load_tree()
        s3 = phases[1].topics[0].subtopics[0]
        assert len(s3.examples) == 1
        assert s3.examples[0].id == "ex1"
        assert s3.examples[0].content_key == "p2.s3.example"

    def test_missing_examples_default_to_empty(self, content_source):
        """Subtopics without examples get an empty list."""
        phases = content_source.load_tree()
        assert phases[0].topics[0].subtopics[0].examples == []

    def test_static_subtopics_have_default_progress(self, content_source):
        """Loaded subtopics carry no progress."""
        s1 = content_source.load_tree()[0].topics[0].subtopics[0]
        assert s1.completed is False
        assert s1.last_accessed is None
        assert s1.notes is None

    def test_second_call_uses_cache(self, content_source, reader):
        """Second load returns the same object without reading again."""
        first = content_source.load_tree()
        calls_after_first = len(reader.calls)
        second = content_source.load_tree()

        assert second is first
        assert len(reader.calls) == calls_after_first == 1

    def test_missing_manifest_raises(self, make_reader):
        """Missing manifest raises ContentLoadError."""
        source = ContentSource(make_reader({}))
        with pytest.raises(ContentLoadError, match="not found"):
            source.load_tree()

    def test_invalid_json_raises(self, make_reader):
        """Unparsable manifest raises ContentLoadError."""
        source = ContentSource(make_reader({"topics_list.json": "{not json"}))
        with pytest.raises(ContentLoadError, match="JSON"):
            source.load_tree()

    def test_failure_is_not_cached(self, make_reader, manifest):
        """After a failed load, a later call reads again."""
        reader = make_reader({})
        source = ContentSource(reader)
        with pytest.raises(ContentLoadError):
            source.load_tree()

        reader.files["topics_list.json"] = json.dumps(manifest)
        assert len(source.load_tree()) == 2

    def test_custom_manifest_path(self, make_reader, manifest):
        """Manifest path is configurable."""
        reader = make_reader({"content/roadmap.json": json.dumps(manifest)})
        source = ContentSource(reader, manifest_path="content/roadmap.json")
        assert len(source.load_tree()) == 2
        assert reader.calls == ["content/roadmap.json"]


class TestParseManifest:
    """Schema validation in parse_manifest."""

    def test_unknown_fields_ignored(self, manifest):
        """Extra keys anywhere are ignored."""
        manifest["phases"][0]["color"] = "blue"
        manifest["phases"][0]["topics"][0]["subtopics"][0]["difficulty"] = 3
        domain, phases = parse_manifest(json.dumps(manifest))
        assert domain == "android"
        assert len(phases) == 2

    def test_missing_phases_raises(self):
        """A manifest without phases is a schema mismatch."""
        with pytest.raises(ContentLoadError, match="phases"):
            parse_manifest(json.dumps({"domain": "x"}))

    def test_phases_not_list_raises(self):
        with pytest.raises(ContentLoadError):
            parse_manifest(json.dumps({"phases": {"id": "p1"}}))

    def test_root_not_object_raises(self):
        with pytest.raises(ContentLoadError):
            parse_manifest(json.dumps([1, 2, 3]))

    def test_subtopic_without_path_raises(self, manifest):
        """Subtopic path is required."""
        del manifest["phases"][1]["topics"][0]["subtopics"][0]["path"]
        with pytest.raises(ContentLoadError, match="path"):
            parse_manifest(json.dumps(manifest))

    def test_phase_without_id_raises(self, manifest):
        del manifest["phases"][0]["id"]
        with pytest.raises(ContentLoadError, match="id"):
            parse_manifest(json.dumps(manifest))

    def test_non_integer_order_raises(self, manifest):
        manifest["phases"][0]["order"] = "first"
        with pytest.raises(ContentLoadError, match="order"):
            parse_manifest(json.dumps(manifest))

    def test_missing_order_defaults_to_position(self):
        """Without order, phases keep manifest position."""
        raw = {
            "phases": [
                {"id": "b", "title": "B", "topics": []},
                {"id": "a", "title": "A", "topics": []},
            ]
        }
        _, phases = parse_manifest(json.dumps(raw))
        assert [p.id for p in phases] == ["b", "a"]
        assert [p.order for p in phases] == [0, 1]

    def test_null_examples_default_to_empty(self, manifest):
        manifest["phases"][0]["topics"][0]["subtopics"][0]["examples"] = None
        _, phases = parse_manifest(json.dumps(manifest))
        assert phases[1].topics[0].subtopics[0].examples == []

    def test_missing_domain_is_empty(self, manifest):
        del manifest["domain"]
        domain, _ = parse_manifest(json.dumps(manifest))
        assert domain == ""

    def test_null_example_strings_default_to_empty(self, manifest):
        """Null description and contentKey become empty strings."""
        example = manifest["phases"][0]["topics"][0]["subtopics"][0]["examples"][0]
        example["description"] = None
        example["contentKey"] = None
        _, phases = parse_manifest(json.dumps(manifest))

        parsed = phases[1].topics[0].subtopics[0].examples[0]
        assert parsed.description == ""
        assert parsed.content_key == ""

    def test_non_string_example_field_raises(self, manifest):
        example = manifest["phases"][0]["topics"][0]["subtopics"][0]["examples"][0]
        example["description"] = 42
        with pytest.raises(ContentLoadError, match="description"):
            parse_manifest(json.dumps(manifest))

    def test_null_child_lists_default_to_empty(self, manifest):
        """topics and subtopics follow the same null rule as examples."""
        manifest["phases"][0]["topics"][0]["subtopics"] = None
        manifest["phases"][1]["topics"] = None
        _, phases = parse_manifest(json.dumps(manifest))

        assert phases[0].topics == []
        assert phases[1].topics[0].subtopics == []

    def test_null_phases_raises(self):
        with pytest.raises(ContentLoadError, match="phases"):
            parse_manifest(json.dumps({"phases": None}))

    def test_null_domain_is_empty(self, manifest):
        manifest["domain"] = None
        domain, _ = parse_manifest(json.dumps(manifest))
        assert domain == ""

    def test_duplicate_subtopic_ids_rejected(self, make_reader, manifest):
        """Subtopic ids must be unique across the tree."""
        manifest["phases"][1]["topics"][0]["subtopics"][0]["id"] = "s1"
        source = ContentSource(make_reader({"topics_list.json": json.dumps(manifest)}))
        with pytest.raises(ContentLoadError, match="Duplicate subtopic id: s1"):
            source.load_tree()


class TestLookups:
    """Tests for index lookups and browsing helpers."""

    def test_find_subtopic(self, content_source):
        subtopic = content_source.find_subtopic("s2")
        assert isinstance(subtopic, Subtopic)
        assert subtopic.title == "Subtopic Two"

    def test_find_subtopic_loads_lazily(self, content_source, reader):
        """Lookup without a prior load_tree triggers the load."""
        content_source.find_subtopic("s1")
        assert reader.calls == ["topics_list.json"]

    def test_find_unknown_subtopic_raises(self, content_source):
        with pytest.raises(ContentNotFound) as exc_info:
            content_source.find_subtopic("nope")
        assert exc_info.value.content_id == "nope"

    def test_has_subtopic(self, content_source):
        assert content_source.has_subtopic("s3")
        assert not content_source.has_subtopic("s9")

    def test_get_domain(self, content_source):
        assert content_source.get_domain() == "android"

    def test_list_topics(self, content_source):
        assert [t.id for t in content_source.list_topics("p1")] == ["t1"]

    def test_list_topics_unknown_phase(self, content_source):
        with pytest.raises(ContentNotFound):
            content_source.list_topics("p9")

    def test_list_subtopics(self, content_source):
        assert [s.id for s in content_source.list_subtopics("t1")] == ["s1", "s2"]

    def test_list_subtopics_unknown_topic(self, content_source):
        with pytest.raises(ContentNotFound):
            content_source.list_subtopics("t9")

    def test_list_examples(self, content_source):
        examples = content_source.list_examples()
        assert [e.id for e in examples] == ["ex1"]


class TestReadContent:
    """Tests for read_content."""

    def test_reads_body(self, content_source):
        assert content_source.read_content("s1") == "# Subtopic One\n\nFirst body."

    def test_loads_tree_implicitly(self, content_source, reader):
        """read_content works without an explicit load_tree."""
        content_source.read_content("s3")
        assert reader.calls == ["topics_list.json", "p2/s3.md"]

    def test_body_is_cached(self, content_source, reader):
        content_source.read_content("s1")
        content_source.read_content("s1")
        assert reader.calls.count("p1/s1.md") == 1

    def test_unknown_id_raises(self, content_source):
        with pytest.raises(ContentNotFound, match="unknown subtopic"):
            content_source.read_content("missing")

    def test_unreadable_reference_raises(self, content_source, reader):
        """A subtopic whose file is missing raises ContentNotFound."""
        del reader.files["p1/s2.md"]
        with pytest.raises(ContentNotFound, match="p1/s2.md"):
            content_source.read_content("s2")

    def test_unreadable_reference_not_cached(self, content_source, reader):
        """A failed read is retried on the next call."""
        body = reader.files.pop("p1/s2.md")
        with pytest.raises(ContentNotFound):
            content_source.read_content("s2")

        reader.files["p1/s2.md"] = body
        assert content_source.read_content("s2") == body
