# tests/test_record.py
"""
Tests for Locator Record building, serialization and validation.
"""

import json

import pytest

from locator_core.config import DEFAULT_CONFIG
from locator_core.exceptions import RecordFormatError
from locator_core.record import (
    LocatorRecord,
    classify_stability,
    generate_locator_json,
    validate_record,
)
from locator_core.tree import element, iter_elements
from locator_core.xpath import find_element_by_xpath

FIXED_CLOCK = lambda: 1760745600.25  # noqa: E731


def _valid_dict(**overrides):
    data = {
        "tag": "button",
        "stableClasses": [],
        "nearText": [],
        "domDepth": 3,
        "positionHint": {"indexAmongSameTag": 0},
        "stabilityLevel": "C",
        "createdAt": 0,
        "version": 1,
    }
    data.update(overrides)
    return data


class TestGenerateLocatorJSON:
    """Tests for generate_locator_json."""

    def test_test_id_record(self, q):
        """data-testid gives tier A with attributes and text."""
        record = generate_locator_json(q("//button[@data-testid='submit-btn']"), clock=FIXED_CLOCK)
        assert record.tag == "button"
        assert record.attributes["data-testid"] == "submit-btn"
        assert record.stability_level == "A"
        assert record.text == "Submit"
        assert record.created_at == 1760745600250
        assert record.version == 1

    def test_aria_label_record(self, q):
        """aria-label is a strong attribute as well."""
        record = generate_locator_json(q("//*[@aria-label='Submit Form']"))
        assert record.role == "button"
        assert record.attributes["aria-label"] == "Submit Form"
        assert record.stability_level == "A"

    def test_role_and_text_record(self, q):
        """Role plus text without a strong attribute gives tier B."""
        record = generate_locator_json(q("//button[@role='button' and not(@data-testid)]"))
        assert record.role == "button"
        assert record.text == "Cancel"
        assert record.stability_level == "B"

    def test_weak_record(self, q):
        """No strong attribute and no role gives tier C."""
        record = generate_locator_json(q("//button[@id='delete-btn']"))
        assert record.role is None
        assert record.attributes is None
        assert record.stability_level == "C"
        assert record.xpath_fallback == "//button[@id='delete-btn']"

    def test_implicit_role_promotes_to_b(self, q):
        """Inferred roles count toward tier B."""
        config = DEFAULT_CONFIG.with_overrides(infer_implicit_roles=True)
        record = generate_locator_json(q("//button[@id='delete-btn']"), config)
        assert record.role == "button"
        assert record.stability_level == "B"

    def test_hash_classes_filtered(self, q):
        """stableClasses never holds hash-like tokens."""
        record = generate_locator_json(q("//div[contains(@class, 'jsx-123456')]"))
        assert record.stable_classes == ("card",)
        for token in ("css-1x92ab", "sc-Ax9z", "jsx-123456", "hash-class-css-1x92ab"):
            assert token not in record.stable_classes

    def test_near_text(self, q):
        """nearText holds the card context."""
        record = generate_locator_json(q("//div[@data-id='card-1']/button"))
        assert "Card 1" in record.near_text
        assert "Buy Now" not in record.near_text

    def test_position(self, q):
        record = generate_locator_json(q("//button[@id='delete-btn']"))
        assert record.dom_depth == 4
        assert record.index_among_same_tag == 2

    def test_fallback_resolves_to_origin(self, page):
        """Every attached xpathFallback resolves to the described node."""
        for node in iter_elements(page):
            record = generate_locator_json(node)
            if record.xpath_fallback:
                assert find_element_by_xpath(page, record.xpath_fallback) == node

    def test_test_id_always_tier_a(self, page):
        """Any node carrying data-testid is tier A."""
        seen = 0
        for node in iter_elements(page):
            if node.get_attribute("data-testid"):
                seen += 1
                assert generate_locator_json(node).stability_level == "A"
        assert seen == 2

    def test_hash_looking_test_id_stays_tier_a(self):
        """A numeric test id is kept and still gives tier A."""
        button = element("button", {"data-testid": "20231015"}, "Go")
        element("html", None, element("body", None, element("div", None, button)))
        record = generate_locator_json(button)
        assert record.attributes == {"data-testid": "20231015"}
        assert record.stability_level == "A"
        assert record.xpath_fallback is None

    def test_wrapper_node_has_no_fallback(self, q):
        record = generate_locator_json(q("//body"))
        assert record.xpath_fallback is None
        assert record.dom_depth == 1


class TestClassifyStability:
    """Tests for classify_stability."""

    def test_levels(self):
        assert classify_stability({"data-qa": "x"}, None, None) == "A"
        assert classify_stability({"aria-labelledby": "lbl"}, "button", "Go") == "A"
        assert classify_stability({"name": "q"}, "textbox", "Search") == "B"
        assert classify_stability({"name": "q"}, "textbox", None) == "C"
        assert classify_stability(None, None, "Go") == "C"

    def test_strong_attributes_configurable(self):
        config = DEFAULT_CONFIG.with_overrides(strong_attributes=("name",))
        assert classify_stability({"name": "q"}, None, None, config) == "A"
        assert classify_stability({"data-testid": "x"}, None, None, config) == "C"


class TestSerialization:
    """Tests for to_dict / from_dict / JSON."""

    def test_camel_case_keys(self, q):
        data = generate_locator_json(q("//button[@data-testid='submit-btn']")).to_dict()
        assert data["stabilityLevel"] == "A"
        assert data["stableClasses"] == ["btn", "btn-primary"]
        assert data["positionHint"] == {"indexAmongSameTag": 0}
        assert "domDepth" in data
        assert "createdAt" in data
        assert "xpathFallback" in data

    def test_absent_optionals_omitted(self, q):
        data = generate_locator_json(q("//button[@id='delete-btn']")).to_dict()
        assert "role" not in data
        assert "attributes" not in data
        assert data["text"] == "Delete"

    def test_dict_round_trip(self, q):
        record = generate_locator_json(q("//div[@data-id='card-1']/button"))
        assert LocatorRecord.from_dict(record.to_dict()) == record

    def test_json_round_trip(self, q):
        record = generate_locator_json(q("//input[@name='email']"))
        text = record.to_json()
        assert json.loads(text)["attributes"]["name"] == "email"
        assert LocatorRecord.from_json(text) == record

    def test_nulls_accepted(self):
        """Optional fields may be null."""
        record = LocatorRecord.from_dict(_valid_dict(role=None, text=None, attributes=None, xpathFallback=None))
        assert record.role is None
        assert record.attributes is None

    def test_tag_lower_cased(self):
        assert LocatorRecord.from_dict(_valid_dict(tag="BUTTON")).tag == "button"

    def test_only_tag_and_version_required(self):
        """Absent fields take their empty defaults."""
        record = LocatorRecord.from_dict({"tag": "h1", "xpathFallback": "//h1[@id='title']", "version": 1})
        assert record.xpath_fallback == "//h1[@id='title']"
        assert record.stable_classes == ()
        assert record.near_text == ()
        assert record.dom_depth == 0
        assert record.index_among_same_tag == 0
        assert record.stability_level == "C"
        assert record.created_at == 0


class TestValidation:
    """Tests for record validation errors."""

    def test_wrong_version(self):
        with pytest.raises(RecordFormatError) as exc_info:
            LocatorRecord.from_dict(_valid_dict(version=2))
        assert exc_info.value.version == 2
        assert "version=2" in str(exc_info.value)

    def test_missing_required_field(self):
        data = _valid_dict()
        del data["tag"]
        with pytest.raises(RecordFormatError) as exc_info:
            LocatorRecord.from_dict(data)
        assert any("'tag' is a required property" in e for e in exc_info.value.errors)

    def test_all_errors_collected(self):
        data = _valid_dict(tag=5, domDepth=-1, stabilityLevel="D")
        with pytest.raises(RecordFormatError) as exc_info:
            validate_record(data)
        assert len(exc_info.value.errors) == 3

    def test_unknown_field_rejected(self):
        with pytest.raises(RecordFormatError):
            validate_record(_valid_dict(extra=True))

    def test_not_a_mapping(self):
        with pytest.raises(RecordFormatError):
            validate_record(["tag"])

    def test_invalid_json(self):
        with pytest.raises(RecordFormatError) as exc_info:
            LocatorRecord.from_json("{not json")
        assert "invalid JSON" in str(exc_info.value)

    def test_valid_record_passes(self):
        validate_record(_valid_dict())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
