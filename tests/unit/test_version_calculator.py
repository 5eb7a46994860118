"""
Unit tests for semantic version inference.

Covers version parsing and arithmetic, positional increment detection and
the structural comparison of asset definitions.
"""

import copy

import pytest

from blockreg.core.exceptions import DefinitionError, VersionFormatError
from blockreg.versioning import (
    IncrementType,
    VersionInfo,
    calculate_increment_type,
    calculate_next_version,
    compare_definitions,
    increment_version_by,
    is_increment_greater_than,
    max_increment,
)


def _definition(spec=None, kind="core/block-type", version="1.0.0"):
    definition = {"kind": kind, "metadata": {"name": "acme/users", "version": version}}
    if spec is not None:
        definition["spec"] = spec
    return definition


def _entity(name, **fields):
    return {"type": "dto", "name": name, "properties": fields or {"id": {"type": "string"}}}


def _resource(kind, name, spec=None):
    resource = {"kind": kind, "metadata": {"name": name}}
    if spec is not None:
        resource["spec"] = spec
    return resource


REST_API = "rest.kapeta.com/v1/api"
REST_CLIENT = "rest.kapeta.com/v1/client"


class TestVersionInfo:
    """Test version parsing and formatting."""

    def test_parse_full_version(self):
        """Test parsing major.minor.patch."""
        info = VersionInfo.parse("1.2.3")
        assert (info.major, info.minor, info.patch) == (1, 2, 3)
        assert info.pre_release is None

    def test_parse_pre_release(self):
        """Test a pre-release suffix is kept in every rendering."""
        info = VersionInfo.parse("2.0.1-beta.1")
        assert info.to_full_version() == "2.0.1-beta.1"
        assert info.to_minor_version() == "2.0-beta.1"
        assert info.to_major_version() == "2-beta.1"

    @pytest.mark.parametrize("value", ["1.2", "v1.2.3", "1.2.x", "", "local"])
    def test_parse_rejects_malformed(self, value):
        """Test malformed strings raise VersionFormatError."""
        with pytest.raises(VersionFormatError):
            VersionInfo.parse(value)

    def test_ordering(self):
        """Test versions order numerically, not lexically."""
        assert VersionInfo.parse("1.9.0") < VersionInfo.parse("1.10.0")
        assert VersionInfo.parse("1.2.3") <= VersionInfo.parse("1.2.3")


class TestIncrementArithmetic:
    """Test increment ordering and version bumps."""

    def test_max_increment(self):
        """Test the most severe increment wins."""
        assert max_increment(IncrementType.NONE, IncrementType.MINOR) is IncrementType.MINOR
        assert max_increment(IncrementType.MAJOR, IncrementType.PATCH) is IncrementType.MAJOR
        assert max_increment() is IncrementType.NONE

    def test_is_increment_greater_than(self):
        """Test strict comparison of increments."""
        assert is_increment_greater_than(IncrementType.MAJOR, IncrementType.MINOR)
        assert not is_increment_greater_than(IncrementType.MINOR, IncrementType.MINOR)
        assert not is_increment_greater_than(IncrementType.PATCH, IncrementType.MINOR)

    @pytest.mark.parametrize(
        ("increment", "expected"),
        [
            (IncrementType.MAJOR, "2.0.0"),
            (IncrementType.MINOR, "1.3.0"),
            (IncrementType.PATCH, "1.2.4"),
            (IncrementType.NONE, "1.2.3"),
        ],
    )
    def test_increment_version_by(self, increment, expected):
        """Test each increment resets the lower components."""
        assert increment_version_by("1.2.3", increment) == expected

    def test_increment_keeps_pre_release(self):
        """Test the pre-release suffix survives a bump."""
        assert increment_version_by("1.2.3-rc", IncrementType.MINOR) == "1.3.0-rc"

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("1.0.0", "2.0.0", IncrementType.MAJOR),
            ("1.0.0", "1.1.0", IncrementType.MINOR),
            ("1.0.0", "1.0.1", IncrementType.PATCH),
            ("1.0.0", "1.0.0", IncrementType.NONE),
        ],
    )
    def test_calculate_increment_type(self, a, b, expected):
        """Test the first differing position decides the increment."""
        assert calculate_increment_type(a, b) is expected

    def test_bumping_produces_the_increment(self):
        """Test a bump by t is detected as t again."""
        for increment in (IncrementType.MAJOR, IncrementType.MINOR, IncrementType.PATCH):
            bumped = increment_version_by("3.4.5", increment)
            assert calculate_increment_type("3.4.5", bumped) is increment


class TestCompareDefinitions:
    """Test structural comparison of definitions."""

    def test_identical_definitions_are_none(self):
        """Test comparing a definition with itself needs no increment."""
        definition = _definition({"entities": [_entity("User")]})
        assert compare_definitions(definition, copy.deepcopy(definition)) is IncrementType.NONE

    def test_both_specs_empty_is_none(self):
        """Test definitions without spec need no increment."""
        assert compare_definitions(_definition(), _definition()) is IncrementType.NONE

    def test_kind_change_is_major(self):
        """Test changing kind is a breaking change."""
        old = _definition({"entities": []})
        new = _definition({"entities": []}, kind="core/plan")
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_kind_compared_case_insensitively(self):
        """Test kind casing does not count as a change."""
        old = _definition(kind="Core/Block-Type")
        new = _definition(kind="core/block-type")
        assert compare_definitions(new, old) is IncrementType.NONE

    def test_spec_removed_is_major(self):
        """Test removing the spec is a breaking change."""
        old = _definition({"entities": [_entity("User")]})
        assert compare_definitions(_definition(), old) is IncrementType.MAJOR

    def test_entity_added_is_minor(self):
        """Test adding an entity is a compatible change."""
        old = _definition({"entities": [_entity("User")]})
        new = _definition({"entities": [_entity("User"), _entity("Group")]})
        assert compare_definitions(new, old) is IncrementType.MINOR

    def test_entity_changed_is_major(self):
        """Test modifying an entity is a breaking change."""
        old = _definition({"entities": [_entity("User")]})
        new = _definition({"entities": [_entity("User", email={"type": "string"})]})
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_entity_removed_is_major(self):
        """Test removing an entity is a breaking change."""
        old = _definition({"entities": [_entity("User"), _entity("Group")]})
        new = _definition({"entities": [_entity("User")]})
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_provider_added_is_minor(self):
        """Test adding a provider is a compatible change."""
        old = _definition({"providers": [_resource("core/web", "web")]})
        new = _definition(
            {"providers": [_resource("core/web", "web"), _resource("core/web", "admin")]}
        )
        assert compare_definitions(new, old) is IncrementType.MINOR

    def test_consumer_removed_is_major(self):
        """Test removing a consumer is a breaking change."""
        old = _definition({"consumers": [_resource("core/db", "users")]})
        new = _definition({"consumers": []})
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_duplicate_resource_identity_rejected(self):
        """Test two resources with the same kind and name are an error."""
        old = _definition({"providers": []})
        new = _definition({"providers": [_resource("core/web", "web"), _resource("core/web", "web")]})
        with pytest.raises(DefinitionError):
            compare_definitions(new, old)

    def test_does_not_mutate_arguments(self):
        """Test the comparison leaves both definitions untouched."""
        old = _definition({"entities": [_entity("User")], "providers": [_resource("core/web", "web")]})
        new = _definition({"entities": [_entity("User"), _entity("Group")]})
        old_copy, new_copy = copy.deepcopy(old), copy.deepcopy(new)
        compare_definitions(new, old)
        assert old == old_copy
        assert new == new_copy


class TestCompareApiMethods:
    """Test method-level comparison of API resources."""

    def _api(self, methods):
        return _definition({"providers": [_resource(REST_API, "users", {"methods": methods})]})

    def _method(self, path="/users/{id}", description="Get a user"):
        return {
            "description": description,
            "method": "GET",
            "path": path,
            "arguments": {"id": {"type": "string"}},
            "responseType": {"ref": "User"},
        }

    def test_method_added_is_minor(self):
        """Test adding an API method is a compatible change."""
        old = self._api({"getUser": self._method()})
        new = self._api({"getUser": self._method(), "listUsers": self._method(path="/users")})
        assert compare_definitions(new, old) is IncrementType.MINOR

    def test_method_removed_is_major(self):
        """Test removing an API method is a breaking change."""
        old = self._api({"getUser": self._method(), "listUsers": self._method(path="/users")})
        new = self._api({"getUser": self._method()})
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_method_path_changed_is_major(self):
        """Test changing a method's path is a breaking change."""
        old = self._api({"getUser": self._method()})
        new = self._api({"getUser": self._method(path="/people/{id}")})
        assert compare_definitions(new, old) is IncrementType.MAJOR

    @pytest.mark.parametrize(
        "field,value",
        [
            ("arguments", {"id": {"type": "integer"}}),
            ("responseType", {"ref": "Person"}),
            ("method", "POST"),
        ],
    )
    def test_method_signature_changed_is_major(self, field, value):
        """Test changing arguments, response type or HTTP method breaks the API."""
        changed = {**self._method(), field: value}
        old = self._api({"getUser": self._method()})
        new = self._api({"getUser": changed})
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_client_argument_type_changed_is_major(self):
        """Test a REST client is compared by method just like the API it consumes."""
        old_method = self._method()
        new_method = {**old_method, "arguments": {"id": {"type": "integer"}}}
        old = _definition(
            {"consumers": [_resource(REST_CLIENT, "users", {"methods": {"getUser": old_method}})]}
        )
        new = _definition(
            {"consumers": [_resource(REST_CLIENT, "users", {"methods": {"getUser": new_method}})]}
        )
        assert compare_definitions(new, old) is IncrementType.MAJOR

    def test_description_change_is_none(self):
        """Test method descriptions are ignored."""
        old = self._api({"getUser": self._method()})
        new = self._api({"getUser": self._method(description="Fetch one user")})
        assert compare_definitions(new, old) is IncrementType.NONE


class TestCalculateNextVersion:
    """Test next-version calculation."""

    def test_next_version_for_addition(self):
        """Test an added entity bumps the minor version."""
        old = _definition({"entities": [_entity("User")]}, version="1.4.2")
        new = _definition({"entities": [_entity("User"), _entity("Group")]}, version="1.4.2")
        assert calculate_next_version(new, old) == "1.5.0"

    def test_next_version_without_change(self):
        """Test an unchanged definition keeps its version."""
        old = _definition({"entities": [_entity("User")]}, version="1.4.2")
        assert calculate_next_version(copy.deepcopy(old), old) == "1.4.2"
