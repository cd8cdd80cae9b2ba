"""
Tests for slug resolution, SKU generation and listing helpers.
"""
import re
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from ecommerce_admin.schemas import BrandCreate, UserCreate, UserUpdate, validate_payload
from ecommerce_admin.constants import StatusCode
from ecommerce_admin.exceptions import ConflictError, ValidationError
from ecommerce_admin.models import db
from ecommerce_admin.utils import (
    clamp_per_page,
    commit_or_conflict,
    generate_sku,
    generate_slug,
    parse_bool,
    resolve_slug,
    sanitize_input,
)


class TestSlugs:
    """Slug generation and collision handling."""

    def test_generate_slug_transliterates(self):
        assert generate_slug("Crème Brûlée & Co.") == "creme-brulee-co"

    def test_generate_slug_collapses_separators(self):
        assert generate_slug("  Summer -- Sale  2024 ") == "summer-sale-2024"

    def test_generate_slug_treats_underscores_as_separators(self):
        assert generate_slug("foo_bar baz") == "foo-bar-baz"
        assert generate_slug("__snake__case__") == "snake-case"

    def test_free_slug_returned_unchanged(self):
        assert resolve_slug("Nike Air", set()) == "nike-air"

    def test_collision_appends_unix_seconds(self):
        with patch('ecommerce_admin.utils.time.time', return_value=1700000000.7):
            slug = resolve_slug("Nike Air", {"nike-air"})

        assert slug == "nike-air-1700000000"

    def test_callable_lookup_receives_exclude_id(self):
        seen = []

        def lookup(slug, exclude_id):
            seen.append((slug, exclude_id))
            return False

        assert resolve_slug("Adidas", lookup, exclude_id=3) == "adidas"
        assert seen == [("adidas", 3)]

    def test_unsluggable_name_gets_random_slug(self):
        slug = resolve_slug("???", set())

        assert re.fullmatch(r'[0-9a-f]{8}', slug)


class TestSku:
    def test_sku_format(self):
        assert re.fullmatch(r'RED-[0-9A-F]{12}', generate_sku("Red T-Shirt"))

    def test_sku_without_letters(self):
        assert generate_sku("123").startswith("SKU-")

    def test_skus_are_unique(self):
        assert generate_sku("Shoe") != generate_sku("Shoe")


class TestListingHelpers:
    @pytest.mark.parametrize("value,expected", [(1000, 100), (0, 5), (3, 5), (25, 25), (None, 5)])
    def test_clamp_per_page(self, value, expected):
        assert clamp_per_page(value, 5, 100) == expected

    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("no", False), ("maybe", None), (None, None)])
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected

    def test_sanitize_input_strips_tags(self):
        assert sanitize_input("  <b>Bold</b> name ") == "Bold name"


class TestSchemas:
    """Request payload validation."""

    def test_missing_fields_reported_by_name(self, app):
        with app.test_request_context(json={}):
            with pytest.raises(ValidationError) as exc_info:
                validate_payload(UserCreate)

        errors = exc_info.value.errors
        assert errors["username"] == ["The username field is required."]
        assert "email" in errors and "password" in errors

    def test_email_normalised(self):
        user = UserCreate(username="jane", email="Jane@Example.COM", password="longenough")

        assert user.email == "jane@example.com"

    def test_invalid_email_message(self, app):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(UserCreate, {"username": "jane", "email": "nope", "password": "longenough"})

        assert exc_info.value.errors["email"] == ["The email must be a valid email address."]

    def test_explicit_null_rejected_on_update(self, app):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(UserUpdate, {"username": None})

        assert exc_info.value.errors["username"] == ["This field may not be null."]

    def test_non_object_body_rejected(self, app):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(BrandCreate, ["not", "an", "object"])

        assert "body" in exc_info.value.errors

    def test_bad_web_url(self):
        with pytest.raises(Exception):
            BrandCreate(name="Acme", web_url="ftp://example.com")


class TestCommitOrConflict:
    def test_integrity_error_becomes_write_conflict(self, app):
        error = IntegrityError("INSERT INTO brands", {}, Exception("UNIQUE constraint failed: brands.slug"))
        with patch.object(db.session, 'commit', side_effect=error), \
                patch.object(db.session, 'rollback') as rollback:
            with pytest.raises(ConflictError) as exc_info:
                commit_or_conflict("creating a brand")

        assert exc_info.value.status_code == StatusCode.WRITE_CONFLICT
        assert exc_info.value.http_status == 400
        rollback.assert_called_once()

    def test_clean_commit_passes_through(self, app):
        with patch.object(db.session, 'commit') as commit:
            commit_or_conflict("creating a brand")

        commit.assert_called_once()
