"""Tests for the template catalog."""

from __future__ import annotations

import pytest

from resume_forge.errors import UnknownTemplateError, ValidationError
from resume_forge.templates.loader import default_catalog, get_template, load_catalog


class TestCatalog:
    def test_only_jake_is_free(self):
        assert [t.id for t in default_catalog().free_templates()] == ["jake"]

    def test_alias(self):
        assert get_template("apex").id == "vertex"
        assert default_catalog().is_valid("apex")

    def test_unknown(self):
        assert not default_catalog().is_valid("nope")
        with pytest.raises(UnknownTemplateError) as exc_info:
            get_template("nope")
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.message == "Please select a valid template"

    def test_unknown_required_kind_rejected(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("templates:\n  - id: x\n    name: X\n    required_sections: [awards]\n")
        with pytest.raises(Exception, match="Unknown section kinds"):
            load_catalog(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "missing.yaml")
