"""
Tests for the Descriptor model.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pqrs_bin.core.data import builtin_descriptor
from pqrs_bin.core.models.descriptor import Descriptor

VALID = {
    "name": "pqrs",
    "description": "Apache Parquet command-line tools and utilities",
    "homepage": "https://github.com/manojkarthick/pqrs",
    "url": "https://github.com/manojkarthick/pqrs/releases/download/v0.1.1/pqrs-mac.tar.gz",
    "sha256": "c5c0ad8f3763c85173801f9eff2e209c34f22798e3606f65928f99a6c5c00d0f",
    "version": "0.1.1",
}


class TestBuiltinDescriptor:
    def test_fields(self):
        d = builtin_descriptor()
        assert d.name == "pqrs"
        assert d.description == "Apache Parquet command-line tools and utilities"
        assert d.homepage == "https://github.com/manojkarthick/pqrs"
        assert d.url.endswith("/releases/latest/download/pqrs-mac.tar.gz")
        assert d.sha256 == "c5c0ad8f3763c85173801f9eff2e209c34f22798e3606f65928f99a6c5c00d0f"
        assert d.version == "0.1.1"

    def test_binary_defaults_to_name(self):
        assert builtin_descriptor().binary == "pqrs"

    def test_archive_name(self):
        assert builtin_descriptor().archive_name == "pqrs-mac.tar.gz"


class TestDescriptorValidation:
    def test_valid(self):
        d = Descriptor.model_validate(VALID)
        assert d.version == "0.1.1"

    def test_sha256_prefix_and_case_normalized(self):
        d = Descriptor.model_validate({**VALID, "sha256": "SHA256:" + VALID["sha256"].upper()})
        assert d.sha256 == VALID["sha256"]

    @pytest.mark.parametrize("digest", ["", "abc", "z" * 64, VALID["sha256"] + "0"])
    def test_bad_sha256(self, digest):
        with pytest.raises(ValidationError):
            Descriptor.model_validate({**VALID, "sha256": digest})

    def test_version_leading_v_stripped(self):
        d = Descriptor.model_validate({**VALID, "version": "v0.2.0-rc.1"})
        assert d.version == "0.2.0-rc.1"

    @pytest.mark.parametrize("version", ["", "1", "1.2", "latest", "01.2.3"])
    def test_bad_version(self, version):
        with pytest.raises(ValidationError):
            Descriptor.model_validate({**VALID, "version": version})

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://example.com/pqrs.tar.gz",
            "pqrs.tar.gz",
            "https://",
            "https://example.com/pqrs mac.tar.gz",
            "https://example.com/pqrs\tmac.tar.gz",
            "https://example.com/pqrs.tar.gz\n",
        ],
    )
    def test_bad_url(self, url):
        with pytest.raises(ValidationError):
            Descriptor.model_validate({**VALID, "url": url})

    def test_bad_homepage(self):
        with pytest.raises(ValidationError):
            Descriptor.model_validate({**VALID, "homepage": "github.com/manojkarthick/pqrs"})

    def test_binary_must_be_bare_name(self):
        with pytest.raises(ValidationError):
            Descriptor.model_validate({**VALID, "binary": "bin/pqrs"})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            Descriptor.model_validate({**VALID, "depends_on": ["rust"]})

    def test_missing_required(self):
        data = dict(VALID)
        del data["sha256"]
        with pytest.raises(ValidationError):
            Descriptor.model_validate(data)


class TestDescriptorImmutability:
    def test_frozen(self):
        d = Descriptor.model_validate(VALID)
        with pytest.raises(ValidationError):
            d.version = "0.2.0"

    def test_hashable_and_equal(self):
        a = Descriptor.model_validate(VALID)
        b = Descriptor.model_validate(VALID)
        assert a == b
        assert hash(a) == hash(b)


class TestDescriptorPaths:
    def test_target_path(self):
        d = Descriptor.model_validate(VALID)
        assert d.bin_dir(Path("/opt/pqrs")) == Path("/opt/pqrs/bin")
        assert d.target_path(Path("/opt/pqrs")) == Path("/opt/pqrs/bin/pqrs")

    def test_custom_binary(self):
        d = Descriptor.model_validate({**VALID, "binary": "pqrs-cli"})
        assert d.target_path(Path("/usr/local")) == Path("/usr/local/bin/pqrs-cli")

    def test_to_dict(self):
        data = Descriptor.model_validate(VALID).to_dict()
        assert data["name"] == "pqrs"
        assert data["binary"] == "pqrs"
