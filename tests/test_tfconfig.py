"""
Tests for required_version discovery in *.tf files (tfswitch/tfconfig.py).
"""

import pytest

from tfswitch.errors import ConfigError
from tfswitch.tfconfig import load_required_versions, required_versions_in_text


class TestRequiredVersionsInText:

    def test_simple_block(self):
        text = 'terraform {\n  required_version = ">= 0.12, < 0.14"\n}\n'
        assert required_versions_in_text(text) == [">= 0.12, < 0.14"]

    def test_ignores_nested_blocks(self):
        text = """
terraform {
  required_providers {
    aws = {
      source  = "hashicorp/aws"
      version = "~> 4.0"
    }
  }
  required_version = "~> 1.5"

  backend "s3" {
    bucket = "state"
  }
}
"""
        assert required_versions_in_text(text) == ["~> 1.5"]

    def test_ignores_other_blocks(self):
        text = """
module "vpc" {
  required_version = "1.0.0"
}

resource "null_resource" "x" {}
"""
        assert required_versions_in_text(text) == []

    def test_ignores_comments(self):
        text = """
# terraform { required_version = "0.11.0" }
/*
terraform {
  required_version = "0.10.0"
}
*/
terraform {
  // required_version = "0.9.0"
  required_version = "1.0.0" # pinned
}
"""
        assert required_versions_in_text(text) == ["1.0.0"]

    def test_comment_markers_inside_strings_are_kept(self):
        text = 'terraform {\n  required_version = ">= 1.0"\n  experiments = ["a#b"]\n}\n'
        assert required_versions_in_text(text) == [">= 1.0"]

    def test_multiple_blocks(self):
        text = (
            'terraform {\n  required_version = "~> 1.0"\n}\n'
            'terraform {\n  required_version = ">= 1.2"\n}\n'
        )
        assert required_versions_in_text(text) == ["~> 1.0", ">= 1.2"]


class TestLoadRequiredVersions:

    def test_sorted_file_order(self, tmp_path):
        (tmp_path / "versions.tf").write_text('terraform {\n  required_version = ">= 1.2"\n}\n')
        (tmp_path / "main.tf").write_text('terraform {\n  required_version = "~> 1.0"\n}\n')
        (tmp_path / "notes.md").write_text('terraform {\n  required_version = "0.1.0"\n}\n')

        assert load_required_versions(tmp_path) == ["~> 1.0", ">= 1.2"]

    def test_no_tf_files(self, tmp_path):
        assert load_required_versions(tmp_path) == []

    def test_undecodable_file_raises(self, tmp_path):
        (tmp_path / "main.tf").write_bytes(b"\xff\xfe\xfa terraform")
        with pytest.raises(ConfigError):
            load_required_versions(tmp_path)
