"""
Unit tests for input validation utilities.
"""

import pytest

from catalog_ingest.utils.validation import (
    InputValidationError,
    validate_batch_id,
    validate_file_path,
)


class TestValidateBatchId:
    """Tests for validate_batch_id"""

    def test_generated_id_format_accepted(self):
        assert validate_batch_id(" batch_1731801600000_k3j9x ") == "batch_1731801600000_k3j9x"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_rejected(self, value):
        with pytest.raises(InputValidationError):
            validate_batch_id(value)

    def test_injection_rejected(self):
        with pytest.raises(InputValidationError, match="invalid characters"):
            validate_batch_id("batch; DROP TABLE ingest_batch")

    def test_too_long_rejected(self):
        with pytest.raises(InputValidationError, match="maximum length"):
            validate_batch_id("b" * 129)


class TestValidateFilePath:
    """Tests for validate_file_path"""

    def test_valid_path(self):
        assert validate_file_path(" data/products.csv ") == "data/products.csv"

    @pytest.mark.parametrize("value", ["data/*.csv", "data/file?.csv", "bad\x00path"])
    def test_unsafe_paths_rejected(self, value):
        with pytest.raises(InputValidationError):
            validate_file_path(value, "--input")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_file_path("")
