"""Tests for file name validation and the local path validator."""

from pathlib import Path

import pytest

from bulkops.fs.paths import LocalPathValidator, validate_file_name


class TestValidateFileName:
    """Test platform name rules."""

    @pytest.mark.parametrize(
        "name", ["report.pdf", ".bashrc", "Season 01", "a" * 255, "über.txt"]
    )
    def test_valid_names(self, name: str) -> None:
        result = validate_file_name(name, windows=False)

        assert result.is_valid
        assert result.error_message is None

    def test_empty_name(self) -> None:
        result = validate_file_name("", windows=False)

        assert not result.is_valid
        assert result.error_message == "File name must not be empty"

    def test_blank_name(self) -> None:
        assert not validate_file_name("   ", windows=False).is_valid

    def test_too_long(self) -> None:
        result = validate_file_name("a" * 256, windows=False)

        assert not result.is_valid
        assert "too long" in (result.error_message or "")

    @pytest.mark.parametrize("char", ["<", ">", ":", '"', "|", "?", "*", "/"])
    def test_invalid_characters(self, char: str) -> None:
        result = validate_file_name(f"a{char}b.txt", windows=False)

        assert not result.is_valid
        assert (result.error_message or "").startswith(
            "File name contains invalid characters"
        )

    def test_null_byte(self) -> None:
        assert not validate_file_name("a\0b", windows=False).is_valid

    def test_leading_or_trailing_space(self) -> None:
        assert not validate_file_name(" a.txt", windows=False).is_valid
        assert not validate_file_name("a.txt ", windows=False).is_valid

    def test_windows_only_rules(self) -> None:
        assert validate_file_name("CON.txt", windows=False).is_valid
        assert not validate_file_name("CON.txt", windows=True).is_valid
        assert not validate_file_name("lpt1", windows=True).is_valid
        assert not validate_file_name("a\\b", windows=True).is_valid
        assert not validate_file_name("trailing.", windows=True).is_valid


class TestLocalPathValidator:
    """Test disk lookups."""

    @pytest.mark.asyncio
    async def test_exists_and_is_directory(self, tmp_path: Path) -> None:
        validator = LocalPathValidator()
        file_path = tmp_path / "a.txt"
        file_path.write_text("x")

        assert await validator.path_exists(file_path)
        assert not await validator.path_exists(tmp_path / "missing")
        assert await validator.is_directory(tmp_path)
        assert not await validator.is_directory(file_path)

    def test_validate_file_name_delegates(self) -> None:
        assert not LocalPathValidator().validate_file_name("").is_valid
