"""Unit tests for input validators."""

from promptcraft.core.config import MAX_FILE_SIZE_BYTES, MAX_PROMPT_LENGTH, MAX_REFERENCE_IMAGES
from promptcraft.core.errors import FILE_TOO_LARGE, INVALID_FILE_TYPE, ErrorKind
from promptcraft.core.models import ReferenceImage
from promptcraft.core.validation import validate_file, validate_prompt, validate_reference_images


def make_image(name="ref.png", mime_type="image/png", size=1024) -> ReferenceImage:
    return ReferenceImage(path=f"/tmp/{name}", name=name, mime_type=mime_type, size=size)


class TestValidatePrompt:
    """Tests for validate_prompt."""

    def test_valid_prompt(self):
        assert validate_prompt("A cat on a windowsill") is None

    def test_empty_prompt(self):
        error = validate_prompt("")
        assert error.kind == ErrorKind.VALIDATION
        assert error.message == "Prompt cannot be empty"

    def test_whitespace_prompt(self):
        assert validate_prompt("   \n\t").message == "Prompt cannot be empty"

    def test_exactly_max_length_is_valid(self):
        assert validate_prompt("a" * MAX_PROMPT_LENGTH) is None

    def test_one_over_max_length(self):
        error = validate_prompt("a" * (MAX_PROMPT_LENGTH + 1))
        assert error.kind == ErrorKind.VALIDATION
        assert error.message == (
            "Prompt is too long (4001 characters). Maximum is 4000 characters."
        )
        assert error.details == "Length: 4001/4000 characters"
        assert error.retryable is False


class TestValidateFile:
    """Tests for validate_file."""

    def test_valid_png(self):
        assert validate_file(make_image()) is None

    def test_valid_jpeg_and_webp(self):
        assert validate_file(make_image("a.jpg", "image/jpeg")) is None
        assert validate_file(make_image("a.webp", "image/webp")) is None

    def test_exactly_max_size_is_valid(self):
        assert validate_file(make_image(size=MAX_FILE_SIZE_BYTES)) is None

    def test_too_large(self):
        error = validate_file(make_image(size=MAX_FILE_SIZE_BYTES + 1))
        assert error.kind == ErrorKind.FILE
        assert error.code == FILE_TOO_LARGE
        assert error.details == "File size: 5.00MB"

    def test_wrong_type(self):
        error = validate_file(make_image("a.gif", "image/gif"))
        assert error.code == INVALID_FILE_TYPE

    def test_unidentified_type(self):
        assert validate_file(make_image("a.png", None)).code == INVALID_FILE_TYPE

    def test_size_checked_before_type(self):
        error = validate_file(make_image("a.gif", "image/gif", MAX_FILE_SIZE_BYTES * 2))
        assert error.code == FILE_TOO_LARGE


class TestValidateReferenceImages:
    """Tests for batch validation of uploads."""

    def test_each_file_validated_independently(self):
        files = [
            make_image("ok1.png"),
            make_image("big.png", size=MAX_FILE_SIZE_BYTES + 1),
            make_image("ok2.jpg", "image/jpeg"),
            make_image("anim.gif", "image/gif"),
        ]
        accepted, errors = validate_reference_images(files)

        assert [f.name for f in accepted] == ["ok1.png", "ok2.jpg"]
        assert errors == [
            "big.png: File size is too large. Please use files under 5MB.",
            "anim.gif: Invalid file type. Please use PNG, JPG, or WebP images.",
        ]

    def test_capped_to_limit_in_upload_order(self):
        files = [make_image(f"{i}.png") for i in range(MAX_REFERENCE_IMAGES + 2)]
        accepted, errors = validate_reference_images(files)

        assert [f.name for f in accepted] == [f"{i}.png" for i in range(MAX_REFERENCE_IMAGES)]
        assert errors == []

    def test_existing_images_count_toward_limit(self):
        files = [make_image(f"{i}.png") for i in range(3)]
        accepted, _ = validate_reference_images(files, existing=4)
        assert [f.name for f in accepted] == ["0.png"]

    def test_full_set_accepts_nothing(self):
        accepted, _ = validate_reference_images([make_image()], existing=MAX_REFERENCE_IMAGES)
        assert accepted == []
