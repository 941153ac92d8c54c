"""
Tests for export job schema validation.

Tests that:
1. Valid jobs pass validation
2. Invalid jobs raise ValidationError with a path and every violation
3. Format/mode combinations are enforced per size entry
"""
import pytest

from pdf_resizer.core.schemas import (
    EXPORT_JOB_SCHEMA_VERSION,
    ValidationError,
    validate_job,
)


def valid_job(**overrides):
    job = {
        "schema_version": EXPORT_JOB_SCHEMA_VERSION,
        "source": "flyer.pdf",
        "output_dir": "out",
        "base_name": "flyer_*size*",
        "pages": "all",
        "sizes": [
            {"mode": "fill", "width": 210, "height": 297},
            {"format": "png", "mode": "fill", "ppi": 300},
        ],
    }
    job.update(overrides)
    return job


class TestValidJobs:
    """Jobs that must pass."""

    def test_valid_job_passes(self):
        validate_job(valid_job())

    def test_minimal_job_passes(self):
        validate_job({"sizes": [{"mode": "scale", "factor": 0.5}]})

    @pytest.mark.parametrize(
        "size",
        [
            {"mode": "fit_height", "width": 150},
            {"mode": "fit_width", "height": 150, "margin": 5, "padding": "outside"},
            {"format": "png", "mode": "scale", "width": 800},
            {"format": "png", "mode": "fill", "height": 600},
        ],
    )
    def test_size_variants_pass(self, size):
        validate_job(valid_job(sizes=[size]))


class TestInvalidJobs:
    """Jobs that must be rejected."""

    def test_non_object_job_rejected(self):
        with pytest.raises(ValidationError, match="JSON object"):
            validate_job(["sizes"])

    def test_unsupported_version_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_job(valid_job(schema_version=2))

        assert exc_info.value.path == "schema_version"

    def test_missing_sizes_rejected(self):
        with pytest.raises(ValidationError):
            validate_job({"source": "flyer.pdf"})

    def test_empty_sizes_rejected(self):
        with pytest.raises(ValidationError):
            validate_job(valid_job(sizes=[]))

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            validate_job(valid_job(colour="red"))

    @pytest.mark.parametrize("pages", [0, -1, "first", 1.5])
    def test_invalid_pages_rejected(self, pages):
        with pytest.raises(ValidationError):
            validate_job(valid_job(pages=pages))

    def test_fill_without_height_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_job(valid_job(sizes=[{"mode": "fill", "width": 100}]))

        assert exc_info.value.path.startswith("sizes[0]")

    def test_png_fit_mode_rejected(self):
        with pytest.raises(ValidationError):
            validate_job(valid_job(sizes=[{"format": "png", "mode": "fit_width", "ppi": 300}]))

    def test_png_with_two_locks_rejected(self):
        with pytest.raises(ValidationError):
            validate_job(valid_job(sizes=[{"format": "png", "mode": "fill", "ppi": 300, "width": 100}]))

    def test_negative_width_rejected(self):
        with pytest.raises(ValidationError):
            validate_job(valid_job(sizes=[{"mode": "fit_height", "width": -5}]))

    def test_all_violations_collected(self):
        """Every violation is listed, not just the first."""
        job = valid_job(background="red", max_workers=0)

        with pytest.raises(ValidationError) as exc_info:
            validate_job(job)

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert any(e.startswith("background") for e in errors)
        assert any(e.startswith("max_workers") for e in errors)
