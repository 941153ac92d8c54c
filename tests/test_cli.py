"""
Tests for the pdf-resizer command line.

Test Coverage:
- Spec shorthand parsing
- Default filename template and config merging
- main(): exports, conflict policies, job files and exit codes
"""
import argparse
import json
from pathlib import Path

import pytest
from PIL import Image

from pdf_resizer.cli import (
    EXIT_OK,
    EXIT_RUN_ERROR,
    EXIT_TASK_FAILURE,
    build_config,
    build_parser,
    default_template,
    describe_spec,
    main,
    parse_spec,
)
from pdf_resizer.core.models import (
    Axis,
    FillParams,
    LockField,
    OutputFormat,
    PaddingPolicy,
    ScaleParams,
    SizeMode,
)
from pdf_resizer.export import ALL_PAGES


class TestParseSpec:
    """Tests for parse_spec()."""

    def test_parse_spec_fill(self):
        spec = parse_spec("fill:210x297")

        assert spec.params == FillParams(210, 297)
        assert spec.output_format is OutputFormat.PDF

    def test_parse_spec_width_with_margin_outside(self):
        spec = parse_spec("width:150, margin=5, outside")

        assert spec.mode is SizeMode.FIT_HEIGHT
        assert spec.params.axis is Axis.WIDTH
        assert spec.margin == 5
        assert spec.padding is PaddingPolicy.OUTSIDE

    def test_parse_spec_scale(self):
        assert parse_spec("scale:1.5").params == ScaleParams(1.5)

    def test_parse_spec_png_fit(self):
        spec = parse_spec("png-fit:width:800")

        assert spec.output_format is OutputFormat.PNG
        assert spec.params.lock_field is LockField.WIDTH
        assert spec.mode is SizeMode.SCALE

    @pytest.mark.parametrize(
        "text",
        ["", "fill:210", "stretch:10", "width:-5", "png:dpi:300", "scale:2,bleed=3"],
    )
    def test_parse_spec_when_malformed_then_argument_type_error(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_spec(text)


class TestConfig:
    """Tests for default_template() and build_config()."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("flyer.pdf", "flyer_*size*"),
            ("flyer_210x297.pdf", "flyer_*size*"),
            ("flyer_A4v_250101.pdf", "flyer_*size*_*YYMMDD*"),
        ],
    )
    def test_default_template(self, name, expected):
        assert default_template(Path(name)) == expected

    def test_build_config_defaults_next_to_source(self, tmp_path):
        args = build_parser().parse_args([str(tmp_path / "flyer.pdf"), "--spec", "scale:1"])

        config = build_config(args, args.source, None)

        assert config.output_dir == tmp_path
        assert config.base_name == "flyer_*size*"
        assert config.pages == 0

    def test_build_config_applies_overrides(self, tmp_path):
        args = build_parser().parse_args([
            "flyer.pdf", "--spec", "scale:1",
            "-o", str(tmp_path), "--subfolder", "print", "--name", "x_*size*",
            "--all-pages", "--trim", "2", "--workers", "3",
        ])

        config = build_config(args, args.source, None)

        assert config.destination_dir == tmp_path / "print"
        assert config.base_name == "x_*size*"
        assert config.pages == ALL_PAGES
        assert config.trim == 2
        assert config.max_workers == 3

    def test_build_config_when_page_zero_then_raises(self):
        args = build_parser().parse_args(["flyer.pdf", "--page", "0"])

        with pytest.raises(ValueError):
            build_config(args, args.source, None)


def test_describe_spec_labels():
    assert describe_spec(parse_spec("fill:100x50")) == "fill 100 × 50 mm"
    assert describe_spec(parse_spec("width:150,margin=5")) == "width 150 mm, margin 5 mm inside"
    assert describe_spec(parse_spec("png:ppi:300")) == "png ppi 300 (fill)"


class TestMain:
    """Tests for main()."""

    def test_main_exports_next_to_source(self, sample_pdf_file):
        # Act
        code = main([str(sample_pdf_file), "--spec", "fill:148x210", "--spec", "png:ppi:20"])

        # Assert
        assert code == EXIT_OK
        assert (sample_pdf_file.parent / "flyer_A5v.pdf").is_file()
        assert (sample_pdf_file.parent / "flyer_165x234.png").is_file()

    def test_main_when_conflict_cancel_then_exit_1_and_untouched(self, sample_pdf_file):
        # Arrange
        existing = sample_pdf_file.parent / "flyer_A4v.pdf"
        existing.write_bytes(b"keep")

        # Act
        code = main([str(sample_pdf_file), "--spec", "scale:1", "--on-conflict", "cancel"])

        # Assert
        assert code == EXIT_TASK_FAILURE
        assert existing.read_bytes() == b"keep"

    def test_main_when_conflict_skip_then_exit_0(self, sample_pdf_file):
        existing = sample_pdf_file.parent / "flyer_A4v.pdf"
        existing.write_bytes(b"keep")

        code = main([str(sample_pdf_file), "--spec", "scale:1", "--on-conflict", "skip"])

        assert code == EXIT_OK
        assert existing.read_bytes() == b"keep"

    def test_main_with_job_file(self, tmp_path, sample_pdf_file):
        # Arrange
        job_path = tmp_path / "job.json"
        job_path.write_text(json.dumps({
            "source": sample_pdf_file.name,
            "output_dir": "out",
            "base_name": "job_*size*",
            "sizes": [{"mode": "fit_height", "width": 100}],
        }), encoding="utf-8")

        # Act
        code = main(["--job", str(job_path)])

        # Assert
        assert code == EXIT_OK
        assert (tmp_path / "out" / "job_100x141.pdf").is_file()

    def test_main_when_job_invalid_then_exit_2(self, tmp_path):
        job_path = tmp_path / "job.json"
        job_path.write_text(json.dumps({"sizes": []}), encoding="utf-8")

        assert main(["--job", str(job_path)]) == EXIT_RUN_ERROR

    def test_main_when_no_source_then_exit_2(self):
        assert main(["--spec", "scale:1"]) == EXIT_RUN_ERROR

    def test_main_when_no_specs_then_exit_2(self, sample_pdf_file):
        assert main([str(sample_pdf_file)]) == EXIT_RUN_ERROR

    def test_main_when_source_missing_then_exit_2(self, tmp_path):
        assert main([str(tmp_path / "missing.pdf"), "--spec", "scale:1"]) == EXIT_RUN_ERROR

    def test_main_when_source_not_decodable_then_exit_2(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("not a document", encoding="utf-8")

        assert main([str(source), "--spec", "scale:1"]) == EXIT_RUN_ERROR

    def test_main_when_page_out_of_range_then_exit_2(self, sample_pdf_file):
        assert main([str(sample_pdf_file), "--spec", "scale:1", "--page", "2"]) == EXIT_RUN_ERROR

    def test_main_when_spec_malformed_then_argparse_exits(self, sample_pdf_file):
        with pytest.raises(SystemExit) as exc_info:
            main([str(sample_pdf_file), "--spec", "stretch:3"])

        assert exc_info.value.code == 2

    def test_main_when_image_exceeds_pixel_limit_then_exit_2(self, tmp_path, png_factory, monkeypatch):
        # Arrange
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        source = tmp_path / "scan.png"
        source.write_bytes(png_factory(40, 40))

        # Act
        code = main([str(source), "--spec", "png:ppi:72"])

        # Assert
        assert code == EXIT_RUN_ERROR
        assert [p.name for p in tmp_path.iterdir()] == ["scan.png"]
