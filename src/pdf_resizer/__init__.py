"""Top-level package for the PDF Resizer.

Provides subpackages:
- pdf_resizer.core – units, data models and job-file schemas
- pdf_resizer.layout – the pure geometry engine (fill/fit/scale, padding, trim)
- pdf_resizer.naming – paper-code detection and filename templating
- pdf_resizer.export – task planning, conflict gate, rendering and writing
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version
    from pathlib import Path

    # In dev mode, read directly from pyproject.toml
    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.1"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        return pkg_version("pdf_resizer")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
