"""Top-level package for Page Arranger.

Provides subpackages:
- page_arranger.core – page slot / page set data model
- page_arranger.arrange – merge state machine, reorder, export planning, session
- page_arranger.imaging – rasterizer and compositor
- page_arranger.output – PDF reconstruction and ZIP packaging
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import version as pkg_version, PackageNotFoundError
        return pkg_version("page-arranger")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
