"""
Zip export of a generated site.
"""

import io
import zipfile
from pathlib import Path
from typing import Dict, Union

from webber.models import GeneratedSite


EXPORT_FILENAME = "webber-site.zip"

INDEX_MEMBER = "index.html"
STYLE_MEMBER = "style.css"
SCRIPT_MEMBER = "script.js"

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <link rel="stylesheet" href="{style}">
  </head>
  <body>
    {html}
    <script src="{script}"></script>
  </body>
</html>
"""


def build_index_html(site: GeneratedSite) -> str:
    """HTML document wrapping the markup and linking the stylesheet and script."""
    return INDEX_TEMPLATE.format(style=STYLE_MEMBER, script=SCRIPT_MEMBER, html=site.html)


def package_site(site: GeneratedSite) -> bytes:
    """
    Bundle a site into a zip archive.

    Content is written verbatim; nothing is validated.

    Args:
        site: Generated site.

    Returns:
        Zip archive bytes with index.html, style.css and script.js.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(INDEX_MEMBER, build_index_html(site))
        zf.writestr(STYLE_MEMBER, site.css)
        zf.writestr(SCRIPT_MEMBER, site.js)
    return buffer.getvalue()


def read_package(data: bytes) -> Dict[str, str]:
    """Read the members of an exported archive back as text."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name).decode("utf-8") for name in zf.namelist()}


class ExportPackager:
    """Writes site archives to disk."""

    def __init__(self, output_dir: Union[str, Path] = "outputs"):
        """
        Initialize the packager.

        Args:
            output_dir: Root directory for exports.
        """
        self.output_dir = Path(output_dir)

    def write(
        self,
        site: GeneratedSite,
        subdir: str = "",
        filename: str = EXPORT_FILENAME
    ) -> Path:
        """
        Save a site archive.

        Args:
            site: Generated site.
            subdir: Optional directory under the output root (e.g. a request id).
            filename: Archive file name.

        Returns:
            Path to the written archive.
        """
        target_dir = self.output_dir / subdir if subdir else self.output_dir
        target_dir.mkdir(parents=True, exist_ok=True)

        archive_path = target_dir / filename
        archive_path.write_bytes(package_site(site))
        return archive_path
