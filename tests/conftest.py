from pathlib import Path

import pytest

from tests.archives import PACKAGE_FILES, build_zip


@pytest.fixture()
def package_zip_bytes() -> bytes:
    """A small three-file package archive."""
    return build_zip(PACKAGE_FILES)


@pytest.fixture()
def package_zip(tmp_path: Path, package_zip_bytes: bytes) -> Path:
    path = tmp_path / "package.zip"
    path.write_bytes(package_zip_bytes)
    return path
