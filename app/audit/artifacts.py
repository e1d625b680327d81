from pathlib import Path

from app.audit.models import AuditDetails, ResultBag
from app.exceptions import StateError


def report_path(results: ResultBag, kind: str, suffix: str) -> tuple[str, Path]:
    """Filename and local path for a report artifact of ``kind``.

    Names are ``<checksum>-<kind>[-<suffix>].json`` so re-uploads of the same
    package overwrite earlier artifacts.

    Raises:
        StateError: if the bag has no temp folder or no checksum.
    """
    if not results.temp_folder:
        raise StateError("no temp folder to write results to before upload")
    if not results.checksum:
        raise StateError("there was no checksum to be used for filenames")
    filename = f"{results.checksum}-{kind}"
    filename += f"-{suffix}.json" if suffix else ".json"
    return filename, Path(results.temp_folder) / filename


def upload_report(results: ResultBag, filename: str, path: Path) -> AuditDetails:
    """Upload a written report through the bag's file store.

    Raises:
        StateError: if the bag has no file store.
        TransportError: if the upload fails.
    """
    store = results.file_store
    if store is None:
        raise StateError("could not get file store to upload to")
    store.upload_file(str(path), filename)
    return AuditDetails(type=store.kind(), key=filename, bucket_name=store.collection_ref())
