"""Resolves user-facing links for indexed documents."""

from shared.models.knowledge import SearchResult

DRIVE_FILE_URL = "https://drive.google.com/file/d/{file_id}/view"


def get_drive_file_url(file_id: str | None) -> str:
    """Return the Google Drive viewer URL for a file id, or "" when there is none."""
    if not file_id:
        return ""
    return DRIVE_FILE_URL.format(file_id=file_id)


def get_source_url(result: SearchResult) -> str | None:
    """Return the original URL of a website-sourced chunk, if any."""
    return result.source_url or None
