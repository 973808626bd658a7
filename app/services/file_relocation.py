"""
Attach uploaded files to a ticket.

Uploads land in a shared folder before the ticket exists. Once a ticket is
saved, each referenced file is moved into ``<UPLOAD_DIR>/tickets/<ticket_id>/``
and its record re-pointed at the ticket. The pass is best effort: a file that
cannot be attached is reported as skipped with a reason and the rest of the
batch still goes through. Only files uploaded within the ticket's company are
considered. Running it again for the same ids is a no-op for files
already in place.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud import file as crud_file
from app.models.file import File, FileReferenceType

logger = logging.getLogger(__name__)

RELOCATED = "relocated"
ALREADY_IN_PLACE = "already_in_place"
SKIPPED = "skipped"


@dataclass
class FileRelocation:
    file_id: int
    status: str
    path: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class RelocationReport:
    results: List[FileRelocation] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def relocated(self) -> int:
        return self._count(RELOCATED)

    @property
    def already_in_place(self) -> int:
        return self._count(ALREADY_IN_PLACE)

    @property
    def skipped(self) -> int:
        return self._count(SKIPPED)

    def to_dict(self) -> dict:
        return {
            "relocated": self.relocated,
            "already_in_place": self.already_in_place,
            "skipped": self.skipped,
            "results": [vars(result) for result in self.results],
        }


def ticket_folder(ticket_id: int) -> str:
    return os.path.join(settings.UPLOAD_DIR, "tickets", str(ticket_id))


def _candidate_sources(db_file: File) -> List[str]:
    """Places an upload may still be sitting in, most specific first"""
    candidates = [
        os.path.join(settings.UPLOAD_DIR, "contracts", db_file.file_name),
        os.path.join(settings.UPLOAD_DIR, "images", db_file.file_name),
    ]
    if db_file.file_path:
        candidates.append(db_file.file_path)
    unique = []
    for candidate in candidates:
        if candidate not in unique:
            unique.append(candidate)
    return unique


def _relocate_one(db: Session, file_id: int, ticket_id: int, company_id: int) -> FileRelocation:
    # Files uploaded by another company are reported exactly like missing ones
    db_file = crud_file.get_company_file(db, file_id, company_id)
    if not db_file:
        logger.warning(f"File {file_id} not found in company {company_id} while attaching to ticket {ticket_id}")
        return FileRelocation(file_id=file_id, status=SKIPPED, reason="File record not found")

    reference_type = FileReferenceType.TICKET_ATTACHMENT.value
    if db_file.reference_type == reference_type and db_file.reference_id not in (None, ticket_id):
        logger.warning(f"File {file_id} is attached to ticket {db_file.reference_id}, not moving it to ticket {ticket_id}")
        return FileRelocation(file_id=file_id, status=SKIPPED, reason="File is attached to another ticket")

    destination = os.path.join(ticket_folder(ticket_id), db_file.file_name)

    if os.path.isfile(destination):
        crud_file.update_file_location(db, db_file, destination, ticket_id, reference_type)
        return FileRelocation(file_id=file_id, status=ALREADY_IN_PLACE, path=destination)

    source = next((path for path in _candidate_sources(db_file) if os.path.isfile(path)), None)
    if source is None:
        logger.warning(
            f"File {file_id} ({db_file.file_name}) not found on disk, leaving it detached from ticket {ticket_id}"
        )
        return FileRelocation(file_id=file_id, status=SKIPPED, reason="File not found on disk")

    try:
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        shutil.move(source, destination)
    except OSError as exc:
        logger.error(f"Failed to move file {file_id} from {source} to {destination}: {exc}")
        return FileRelocation(file_id=file_id, status=SKIPPED, reason=f"Move failed: {exc}")

    crud_file.update_file_location(db, db_file, destination, ticket_id, reference_type)
    logger.info(f"Moved file {file_id} to {destination}")
    return FileRelocation(file_id=file_id, status=RELOCATED, path=destination)


def relocate_ticket_files(db: Session, file_ids: Iterable[int], ticket_id: int, company_id: int) -> RelocationReport:
    """Move each of the company's files into the ticket folder and attach it to the ticket"""
    report = RelocationReport()
    seen = set()
    for file_id in file_ids:
        if file_id in seen:
            continue
        seen.add(file_id)
        report.results.append(_relocate_one(db, file_id, ticket_id, company_id))

    if report.skipped:
        logger.warning(f"Ticket {ticket_id}: {report.skipped} of {len(report.results)} file(s) could not be attached")
    return report
