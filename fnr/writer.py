"""Committing planned content back to disk."""

import hashlib
import logging
import os
import stat as stat_module
import tempfile

from .errors import FileWriteError
from .models import FileChangeSet, Fingerprint, WriteResult, WriteStatus

logger = logging.getLogger(__name__)


def fingerprint_of(data: bytes, stat: os.stat_result) -> Fingerprint:
    return Fingerprint(
        size=stat.st_size,
        mtime_ns=stat.st_mtime_ns,
        digest=hashlib.sha256(data).hexdigest(),
    )


def _current_fingerprint(path: str) -> Fingerprint:
    try:
        with open(path, "rb") as file_obj:
            stat = os.fstat(file_obj.fileno())
            data = file_obj.read()
    except FileNotFoundError as exc:
        raise FileWriteError(path, "file disappeared since it was scanned") from exc
    except OSError as exc:
        raise FileWriteError(path, f"cannot re-read file ({exc.strerror or exc})") from exc
    return fingerprint_of(data, stat)


def _ensure_unchanged(change_set: FileChangeSet) -> os.stat_result:
    current = _current_fingerprint(change_set.path)
    if current.digest != change_set.fingerprint.digest:
        raise FileWriteError(change_set.path, "file changed on disk since it was scanned")
    return os.stat(change_set.path)


def _replace_atomically(path: str, content: bytes, mode: int) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, temp_path = tempfile.mkstemp(prefix=f".{os.path.basename(path)}.", suffix=".fnr~", dir=directory)
    try:
        with os.fdopen(fd, "wb") as temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


def commit(change_set: FileChangeSet, final_content: str, dry_run: bool) -> WriteResult:
    """Persist ``final_content`` for one file.

    The original path is only ever swapped for a fully written and synced
    temporary file, so a failure leaves it untouched. A file that vanished
    or changed after scanning is reported as a failed write.
    """
    replaced = len(change_set.accepted_edits)

    if dry_run:
        return WriteResult(change_set.path, WriteStatus.DRY_RUN, replaced=replaced)

    if replaced == 0 or final_content == change_set.original:
        return WriteResult(change_set.path, WriteStatus.UNCHANGED)

    try:
        stat = _ensure_unchanged(change_set)
        _replace_atomically(
            change_set.path,
            final_content.encode("utf-8", errors="surrogateescape"),
            stat_module.S_IMODE(stat.st_mode),
        )
    except FileWriteError as exc:
        logger.warning("%s", exc)
        return WriteResult(change_set.path, WriteStatus.FAILED, error=exc.reason)
    except UnicodeEncodeError as exc:
        logger.warning("%s: cannot encode new content: %s", change_set.path, exc.reason)
        return WriteResult(change_set.path, WriteStatus.FAILED, error=f"cannot encode as UTF-8 ({exc.reason})")
    except OSError as exc:
        logger.warning("%s: write failed: %s", change_set.path, exc)
        return WriteResult(change_set.path, WriteStatus.FAILED, error=str(exc.strerror or exc))

    logger.debug("%s: wrote %d replacement(s)", change_set.path, replaced)
    return WriteResult(change_set.path, WriteStatus.WRITTEN, replaced=replaced)
