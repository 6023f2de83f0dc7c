import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union
from ytharvest.core.errors import SinkIOError
from ytharvest.schemas import VideoRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_collection(path: PathLike) -> List[Any]:
    """Current contents of a sink file; anything missing or unreadable counts as empty."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {path}, treating it as empty: {e}")
        return []
    if not isinstance(data, list):
        logger.warning(f"{path} does not hold a JSON array, treating it as empty")
        return []
    return data


def _target_mode(path: Path) -> int:
    """Mode of the file being replaced, or what a plain ``open()`` would give under the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_collection(path: PathLike, data: List[Any]) -> None:
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            json.dump(data, tmp, indent=2, ensure_ascii=False)
            tmp.flush()
            os.fsync(tmp.fileno())
        # temp files are created 0600
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SinkIOError(f"Could not write {path}: {e}") from e


def reset_collection(path: PathLike) -> None:
    write_collection(path, [])


def ensure_parent(path: PathLike) -> None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SinkIOError(f"Could not create directory for {path}: {e}") from e


def merge_metadata(path: PathLike, videos: Iterable[Union[VideoRecord, Dict[str, Any]]]) -> int:
    """Merge records into the metadata file, one entry per id, last write wins.

    Existing entries keep their position; new ids are appended in input order.
    Returns the number of unique records in the file afterwards.
    """
    new_records = [v.to_json() if isinstance(v, VideoRecord) else dict(v) for v in videos]
    merged: Dict[str, Dict[str, Any]] = {}
    for record in read_collection(path) + new_records:
        if not isinstance(record, dict) or not record.get("id"):
            logger.warning(f"Discarding entry without an id from {path}")
            continue
        merged[record["id"]] = record

    write_collection(path, list(merged.values()))
    logger.info(f"Appended {len(new_records)} videos to {path}, total unique videos: {len(merged)}")
    return len(merged)


def merge_ids(path: PathLike, video_ids: Iterable[str]) -> int:
    new_ids = list(video_ids)
    existing = [i for i in read_collection(path) if isinstance(i, str)]
    unique_ids = list(dict.fromkeys(existing + new_ids))

    write_collection(path, unique_ids)
    logger.info(f"Appended {len(new_ids)} video IDs to {path}, total unique IDs: {len(unique_ids)}")
    return len(unique_ids)
