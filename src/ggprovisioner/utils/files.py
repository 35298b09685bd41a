import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..logging import get_logger

logger = get_logger(__name__)


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create a directory (and parents) if it does not exist yet."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def atomic_write(target_path: Union[str, Path], data: Union[str, bytes], mode: Optional[int] = None):
    """
    Writes data to a file atomically via a temporary file.
    Prevents a half-written credential file if the process is interrupted.
    When ``mode`` is given the permission bits are applied before the rename.
    """
    target = Path(target_path)
    ensure_directory(target.parent)
    text = isinstance(data, str)

    # Same directory as the target so os.replace stays on one device
    tf = tempfile.NamedTemporaryFile(
        dir=target.parent,
        delete=False,
        mode='w' if text else 'wb',
        encoding='utf-8' if text else None,
        suffix=".tmp"
    )
    temp_name = tf.name

    try:
        with tf:
            tf.write(data)
        if mode is not None:
            os.chmod(temp_name, mode)
        os.replace(temp_name, target)
    except Exception as e:
        logger.error(f"Failed to perform atomic write to {target}: {e}")
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise
