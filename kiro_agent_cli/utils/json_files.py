"""JSON file helpers shared by the local registry and the MCP config merger."""

import contextlib
import json
import tempfile
from pathlib import Path
from typing import Any


def write_json_atomic(path: Path, data: Any) -> None:
    """Write ``data`` as indented JSON, replacing ``path`` atomically.

    The document is written to a temp file in the same directory and renamed
    over the target, so readers never observe a half-written file.

    Raises:
        OSError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w", dir=path.parent, prefix=f"{path.stem}_", suffix=".tmp", delete=False, encoding="utf-8"
    ) as tmp_file:
        temp_path = Path(tmp_file.name)
        try:
            json.dump(data, tmp_file, indent=2, ensure_ascii=False)
            tmp_file.write("\n")
            tmp_file.flush()
        except Exception as e:
            with contextlib.suppress(OSError):
                temp_path.unlink()
            raise OSError(f"Failed to write {path}: {e}") from e

    temp_path.replace(path)
