import io
import zipfile
from typing import Union


def pack(filename: str, content: Union[str, bytes]) -> bytes:
    """Return a zip archive holding a single file *filename* with *content*.

    The archive is built in memory; ``str`` content is stored as UTF-8.
    """
    data = content.encode("utf-8") if isinstance(content, str) else content

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(filename, data)
    return buffer.getvalue()
