import os
from pathlib import Path
from typing import Iterator, Tuple, Union


def split_filename(filename: str) -> Tuple[str, str]:
    """Split a filename into base name and extension.

    The extension runs from the last dot to the end, dot included. A leading
    dot does not start an extension, so ".profile" has no extension.
    """
    return os.path.splitext(filename)


def iter_candidates(filename: str) -> Iterator[str]:
    """Yield storage names for a requested filename in preference order.

    The requested name comes first, followed by "{base}-1{ext}",
    "{base}-2{ext}" and so on without end.
    """
    base_name, ext = split_filename(filename)
    yield filename
    counter = 1
    while True:
        yield f"{base_name}-{counter}{ext}"
        counter += 1


def resolve_filename(directory: Union[str, Path], filename: str) -> str:
    """Return the first candidate name with no existing entry in directory.

    This only checks; nothing is created. Two calls without a write in
    between return the same name.
    """
    if not filename:
        raise ValueError("Filename must not be empty")

    directory = Path(directory)
    for candidate in iter_candidates(filename):
        # lexists so a dangling symlink still counts as taken
        if not os.path.lexists(directory / candidate):
            return candidate
