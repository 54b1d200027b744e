"""Line splitting and edit-list computation.

Both repository implementations turn a pair of blob contents into a
PathDiff through this module, so line counting and binary handling are
identical no matter where the content comes from.
"""

from difflib import SequenceMatcher

from dulwich.patch import is_binary

from longevity.repository._models import ChangeType, Edit, PathDiff


def split_lines(data: bytes) -> list[bytes]:
    """Split blob content into lines the way git counts them.

    Lines are separated by ``\\n``. A trailing newline terminates the last
    line rather than starting an empty one.

    Args:
        data: Raw blob content.

    Returns:
        Lines without their terminating newline.

    Example:
        >>> split_lines(b"a\\nb\\n")
        [b'a', b'b']
        >>> split_lines(b"a\\nb")
        [b'a', b'b']
    """
    if not data:
        return []
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return lines


def decode_lines(data: bytes) -> list[str]:
    """Split blob content into text lines, replacing undecodable bytes."""
    return [
        line.decode("utf-8", errors="replace").rstrip("\r")
        for line in split_lines(data)
    ]


def compute_edits(old_lines: list[bytes], new_lines: list[bytes]) -> tuple[Edit, ...]:
    """Compute the edit regions between two line sequences.

    Uses SequenceMatcher opcodes; every non-equal opcode becomes one Edit.
    Regions are returned in ascending order and never overlap.

    Args:
        old_lines: Lines on the parent side.
        new_lines: Lines on the commit side.

    Returns:
        Edit regions, old side against new side.
    """
    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    return tuple(
        Edit(old_start=i1, old_end=i2, new_start=j1, new_end=j2)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes()
        if tag != "equal"
    )


def build_path_diff(  # noqa: PLR0913
    change_type: ChangeType,
    *,
    old_path: str | None,
    new_path: str | None,
    old_data: bytes | None,
    new_data: bytes | None,
    old_id: str | None = None,
    new_id: str | None = None,
) -> PathDiff:
    """Build a PathDiff from the content on both sides of a change.

    Binary revisions are never tracked line by line. When only one side is
    binary the change is reported from the text side's point of view: a
    text file that becomes binary is a deletion of its text lines, and a
    binary file that becomes text is an addition of its text lines.

    Args:
        change_type: Kind of change as reported by the tree comparison.
        old_path: Path on the parent side, or None for additions.
        new_path: Path on the commit side, or None for deletions.
        old_data: Content on the parent side, or None for additions.
        new_data: Content on the commit side, or None for deletions.
        old_id: Blob id on the parent side.
        new_id: Blob id on the commit side.

    Returns:
        The PathDiff with its edit list computed.
    """
    old_binary = old_data is not None and is_binary(old_data)
    new_binary = new_data is not None and is_binary(new_data)

    if (old_data is None or old_binary) and (new_data is None or new_binary):
        return PathDiff(
            change_type=change_type,
            old_path=old_path,
            new_path=new_path,
            old_id=old_id,
            new_id=new_id,
            binary=True,
        )

    if new_binary:
        change_type, new_path, new_data, new_id = ChangeType.DELETE, None, None, None
    elif old_binary:
        change_type, old_path, old_data, old_id = ChangeType.ADD, None, None, None

    edits = compute_edits(split_lines(old_data or b""), split_lines(new_data or b""))
    return PathDiff(
        change_type=change_type,
        old_path=old_path,
        new_path=new_path,
        edits=edits,
        old_id=old_id,
        new_id=new_id,
    )
