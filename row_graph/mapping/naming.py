"""Column name matching helpers.

Fields accept several spellings of a column name: the literal attribute
name, its snake_case and lowercase forms, and the same forms qualified by
the names of the associations that lead to the field.
"""

from __future__ import annotations

SNAKE_DELIMITER = "_"


def _is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def to_snake_case(name: str) -> str:
    """Convert a CamelCase, camelCase, spaced or hyphenated name to snake_case.

    >>> to_snake_case("UserID2")
    'user_id2'
    """
    name = name.strip(" ")
    out: list[str] = []
    for i, ch in enumerate(name):
        case_changes = False
        if i + 1 < len(name):
            nxt = name[i + 1]
            case_changes = (_is_upper(ch) and _is_lower(nxt)) or (
                _is_lower(ch) and _is_upper(nxt)
            )

        if i > 0 and not out[-1].endswith(SNAKE_DELIMITER) and case_changes:
            if _is_upper(ch):
                out.append(SNAKE_DELIMITER + ch)
            else:
                out.append(ch + SNAKE_DELIMITER)
        elif ch in (" ", "-"):
            out.append(SNAKE_DELIMITER)
        else:
            out.append(ch)
    return "".join(out).lower()


def column_name_candidates(
    field_name: str,
    ancestors: list[str],
    delimiter: str,
) -> set[str]:
    """Return every column name a field is willing to bind to.

    Args:
        field_name: The field's matching name. Empty for primitive sequences,
            which match on their ancestor names alone.
        ancestors: Association names from the root down to the field's owner.
        delimiter: Separator placed between ancestor names in the mixed-case
            form. The snake form always uses an underscore.
    """
    candidates: set[str] = set()
    if field_name:
        candidates.add(field_name)
        candidates.add(to_snake_case(field_name))
        candidates.add(field_name.lower())

    name_concat = field_name
    snake_concat = to_snake_case(field_name)
    for ancestor in reversed(ancestors):
        snake_ancestor = to_snake_case(ancestor)
        if not name_concat:
            name_concat = ancestor
            snake_concat = snake_ancestor
        else:
            name_concat = ancestor + delimiter + name_concat
            snake_concat = snake_ancestor + SNAKE_DELIMITER + snake_concat
        candidates.add(name_concat)
        candidates.add(name_concat.lower())
        candidates.add(snake_concat)
        candidates.add(snake_concat.lower())
    return candidates
