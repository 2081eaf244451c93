"""Small helpers: de-duplication, files, pids, JSON paths and tables."""

from __future__ import annotations

import hashlib
import json
import os
import re
import secrets
import stat
import sys
from decimal import Decimal
from typing import Any, Iterable, Mapping, MutableMapping, Sequence, TextIO

from tabulate import tabulate

from enscan import log

_EMAIL_RE = re.compile(r"\w+([-+.]\w+)*@\w+([-.]\w+)*\.\w+([-.]\w+)*")


def md5(src: str) -> str:
    """Hex MD5 digest of the UTF-8 text."""
    return hashlib.md5(src.encode("utf-8")).hexdigest()


def unique(items: Iterable[str]) -> list[str]:
    """Drop empty strings and duplicates, keeping first-seen order."""
    return list(dict.fromkeys(item for item in items if item != ""))


def check_list(items: Sequence[str]) -> bool:
    """True when the list is non-empty and holds no empty string."""
    return bool(items) and all(item != "" for item in items)


def range_rand(low: int, high: int) -> int:
    """Cryptographically random integer in ``[low, high]``."""
    if low > high:
        raise ValueError("the min is greater than max!")
    return low + secrets.randbelow(high - low + 1)


def remove_all(target: str, items: Iterable[str]) -> list[str]:
    """Every item except those equal to ``target``."""
    return [item for item in items if item != target]


def file_exists(path: str) -> bool:
    """True if ``path`` exists and is not a directory."""
    return os.path.exists(path) and not os.path.isdir(path)


def folder_exists(path: str) -> bool:
    return os.path.exists(path)


def path_exists(path: str) -> bool:
    """True if ``path`` exists; errors other than absence are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def has_stdin() -> bool:
    """Whether input is piped into standard input."""
    try:
        mode = os.fstat(sys.stdin.fileno()).st_mode
    except (OSError, ValueError, AttributeError):
        return False
    return not stat.S_ISCHR(mode) or stat.S_ISFIFO(mode)


def read_input_lines(stream: TextIO) -> list[str]:
    """All lines of a text stream without their line endings."""
    lines = []
    for line in stream:
        line = line[:-1] if line.endswith("\n") else line
        lines.append(line[:-1] if line.endswith("\r") else line)
    return lines


def read_lines(path: str) -> list[str]:
    """Distinct non-empty lines of a file; a missing file gives no lines."""
    if not file_exists(path):
        return []
    with open(path, encoding="utf-8") as handle:
        return unique(read_input_lines(handle))


def get_config_path() -> str:
    """Absolute directory of the running program."""
    return os.path.dirname(os.path.abspath(sys.argv[0]))


def clean_name(text: str) -> str:
    """Use full-width brackets and strip highlight tags."""
    return (
        text.replace("(", "（")
        .replace(")", "）")
        .replace("<em>", "")
        .replace("</em>", "")
    )


def check_pid(pid: str) -> str:
    """Guess which data source a company pid belongs to, or ``""``."""
    size = len(pid.encode("utf-8"))
    if size == 32:
        return "qcc"
    if size == 14:
        return "aqc"
    if size in (6, 7, 8, 9, 10):
        return "tyc"
    if size in (33, 34):
        if pid.startswith("p"):
            log.error("无法查询法人信息")
        return "xlb"
    log.error(f"pid长度{size}不正确，pid: {pid}")
    return ""


def format_invest(scale: str) -> float:
    """Parse a percentage such as ``"51.2%"``; unknown values give -1."""
    if scale in ("-", "", " "):
        return -1.0
    text = scale.replace("%", "")
    try:
        if text != text.strip() or "_" in text:
            raise ValueError(f"invalid syntax: {text!r}")
        return float(text)
    except ValueError as exc:
        log.error(f"转换失败：{exc}")
        return -1.0


def append_to_file(text: str, path: str) -> int:
    """Append text to a file, creating it; returns the bytes written."""
    data = text.encode("utf-8")
    with open(path, "ab") as handle:
        handle.write(data)
    print(f"写入成功,共写入字节：{len(data)}", end="")
    return len(data)


def verify_email_format(email: str) -> bool:
    """Whether the text contains something shaped like an e-mail address."""
    return _EMAIL_RE.search(email) is not None


def _split_path(path: str) -> list[str]:
    parts, current, escaped = [], [], False
    for char in path:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ".":
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def json_get(value: Any, path: str) -> Any:
    """Value at a dotted path (``"a.b.0"``, ``"list.#"``), or ``None``.

    A string is parsed as JSON text first.
    """
    if not path:
        return None
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    for part in _split_path(path):
        if isinstance(value, Mapping):
            if part not in value:
                return None
            value = value[part]
        elif isinstance(value, list):
            if part == "#":
                value = len(value)
            elif part.isdigit() and int(part) < len(value):
                value = value[int(part)]
            else:
                return None
        else:
            return None
    return value


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return str(value)
        return format(Decimal(repr(value)).normalize(), "f")
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def json_str(value: Any, path: str) -> str:
    """Value at a dotted path rendered as text; missing gives ``""``."""
    return _to_str(json_get(value, path))


def show_table(
    headers: Sequence[str], fields: Sequence[str], name: str, data: Iterable[Any]
) -> str:
    """Print rows as a table, cells cut to 30 characters; returns the table."""
    log.info(name)
    rows = [[json_str(item, field)[:30] for field in fields] for item in data]
    table = tabulate(rows, headers=list(headers), tablefmt="grid")
    print(table)
    return table


def merge_map(
    source: Mapping[str, list], target: MutableMapping[str, list]
) -> None:
    """Extend each list in ``target`` with the matching list in ``source``."""
    for key, values in source.items():
        if key in target:
            target[key] = list(target[key]) + list(values)
        else:
            target[key] = list(values)