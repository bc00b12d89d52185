"""
Glob pattern matching for the Contents list
"""
import os
import re
import sys
from typing import Optional


def _glob_to_regex(pattern: str) -> str:
    """Translate a glob (**, *, ?, [...]) into an anchored regex over posix paths"""
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                j = i + 2
                seg_start = i == 0 or pattern[i - 1] == "/"
                if seg_start and j < n and pattern[j] == "/":
                    # **/ spans zero or more whole directories
                    out.append("(?:.*/)?")
                    i = j + 1
                    continue
                out.append(".*")
                i = j
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = pattern.find("]", i + 2)
            if j == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1:j].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = j + 1
                continue
        else:
            out.append(re.escape(c))
        i += 1
    return "^" + "".join(out) + "$"


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


def _relative(path: str, root: str) -> Optional[str]:
    rel = _to_posix(os.path.relpath(path, root))
    if rel == ".":
        return ""
    if rel == ".." or rel.startswith("../"):
        return None
    return rel


def compile_pattern(raw: str, root: str, platform: str = sys.platform):
    """
    Compile one Contents line into (negate, regex), or None for blanks and comments.
    Absolute patterns under *root* are re-rooted so the root itself is never
    interpreted as a glob (folders may contain [ ] characters).
    """
    p = raw.strip()
    if not p or p.startswith("#"):
        return None
    negate = False
    while p.startswith("!"):
        negate = not negate
        p = p[1:]
    p = _to_posix(p)
    root_posix = _to_posix(root).rstrip("/")
    if p == root_posix:
        p = ""
    elif p.startswith(root_posix + "/"):
        p = p[len(root_posix) + 1:]
    elif p.startswith("./"):
        p = p[2:]
    flags = re.IGNORECASE if platform == "win32" else 0
    return negate, re.compile(_glob_to_regex(p), flags)


def match(paths: list[str], patterns: list[str], root: str,
          platform: str = sys.platform) -> list[str]:
    """
    Return the paths matching at least one include pattern and no later
    negated pattern. Patterns apply in order; input order is preserved.
    """
    compiled = [c for c in (compile_pattern(p, root, platform) for p in patterns) if c]
    rels = [(path, _relative(path, root)) for path in paths]
    selected: set[str] = set()
    for negate, regex in compiled:
        for path, rel in rels:
            if rel is None:
                continue
            if negate:
                if path in selected and regex.match(rel):
                    selected.discard(path)
            elif regex.match(rel):
                selected.add(path)
    return [path for path in paths if path in selected]


def parse_contents(value) -> list[str]:
    """Accept a list or a newline-delimited string; drop blank lines"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.splitlines()
    return [str(v).strip() for v in value if str(v).strip()]
