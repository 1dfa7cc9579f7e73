#!/usr/bin/env python3
"""
make_transforms.py
Generates the ./transforms/ folder with one CaseCommand transform script per
case style (camel_case.py, kebab_case.py, dot_case.py) and a starter
transforms.ini.
Run once to get started:  make-transforms  (or python make_transforms.py)

Each generated script:
  - Has a #!/usr/bin/env python3 shebang
  - Has a module-level docstring (shown by `casecommand.py --list`)
  - Defines SPLIT_CASE, overridable from transforms.ini
  - Defines transform(text: str) -> str
"""

from pathlib import Path

from case_convert import STYLES

# ════════════════════════════════════════════════════════════════════════════
# Per-style wording for the docstring
# ════════════════════════════════════════════════════════════════════════════
DESCRIPTIONS = {
    "camel": (
        "Convert text to camelCase — first word lowercase, later words "
        "capitalised, no separators.",
        '"SCREEN_NAME" → "screenName"',
    ),
    "kebab": (
        "Convert text to kebab-case — lowercase words joined by hyphens.",
        '"Hello World" → "hello-world"',
    ),
    "dot": (
        "Convert text to dot.case — lowercase words joined by periods.",
        '" multiple Words_here!" → "multiple.words.here"',
    ),
}

TEMPLATE = '''\
#!/usr/bin/env python3
"""
{summary}
Punctuation is dropped; spaces, hyphens and underscores split words.

Example:
    {example}

Set split_case = true under [transform:{stem}] in transforms.ini to also
split at lower→UPPER boundaries (keeps existing camelCase humps).
"""
from case_convert import convert

SPLIT_CASE = False


def transform(text: str) -> str:
    if SPLIT_CASE not in (True, False):
        raise ValueError(f"split_case must be true or false, got {{SPLIT_CASE!r}}")
    return convert(text, "{style}", split_case=bool(SPLIT_CASE))
'''

# ════════════════════════════════════════════════════════════════════════════
# transforms.ini — written only when the folder has none
# ════════════════════════════════════════════════════════════════════════════
DEFAULT_INI = """\
; CaseCommand settings, per-transform overrides and chains.
; Command line arguments take precedence over [casecommand].

[casecommand]
script = camel_case
poll = 0.5
dry_run = false

[transform:camel_case]
split_case = true

[transform:kebab_case]
split_case = true

[chain:property_path]
description = camelCase identifiers to dotted property paths
steps = kebab_case, dot_case
"""


def script_name(style: str) -> str:
    return f"{style}_case.py"


def render_script(style: str) -> str:
    if style not in DESCRIPTIONS:
        raise ValueError(f"No transform template for style {style!r}")
    summary, example = DESCRIPTIONS[style]
    return TEMPLATE.format(
        summary=summary,
        example=example,
        stem=Path(script_name(style)).stem,
        style=style,
    )


def write_scripts(folder) -> list:
    out = Path(folder)
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for style in STYLES:
        p = out / script_name(style)
        p.write_text(render_script(style), encoding="utf-8")
        written.append(p)
    return written


def write_ini(folder):
    """Write the starter transforms.ini; returns None if one already exists."""
    p = Path(folder) / "transforms.ini"
    if p.exists():
        return None
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(DEFAULT_INI, encoding="utf-8")
    return p


# ════════════════════════════════════════════════════════════════════════════
# Writer — run this file (or make-transforms) to fill ./transforms/
# ════════════════════════════════════════════════════════════════════════════

def main(folder=None) -> int:
    out = Path(folder) if folder else Path.cwd() / "transforms"
    paths = write_scripts(out)
    ini = write_ini(out)
    if ini:
        paths.append(ini)
    for p in paths:
        print(f"  wrote {p}")
    print(f"\nDone. {len(paths)} files written to {out}/")
    return 0


if __name__ == "__main__":
    main()
