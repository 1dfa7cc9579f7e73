#!/usr/bin/env python3
"""
casecommand.py - Clipboard case conversion middleware

Watches the clipboard for changes, passes content through a pipeline of
transform scripts (camelCase, kebab-case, dot.case, or your own), and writes
the result back to the clipboard.

Features:
  - Single transforms or multi-step chains
  - Chain definitions and defaults loaded from transforms.ini
  - Per-transform config overrides via transforms.ini
  - Dry run mode that prints results instead of touching the clipboard
  - One-shot conversion of a string given on the command line
  - SQLite run log (casecommand.db) browsable with --log

Usage:
    python casecommand.py [--script camel_case] [--transforms ./transforms]
                          [--hotkey ctrl+shift+v] [--poll 0.5] [--dry-run]
    python casecommand.py --script kebab_case --text "Hello World"
    python casecommand.py --list
    python casecommand.py --log

Folders default to the current directory: ./transforms for scripts (create
it with `make-transforms` or `python make_transforms.py`) and ./casecommand.db
for the run log.

Transform script API:
    def transform(text: str) -> str: ...
    Module-level docstring shown as description by --list.
    Raise case_convert.InvalidInputError to reject the input.

transforms.ini format:
    [casecommand]                  # defaults, command line wins
    script = camel_case
    poll = 0.5

    [transform:camel_case]         # matches filename stem camel_case.py
    split_case = true              # sets module attribute SPLIT_CASE

    [chain:my_chain]
    description = Kebab first, then dots
    steps = kebab_case, dot_case
"""

import argparse
import configparser
import importlib.util
import math
import sys
import time
import traceback
from datetime import datetime
from pathlib import Path

from case_convert import InvalidInputError
from db_logger import DBLogger

try:
    import pyperclip
except ImportError:
    print("Missing dependency: pip install pyperclip")
    sys.exit(1)

try:
    import keyboard
    KEYBOARD_AVAILABLE = True
except ImportError:
    KEYBOARD_AVAILABLE = False

DEFAULT_POLL = 0.5
PREVIEW_LEN  = 80


# ─── INI loader ──────────────────────────────────────────────────────────────

def load_ini(folder: str) -> configparser.ConfigParser:
    """Load transforms.ini from the transforms folder if it exists."""
    cfg = configparser.ConfigParser()
    ini_path = Path(folder) / "transforms.ini"
    if ini_path.exists():
        cfg.read(ini_path, encoding="utf-8")
    return cfg


def get_transform_overrides(cfg: configparser.ConfigParser, stem: str) -> dict:
    """Return key/value overrides for a transform script from transforms.ini."""
    section = f"transform:{stem}"
    if cfg.has_section(section):
        return dict(cfg[section])
    return {}


def get_chains(cfg: configparser.ConfigParser) -> list:
    """
    Return chain definitions from transforms.ini.
    Each item: {name, description, steps: [str]}
    """
    chains = []
    for section in cfg.sections():
        if section.startswith("chain:"):
            name  = section[len("chain:"):]
            desc  = cfg.get(section, "description", fallback="")
            raw   = cfg.get(section, "steps", fallback="")
            steps = [s.strip() for s in raw.split(",") if s.strip()]
            chains.append({
                "name":        name,
                "description": desc,
                "steps":       steps,
                "fn":          None,
                "is_chain":    True,
            })
    return chains


def get_settings(cfg: configparser.ConfigParser) -> dict:
    """
    Defaults from the [casecommand] section; missing keys come back as None.
    Raises ValueError naming the key when a value has the wrong type.
    """
    settings = {}
    for key, getter in (
        ("script",  cfg.get),
        ("hotkey",  cfg.get),
        ("poll",    cfg.getfloat),
        ("dry_run", cfg.getboolean),
    ):
        try:
            settings[key] = getter("casecommand", key, fallback=None)
        except ValueError as exc:
            raise ValueError(f"[casecommand] {key}: {exc}") from exc
    return settings


def coerce_value(value: str):
    """int, then finite float, then an ini boolean word, else the string unchanged."""
    try:
        return int(value)
    except (ValueError, TypeError):
        pass
    try:
        number = float(value)
        if math.isfinite(number):
            return number
    except (ValueError, TypeError):
        pass
    flag = configparser.ConfigParser.BOOLEAN_STATES.get(str(value).lower())
    return value if flag is None else flag


# ─── Transform loader ─────────────────────────────────────────────────────────

def load_transform(script_path: str, overrides: dict = None):
    """
    Dynamically load a transform script.
    Returns (transform_fn, resolved_path, description_str).
    Applies overrides as upper-cased module-level attributes before returning.
    """
    path = Path(script_path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Script not found: {path}")

    spec   = importlib.util.spec_from_file_location(f"casecommand_{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not hasattr(module, "transform"):
        raise AttributeError("Script must define a 'transform(text) -> str' function")

    for key, value in (overrides or {}).items():
        setattr(module, key.upper(), coerce_value(value))

    description = (
        (module.__doc__ or "").strip()
        or (module.transform.__doc__ or "").strip()
        or "No description."
    )
    short_desc = next(
        (ln.strip() for ln in description.splitlines() if ln.strip()), description
    )

    return module.transform, str(path), short_desc


# ─── Transform folder scanner ─────────────────────────────────────────────────

def scan_transforms(folder: str, cfg: configparser.ConfigParser) -> list:
    """
    Scan folder for .py transform scripts and merge in chain definitions from ini.
    Returns list of registry dicts sorted alphabetically (scripts first, chains appended).
    """
    results = []
    p = Path(folder)
    if not p.is_dir():
        return results

    for pyfile in sorted(p.glob("*.py")):
        if pyfile.name.startswith("_"):
            continue
        overrides = get_transform_overrides(cfg, pyfile.stem)
        try:
            fn, path, desc = load_transform(str(pyfile), overrides)
            results.append({
                "name":        pyfile.stem,
                "path":        path,
                "description": desc,
                "fn":          fn,
                "is_chain":    False,
                "steps":       [],
            })
        except Exception as exc:
            results.append({
                "name":        pyfile.stem,
                "path":        str(pyfile),
                "description": f"Load error: {exc}",
                "fn":          None,
                "is_chain":    False,
                "steps":       [],
            })

    results.extend(get_chains(cfg))
    return results


def _preview(text: str) -> str:
    short = text[:PREVIEW_LEN].replace("\n", "↵")
    return f"{short!r}{'…' if len(text) > PREVIEW_LEN else ''}"


# ─── Runner ───────────────────────────────────────────────────────────────────

class CaseCommand:
    """Headless chain runner: clipboard polling, hotkey and one-shot conversion."""

    def __init__(self, transforms_folder: str, initial_script: str = None,
                 poll_interval: float = DEFAULT_POLL, hotkey: str = None,
                 dry_run: bool = False, db: DBLogger = None):

        self.transforms_folder = transforms_folder
        self.poll_interval     = poll_interval
        self.hotkey            = hotkey
        self.dry_run           = dry_run
        self.db                = db

        self.running           = False
        self.last_clip         = ""
        self.transform_count   = 0
        self.error_count       = 0

        self._registry: list   = []
        self._steps: list      = []   # registry entries, in run order

        self.refresh_transforms(preselect=initial_script)

    # ── Transform registry ────────────────────────────────────────────────────

    @property
    def registry(self) -> list:
        return list(self._registry)

    def _find(self, name: str, chains: bool = False):
        return next(
            (t for t in self._registry
             if t["name"] == name and bool(t.get("is_chain")) == chains),
            None
        )

    def refresh_transforms(self, preselect: str = None):
        prev_names = [s["name"] for s in self._steps]
        cfg = load_ini(self.transforms_folder)
        self._registry = scan_transforms(self.transforms_folder, cfg)

        good  = sum(1 for t in self._registry if not t.get("is_chain") and t["fn"] is not None)
        bad   = sum(1 for t in self._registry if not t.get("is_chain") and t["fn"] is None)
        nchai = sum(1 for t in self._registry if t.get("is_chain"))

        msg = f"Scanned '{self.transforms_folder}': {good} transforms"
        if nchai:
            msg += f", {nchai} chain(s)"
        if bad:
            msg += f", {bad} failed"
        self._log(msg, "info" if not bad else "warn")

        if preselect:
            self.select(preselect)
        elif prev_names:
            self._steps = [t for t in map(self._find, prev_names) if t]
        else:
            first = next((t for t in self._registry if not t.get("is_chain")), None)
            self._steps = [first] if first else []

    def select(self, name: str) -> bool:
        """
        Make name the active chain. name is a script stem, a path to a script,
        or a chain name from transforms.ini (expanded into its steps).
        """
        if name.endswith(".py"):
            p = Path(name).resolve()
            entry = next(
                (t for t in self._registry
                 if not t.get("is_chain") and Path(t["path"]).resolve() == p),
                None
            )
        else:
            entry = self._find(name) or self._find(name, chains=True)

        if entry is None:
            self._log(f"Transform or chain '{name}' not found", "warn")
            return False
        if entry.get("is_chain"):
            return self._load_chain(entry)
        self._steps = [entry]
        self._log(f"Selected [{entry['name']}]: {entry['description']}", "info")
        return True

    def _load_chain(self, chain_entry: dict) -> bool:
        """Expand a chain definition into individual steps."""
        steps = []
        for step_name in chain_entry.get("steps", []):
            match = self._find(step_name)
            if match:
                steps.append(match)
            else:
                self._log(f"Chain step '{step_name}' not found in registry", "warn")
        if not steps:
            return False
        self._steps = steps
        self._log(
            f"Loaded chain '{chain_entry['name']}': "
            + " → ".join(s["name"] for s in steps), "chain"
        )
        return True

    def active_steps(self) -> list:
        return list(self._steps)

    def chain_label(self) -> str:
        return " → ".join(s["name"] for s in self._steps) or "—"

    def reload_all(self):
        """Hot-reload all scripts in the current chain from disk."""
        cfg = load_ini(self.transforms_folder)
        reloaded = 0
        for step in self._steps:
            try:
                overrides = get_transform_overrides(cfg, step["name"])
                fn, path, desc = load_transform(step["path"], overrides)
                step["fn"]          = fn
                step["description"] = desc
                reloaded += 1
            except Exception as exc:
                self._log(f"Reload failed [{step['name']}]: {exc}", "err")
        self._log(f"Reloaded {reloaded} script(s)", "ok")
        return reloaded

    # ── Logging ───────────────────────────────────────────────────────────────

    def _log(self, message: str, tag: str = "info", transform_name: str = ""):
        ts = datetime.now().strftime("%H:%M:%S")
        print(f"[{ts}] {message}", file=sys.stderr)
        if self.db is not None:
            self.db.log(message, tag, transform_name)

    def stats(self) -> str:
        return (
            f"Transforms: {self.transform_count}  |  "
            f"Errors: {self.error_count}  |  "
            f"Chain: {self.chain_label()}"
        )

    def _fail(self, clip_text: str, source: str, error: str):
        self.error_count += 1
        if self.db is not None:
            self.db.record_conversion(
                self.chain_label(), clip_text, error=error, source=source
            )

    # ── Chain execution ───────────────────────────────────────────────────────

    def run_chain(self, clip_text: str, source: str = "clipboard"):
        """
        Run the active steps over clip_text. Returns the result, or None when
        no steps are active or a step failed (the clipboard is left alone).
        """
        steps = self.active_steps()

        if not steps:
            self._log("No transforms active — select a transform or chain", "warn")
            return None

        is_chain = len(steps) > 1
        chain_label = self.chain_label()

        if is_chain:
            self._log(f"▶ Chain [{chain_label}] via {source}", "chain")
        else:
            self._log(f"▶ [{steps[0]['name']}] via {source}", "info")

        current = clip_text
        for i, step in enumerate(steps):
            if step["fn"] is None:
                error = f"Step {i+1} [{step['name']}] has no function (load error)"
                self._log(f"  ✗ {error}", "err", step["name"])
                self._fail(clip_text, source, error)
                return None

            if is_chain:
                self._log(f"  [{i+1}/{len(steps)}] {step['name']}", "chain", step["name"])
            self._log(f"   In:  {_preview(current)}", "preview", step["name"])

            try:
                result = step["fn"](current)
                if not isinstance(result, str):
                    result = str(result)
            except InvalidInputError as exc:
                self._log(
                    f"  ✗ Rejected by [{step['name']}] ({exc.reason}): {exc}",
                    "err", step["name"]
                )
                self._fail(clip_text, source, f"{exc.reason}: {exc}")
                return None
            except Exception as exc:
                self._log(f"  ✗ Error in [{step['name']}]: {exc}", "err", step["name"])
                self._log(traceback.format_exc(), "err", step["name"])
                self._fail(clip_text, source, str(exc))
                return None

            self._log(f"   Out: {_preview(result)}", "ok", step["name"])
            current = result

        if self.dry_run:
            self._log(f"  🔍 Dry run — {len(current)} chars printed", "warn")
            print(current)
        else:
            pyperclip.copy(current)
            self.last_clip = current
            self._log(f"  ✓ {len(current)} chars written to clipboard", "ok")

        if self.db is not None:
            self.db.record_conversion(
                chain_label, clip_text, output_text=current, source=source
            )
        self.transform_count += 1
        return current

    # ── Polling ───────────────────────────────────────────────────────────────

    def _reseed_clipboard(self):
        try:
            self.last_clip = pyperclip.paste()
        except pyperclip.PyperclipException as exc:
            self._log(f"Clipboard read error: {exc}", "warn")

    def poll_once(self):
        """Run the chain if the clipboard changed since the last look."""
        try:
            current = pyperclip.paste()
        except pyperclip.PyperclipException as exc:
            self._log(f"Clipboard read error: {exc}", "warn")
            return None
        if current and current != self.last_clip:
            self.last_clip = current
            return self.run_chain(current, source="clipboard change")
        return None

    def watch(self):
        """Block until Ctrl+C, converting on clipboard change or on the hotkey."""
        self.register_hotkey()
        self._reseed_clipboard()
        self.running = True
        if self.hotkey:
            self._log(f"Waiting for hotkey {self.hotkey} (Ctrl+C to quit)", "info")
        else:
            self._log(f"Polling every {self.poll_interval}s (Ctrl+C to quit)", "info")
        try:
            while self.running:
                if not self.hotkey:
                    self.poll_once()
                time.sleep(self.poll_interval)
        except KeyboardInterrupt:
            self._log("Stopped", "warn")
        finally:
            self.close()

    # ── Hotkey ────────────────────────────────────────────────────────────────

    def register_hotkey(self):
        if not self.hotkey:
            return
        if not KEYBOARD_AVAILABLE:
            self._log("'keyboard' not installed — hotkey disabled. pip install keyboard", "warn")
            self.hotkey = None
            return

        def _on_hotkey():
            try:
                clip = pyperclip.paste()
            except pyperclip.PyperclipException as exc:
                self._log(f"Hotkey error: {exc}", "err")
                return
            if clip:
                self.run_chain(clip, source=f"hotkey ({self.hotkey})")
            else:
                self._log("Hotkey pressed but clipboard is empty", "warn")

        keyboard.add_hotkey(self.hotkey, _on_hotkey)
        self._log(f"Hotkey registered: {self.hotkey}", "ok")

    # ── Controls ──────────────────────────────────────────────────────────────

    def close(self):
        self.running = False
        if KEYBOARD_AVAILABLE and self.hotkey:
            keyboard.remove_hotkey(self.hotkey)
        self._log(self.stats(), "info")


# ─── Listing ──────────────────────────────────────────────────────────────────

def print_registry(registry: list):
    for t in registry:
        if t.get("is_chain"):
            steps = " → ".join(t["steps"]) or "(no steps)"
            print(f"  ⛓ {t['name']:<20} {steps}  {t['description']}".rstrip())
        else:
            print(f"    {t['name']:<20} {t['description']}")


def print_log(db: DBLogger, limit: int = 50):
    for c in db.get_conversions(limit=limit):
        ts = c["timestamp"][:19].replace("T", " ")
        if c["error"]:
            outcome = f"✗ {c['error']}"
        else:
            outcome = f"→ {_preview(c['output_text'])}"
        print(f"{ts}  [{c['session_id']}]  {c['chain']}: {_preview(c['input_text'])} {outcome}")


# ─── Entry point ──────────────────────────────────────────────────────────────

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Clipboard case conversion middleware with chaining, dry run, and ini config."
    )
    parser.add_argument("--script", "-s", default=None,
                        help="Transform or chain to run (default: ini, else first script).")
    parser.add_argument("--transforms", "-t",
                        default="transforms",
                        help="Folder to scan (default: ./transforms).")
    parser.add_argument("--hotkey", "-k", default=None,
                        help="Hotkey to trigger manually (e.g. ctrl+shift+v). "
                             "Requires: pip install keyboard")
    parser.add_argument("--poll", "-p", type=float, default=None,
                        help=f"Poll interval in seconds (default: {DEFAULT_POLL}).")
    parser.add_argument("--dry-run", "-n", action="store_true", default=None,
                        help="Print results instead of writing the clipboard.")
    parser.add_argument("--text", default=None,
                        help="Convert this text once, print the result and exit.")
    parser.add_argument("--list", action="store_true",
                        help="List transforms and chains, then exit.")
    parser.add_argument("--log", action="store_true",
                        help="Print recent conversions from the run log, then exit.")
    parser.add_argument("--db-root", default=".",
                        help="Folder holding casecommand.db (default: current folder).")
    parser.add_argument("--no-db", action="store_true",
                        help="Do not write the SQLite run log.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings(load_ini(args.transforms))
    except (ValueError, configparser.Error) as exc:
        ts = datetime.now().strftime("%H:%M:%S")
        print(f"[{ts}] Bad transforms.ini in '{args.transforms}': {exc}", file=sys.stderr)
        return 1
    if not Path(args.transforms).is_dir():
        ts = datetime.now().strftime("%H:%M:%S")
        print(f"[{ts}] No transforms folder at '{args.transforms}' — "
              f"run make-transforms there first", file=sys.stderr)

    def pick(arg, key, default):
        if arg is not None:
            return arg
        return settings[key] if settings[key] is not None else default

    db = None if args.no_db else DBLogger(args.db_root, args.transforms)
    try:
        if args.log:
            if db is None:
                print("Run log disabled (--no-db)", file=sys.stderr)
                return 1
            print_log(db)
            return 0

        app = CaseCommand(
            args.transforms,
            initial_script=pick(args.script, "script", None),
            poll_interval=pick(args.poll, "poll", DEFAULT_POLL),
            hotkey=pick(args.hotkey, "hotkey", None),
            dry_run=pick(args.dry_run, "dry_run", False),
            db=db,
        )

        if args.list:
            print_registry(app.registry)
            return 0

        if args.text is not None:
            app.dry_run = True
            return 0 if app.run_chain(args.text, source="command line") is not None else 1

        app.watch()
        return 0
    finally:
        if db is not None:
            db.stop()


if __name__ == "__main__":
    sys.exit(main())
