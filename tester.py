#!/usr/bin/env python3
import argparse
import glob
import subprocess
import sys
from pathlib import Path

def run_one(script: Path, testfile: str) -> int:
    tf = Path(testfile).resolve()
    print(f"==> {testfile}")
    stdin_path = tf.with_suffix(".in")
    expected_path = tf.with_suffix(".out")
    stdin_text = stdin_path.read_text() if stdin_path.exists() else ""
    if stdin_path.exists():
        print(f"[input] using {stdin_path.name}")
    p = subprocess.run(
        [sys.executable, str(script), str(tf)],
        cwd=str(script.parent),
        input=stdin_text,
        capture_output=True,
        text=True,
    )
    sys.stdout.write(p.stdout)
    if p.stderr:
        sys.stderr.write(p.stderr)
    if expected_path.exists():
        expected = expected_path.read_text()
        if p.stdout != expected:
            print(f"[mismatch] expected:\n{expected}", end="" if expected.endswith("\n") else "\n")
            return max(p.returncode, 1)
    return p.returncode

def main() -> int:
    ap = argparse.ArgumentParser(
        description="Run the TIPS interpreter over multiple .tips programs (like a shell loop)."
    )
    ap.add_argument(
        "paths",
        nargs="+",
        help="Files/dirs/globs of .tips programs (e.g., tests/cases/*.tips mytests/ foo.tips).",
    )
    ap.add_argument(
        "--script",
        default=str(Path(__file__).parent / "src" / "main.py"),
        help="Path to the interpreter entry script (default: src/main.py).",
    )
    ap.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first failing program (nonzero exit).",
    )
    args = ap.parse_args()

    script = Path(args.script).resolve()
    if not script.exists():
        print(f"error: script not found: {script}", file=sys.stderr)
        return 2

    files: list[str] = []
    for p in args.paths:
        expanded = glob.glob(p)
        if expanded:
            for e in expanded:
                pe = Path(e)
                if pe.is_dir():
                    files.extend(sorted(str(x) for x in pe.rglob("*.tips")))
                else:
                    files.append(str(pe))
            continue

        pp = Path(p)
        if pp.is_dir():
            files.extend(sorted(str(x) for x in pp.rglob("*.tips")))
        elif pp.exists():
            files.append(str(pp))

    seen = set()
    files = [f for f in files if not (f in seen or seen.add(f))]

    if not files:
        print("error: no .tips files found", file=sys.stderr)
        return 2

    worst_rc = 0
    for f in files:
        rc = run_one(script, f)
        if rc != 0:
            worst_rc = max(worst_rc, rc)
            if args.fail_fast:
                return rc

    return worst_rc

if __name__ == "__main__":
    raise SystemExit(main())
