from __future__ import annotations
import argparse, json, sys
from typing import List, Optional, Sequence

import pyperclip
import structlog

from app.controller.pipeline import InputPipeline
from app.controller.session_buffer import SessionBuffer
from app.logging_config import configure_logging
from core.config import AnalysisConfig
from core.errors import IflError
from core.events import EditEvent
from core.rules import RuleContext
from core.simulate import simulate_mixed, simulate_paste, simulate_typing

log = structlog.get_logger()

EXIT_OK = 0
EXIT_NO_INPUT = 1
EXIT_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ifl", description="Classify how text was entered and pick answer-mode tags")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("-t", "--text", help="Input text (default: read stdin)")
    src.add_argument("--clipboard", action="store_true", help="Analyze the clipboard contents as pasted text")

    timeline = ap.add_mutually_exclusive_group()
    timeline.add_argument("-m", "--mode", choices=("typed", "paste"), help="How the text arrived, when no timeline exists")
    timeline.add_argument("--simulate", choices=("typed", "paste", "mixed"), help="Synthesize an edit timeline for the text")
    timeline.add_argument("--replay", metavar="FILE", help="JSON file with recorded edit events")

    ap.add_argument("--wpm", type=float, default=60.0, help="Typing speed for --simulate (default: 60)")
    ap.add_argument("--target-lang", help="Language the answer is wanted in (e.g. en)")
    ap.add_argument("--config", metavar="FILE", help="JSON file with threshold overrides")
    ap.add_argument("--json", action="store_true", help="Print the full report as JSON")
    ap.add_argument("--explain", action="store_true", help="Also print the rules that fired")
    ap.add_argument("-v", "--debug", action="store_true", help="Debug logs on stderr")
    ap.add_argument("--log-format", choices=("json", "console"), default="json", help="Log rendering on stderr")
    return ap


def _load_json(path: str):
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _read_clipboard() -> str:
    try:
        return pyperclip.paste() or ""
    except pyperclip.PyperclipException as e:
        # no clipboard provider on this platform
        log.debug("clipboard.read.error", err=str(e))
        return ""


def _timeline(args: argparse.Namespace, text: str) -> Optional[List[EditEvent]]:
    if args.simulate == "typed":
        return simulate_typing(text, wpm=args.wpm)
    if args.simulate == "paste":
        return simulate_paste(text)
    if args.simulate == "mixed":
        return simulate_mixed(text, wpm=args.wpm)
    return None


def run(args: argparse.Namespace) -> int:
    config = AnalysisConfig.from_mapping(_load_json(args.config)) if args.config else AnalysisConfig()
    pipeline = InputPipeline(config)

    events: Optional[Sequence[EditEvent]] = None
    mode_hint = args.mode
    if args.replay:
        buf = SessionBuffer.from_records(_load_json(args.replay), session_id=args.replay)
        events = buf.snapshot()
        text = args.text if args.text is not None else buf.text()
    elif args.clipboard:
        text = _read_clipboard()
        mode_hint = mode_hint or "paste"
    elif args.text is not None:
        text = args.text
    else:
        text = sys.stdin.read()

    if not text.strip():
        print("Error: No input text provided.", file=sys.stderr)
        return EXIT_NO_INPUT

    if events is None:
        events = _timeline(args, text)

    report = pipeline.analyze(
        text,
        events=events,
        mode_hint=mode_hint,
        context=RuleContext(target_language=args.target_lang),
    )

    if args.json:
        print(json.dumps(report.to_record(), ensure_ascii=False, indent=2))
    else:
        for name in report.tag_names():
            print(name)
    if args.explain and not args.json:
        for rule in report.fired_rules:
            print(f"# {rule}", file=sys.stderr)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug, json_logs=args.log_format == "json")
    structlog.contextvars.bind_contextvars(cmd="ifl")
    try:
        return run(args)
    except IflError as e:
        log.warning("cli.error", err=str(e), kind=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except (OSError, ValueError) as e:
        # unreadable file, bad JSON, or undecodable bytes on a file or stdin
        log.warning("cli.input_error", err=str(e), kind=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
