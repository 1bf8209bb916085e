"""Command line interface for the evalascendente toolkit."""
from __future__ import annotations

import argparse
import json
from datetime import datetime
from typing import Dict, List

from .aggregation import completion_progress
from .classifier import classify_point, classify_text
from .config import load_config
from .loader import ValidationError, load_locked
from .logging_utils import setup_logging
from .models import Response, parse_score
from .record import record_response
from .report import ReportRenderError, build_report, export_report, resolve_catalog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upward evaluation report toolkit")
    parser.add_argument(
        "--workbook",
        dest="workbook",
        help="Path to the survey workbook or JSON export (defaults to config workbook_path)",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        help="Path to config file (YAML or JSON)",
    )

    subparsers = parser.add_subparsers(dest="command")

    report = subparsers.add_parser("report", help="Render a supervisor or consolidated PDF report")
    report.add_argument("--evaluated", help="Supervisor id; omit for the consolidated report")
    report.add_argument(
        "--output",
        dest="output_path",
        default=None,
        help="Directory to write the report. Defaults to config report_path.",
    )

    summary = subparsers.add_parser("summary", help="Print the aggregation result as JSON")
    summary.add_argument("--evaluated", help="Supervisor id; omit for everyone")

    record = subparsers.add_parser("record", help="Append a survey response")
    record.add_argument("--evaluated", required=True)
    record.add_argument(
        "--answer",
        action="append",
        default=[],
        metavar="COMPETENCY=SCORE",
        help="Score for one competency; repeat for each answer",
    )
    record.add_argument("--comment")
    record.add_argument("--shift")
    record.add_argument("--department")
    record.add_argument("--evaluator", help="Evaluator id; leave out for anonymous responses")

    classify = subparsers.add_parser("classify", help="Print the criterion id for a text")
    classify.add_argument("text")
    classify.add_argument("--point", action="store_true", help="Treat TEXT as a legacy point label")

    progress = subparsers.add_parser("progress", help="Show survey completion numbers")
    progress.add_argument("--department")
    progress.add_argument("--shift")

    return parser


def _parse_answers(pairs: List[str]) -> Dict[str, int]:
    answers: Dict[str, int] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        score = parse_score(raw) if sep else None
        if not key.strip() or score is None:
            raise ValueError(f"Invalid answer '{pair}'; expected COMPETENCY=SCORE with a score from 1 to 5")
        answers[key.strip()] = score
    return answers


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config_path) if args.config_path else load_config()
    logger = setup_logging(config)

    workbook_path = args.workbook or config.workbook_path

    try:
        if args.command == "classify":
            catalog = resolve_catalog(config)
            classify_fn = classify_point if args.point else classify_text
            print(classify_fn(args.text, catalog))
            return 0

        if args.command == "record":
            answers = _parse_answers(args.answer)
            if not answers:
                logger.error("At least one --answer is required")
                return 1
            response = Response(
                evaluator_id=args.evaluator,
                evaluated_id=args.evaluated,
                department=args.department,
                shift=args.shift,
                answers=answers,
                comment=args.comment,
                submitted_at=datetime.now(tz=config.timezone),
            )
            record_response(workbook_path, response, timeout=config.lock_timeout)
            return 0

        if args.command == "summary":
            data = load_locked(workbook_path, timeout=config.lock_timeout)
            bundle = build_report(data, config, evaluated_id=args.evaluated)
            payload = bundle.result.to_dict()
            if bundle.rows:
                payload["supervisors"] = [row.to_dict() for row in bundle.rows]
            print(json.dumps(payload, ensure_ascii=False, indent=2))
            return 0

        if args.command == "progress":
            data = load_locked(workbook_path, timeout=config.lock_timeout)
            progress = completion_progress(
                data.employees, data.responses, department=args.department, shift=args.shift
            )
            print(json.dumps(progress.to_dict(), ensure_ascii=False))
            return 0

        # default or report
        evaluated = getattr(args, "evaluated", None)
        output_path = getattr(args, "output_path", None) or config.report_path
        bundle = export_report(workbook_path, output_path, config, evaluated_id=evaluated)
    except ReportRenderError as exc:
        logger.error("%s", exc)
        return 1
    except (ValidationError, ValueError, FileNotFoundError, TimeoutError) as exc:
        logger.error("%s", exc)
        return 1

    if not bundle.result.has_data:
        logger.warning("No responses available for %s", bundle.result.target)
    for path in bundle.outputs:
        print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
