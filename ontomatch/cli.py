"""CLI entry point: annotate text files and match entities against a local ontology."""

from __future__ import annotations

import argparse
import logging
import sys

from ontomatch.core.config import settings
from ontomatch.core.errors import ConfigurationError, OntomatchError
from ontomatch.core.logging import setup_logging
from ontomatch.services.pipeline import run_from_paths
from ontomatch.storage.files import list_working_dir

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Annotate text files with DBpedia Spotlight and look up every annotated entity
in a local ontology. Writes one headerless CSV per input file:
source_text,dbpedia_iri,local_iri,type1;type2;...
"""

REP_HELP = """\
replacement spec: line 1 is the prefix replacing DBpedia's, line 2 is 'y' to
strip replaced characters from both ends of each name, every further line is
'<char> <char>' (replace the first with the second)"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ontomatch",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("texts", nargs="*", help="text files to annotate")
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="annotate every file in the working directory (not recursive)",
    )
    parser.add_argument("-o", "--ontology", required=True, help="ontology to match against")
    parser.add_argument("-r", "--replacements", default=None, help=REP_HELP)
    parser.add_argument(
        "-e",
        "--encoding",
        default=settings.DEFAULT_ENCODING,
        help="encoding of all input files, e.g. UTF_8, ISO_8859_1 (default: %(default)s)",
    )
    parser.add_argument(
        "-c",
        "--confidence",
        type=float,
        default=settings.DEFAULT_CONFIDENCE,
        help="Spotlight confidence in [0, 1] (default: %(default)s)",
    )
    parser.add_argument(
        "-u",
        "--out",
        default=settings.OUTPUT_DIR,
        help="output directory, created if missing (default: %(default)s)",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=settings.MAX_WORKERS,
        help="documents processed in parallel (default: %(default)s)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()

    texts = list_working_dir() if args.all else args.texts
    if not texts:
        parser.print_usage()
        print("Error: no input files given (pass paths or -a).")
        return 1

    try:
        reports = run_from_paths(
            texts,
            args.ontology,
            substitution_path=args.replacements,
            encoding=args.encoding,
            confidence=args.confidence,
            out_dir=args.out,
            workers=args.workers,
        )
    except ConfigurationError as e:
        logger.debug("configuration error: %s", e)
        print("Check the replacement specification.")
        print(f"  {e}")
        return 1
    except OntomatchError as e:
        print(f"Error ({e.stage}): {e}")
        return 1
    except Exception as e:
        logger.exception("unexpected failure")
        print(f"Error: {e!r}")
        return 1

    failed = [r for r in reports if r.status != "ok"]
    for r in failed:
        print(f"Error (document {r.path}): {r.error_detail}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
