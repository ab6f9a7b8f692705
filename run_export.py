"""
Export the annotated resume dataset.

Reads:
  - every resume with status 'annotated' from DATABASE_URL

Produces:
  - a JSONL file (one record per resume: text, meta, spans)
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from annotation_studio.annotation.export import write_dataset
from annotation_studio.config.settings import DATABASE_URL, EXPORT_PATH, LOG_LEVEL
from annotation_studio.storage.repository import AnnotationStore

# ---------------------------------------------------------------------------
# Setup logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("run_export")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export annotated resumes as JSONL.")
    parser.add_argument("--database-url", default=DATABASE_URL, help="SQLAlchemy database URL")
    parser.add_argument("--output", default=EXPORT_PATH, help="Destination .jsonl file")
    parser.add_argument("--stats", action="store_true", help="Print label statistics after export")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    store = AnnotationStore(url=args.database_url)
    store.init_schema()

    logger.info("Starting export: %s → %s", args.database_url, args.output)
    count = write_dataset(store, args.output)
    logger.info("Records exported : %d", count)

    if args.stats:
        print(json.dumps(store.stats(), indent=2, ensure_ascii=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())
