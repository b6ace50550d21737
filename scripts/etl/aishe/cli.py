"""
AISHE import CLI (standalone, outside manage.py)

Commands:
  colleges      seed affiliated colleges, linking each to its university
  universities  seed universities

Example (from the project root, venv active):
  python scripts/etl/aishe/cli.py colleges "data/College-Affiliated College.xlsx"
  python scripts/etl/aishe/cli.py universities data/University.xlsx --batch-size 1000
  python scripts/etl/aishe/cli.py colleges --config scripts/etl/aishe/config.yaml

Exit status is 1 when the input file is missing or the run aborts.
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

ROOT_DIR = Path(__file__).resolve().parents[3]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from scripts.etl.aishe.results import ImportAbort  # noqa: E402
from scripts.etl.aishe.seed import ACTIONS, ImportConfig, configure_logging, logger, run_import  # noqa: E402


def setup_django() -> None:
    """Initialize Django so the ORM store can be used from a plain script."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "server.settings")
    import django

    django.setup()


def _resolve_input(ns: argparse.Namespace, cfg: Optional[ImportConfig]) -> Optional[Path]:
    if ns.path:
        return Path(ns.path)
    if cfg is not None:
        return cfg.input_for(ns.cmd, base=Path(ns.config).resolve().parent)
    return None


def cmd_import(ns: argparse.Namespace) -> int:
    try:
        cfg = ImportConfig.from_yaml(Path(ns.config)) if ns.config else None
    except ValueError as e:
        configure_logging()
        logger.error("Invalid config %s: %s", ns.config, e)
        return 1
    setup_django()
    configure_logging(cfg.logs_dir if cfg else None)

    path = _resolve_input(ns, cfg)
    if path is None:
        logger.error("No input file given (pass a path or set inputs.%s in --config)", ns.cmd)
        return 1
    if not path.exists():
        logger.error("File not found: %s", path.resolve())
        return 1

    batch_size = ns.batch_size
    if batch_size is None and cfg is not None:
        batch_size = cfg.batch_size
    try:
        run_import(path, ns.cmd, batch_size=batch_size)
    except ImportAbort as e:
        logger.error("Fatal error: %s", e)
        return 1
    return 0


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="AISHE directory importer")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in ACTIONS:
        s = sub.add_parser(name, help=f"Seed {name} from the first sheet of a workbook/CSV")
        s.add_argument("path", nargs="?", help="Path to .xlsx/.csv export")
        s.add_argument("--batch-size", type=int, default=None, help="Rows per bulk insert (default 500)")
        s.add_argument("--config", help="Path to config.yaml")
    return p.parse_args(argv)


def main(argv=None) -> None:
    ns = parse_args(argv)
    sys.exit(cmd_import(ns))


if __name__ == "__main__":
    main()
