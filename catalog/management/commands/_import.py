from __future__ import annotations

from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from scripts.etl.aishe.results import ImportAbort
from scripts.etl.aishe.seed import ImportConfig, run_import


class ImportCommand(BaseCommand):
    """Shared body for the AISHE import commands; subclasses set ``action``."""

    action = ""

    def add_arguments(self, parser):
        parser.add_argument("path", nargs="?", default="", help="Path to the .xlsx/.csv export (first sheet is read)")
        parser.add_argument("--batch-size", type=int, default=None, help="Rows per bulk insert (>= 1)")
        parser.add_argument("--config", default="", help="YAML config (batch_size, inputs.<action>)")

    def handle(self, *args, **options):
        path_arg = (options.get("path") or "").strip()
        config_path = (options.get("config") or "").strip()
        batch_size = options.get("batch_size")

        base_dir = Path(getattr(settings, "BASE_DIR", "."))
        cfg = None
        cfg_dir = base_dir
        if config_path:
            p = Path(config_path)
            if not p.is_absolute():
                p = (base_dir / p).resolve()
            if not p.exists():
                raise CommandError(f"Config not found: {p}")
            try:
                cfg = ImportConfig.from_yaml(p)
            except ValueError as e:
                raise CommandError(f"Invalid config {p}: {e}") from e
            cfg_dir = p.parent

        path = Path(path_arg) if path_arg else None
        if path is None and cfg is not None:
            path = cfg.input_for(self.action, base=cfg_dir)
        if path is None:
            raise CommandError(f"No input file given for {self.action}")
        if not path.is_absolute():
            path = (Path.cwd() / path).resolve()
        if not path.exists():
            raise CommandError(f"File not found: {path}")

        if batch_size is not None and batch_size < 1:
            raise CommandError("--batch-size must be positive")
        if batch_size is None and cfg is not None:
            batch_size = cfg.batch_size

        self.stdout.write(f"AISHE import: {self.action}")
        self.stdout.write("=" * 40)
        try:
            stats = run_import(path, self.action, batch_size=batch_size, sink=self.stdout.write)
        except ImportAbort as e:
            raise CommandError(str(e)) from e
        self.stdout.write(self.style.SUCCESS(
            f"inserted={stats.inserted} skipped={stats.skipped} failed={stats.failed}"
        ))
