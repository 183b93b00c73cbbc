from __future__ import annotations

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from progress_exhaust.config.settings import get_settings
from progress_exhaust.io.loaders import load_all
from progress_exhaust.models.schema import Context
from progress_exhaust.pipelines.build_progress import build_progress_report
from progress_exhaust.pipelines.build_report import build_report


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    data = load_all(settings.data_dir)
    ctx = Context(settings=settings, data=data)

    build_progress_report(ctx)
    report = build_report(ctx)

    print(f"Progress exhaust completed: {len(report)} rows.")


if __name__ == "__main__":
    main()
