"""Import Lotto 6/45 draws from a CSV export, then recalculate statistics.

CSV columns (header row required):
  draw_no,draw_date,num1,num2,num3,num4,num5,num6,bonus_num[,first_prize,first_winners]

Usage:
  python scripts/import_draws.py draws.csv
  python scripts/import_draws.py draws.csv --skip-recalc
"""

import argparse
import asyncio
import csv
import sys
from collections.abc import Sequence
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from lotto645.db.engine import async_session_factory, create_tables, engine
from lotto645.errors import LottoError
from lotto645.schemas.draw import DrawCreate
from lotto645.services import analysis_service, draw_service

NUMBER_COLUMNS = [f"num{i}" for i in range(1, 7)]
OPTIONAL_INT_COLUMNS = ("first_prize", "first_winners")


def parse_row(row: dict[str, str]) -> DrawCreate:
    data = {
        "draw_no": int(row["draw_no"]),
        "draw_date": row["draw_date"].strip(),
        "numbers": [int(row[col]) for col in NUMBER_COLUMNS],
        "bonus_num": int(row["bonus_num"]),
    }
    for col in OPTIONAL_INT_COLUMNS:
        if row.get(col):
            data[col] = int(row[col])
    return DrawCreate(**data)


def read_draws(path: Path) -> list[DrawCreate]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        draws = []
        for line_no, row in enumerate(reader, start=2):
            try:
                draws.append(parse_row(row))
            except (KeyError, ValueError, ValidationError) as e:
                raise ValueError(f"{path}:{line_no}: {e}") from e
    return sorted(draws, key=lambda d: d.draw_no)


async def run(path: Path, recalc: bool) -> None:
    draws = read_draws(path)
    logger.info("Read {} draws from {}", len(draws), path)

    await create_tables()
    async with async_session_factory() as session:
        await draw_service.import_draws(session, draws)
        if recalc:
            result = await analysis_service.recalculate_all(session)
            logger.info("Statistics recalculated up to draw {}", result.latest_draw_no)
    await engine.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import draws from CSV and recalculate statistics")
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--skip-recalc", action="store_true", help="Only import, do not recalculate")
    args = parser.parse_args(argv)

    try:
        asyncio.run(run(args.csv_path, recalc=not args.skip_recalc))
    except (OSError, ValueError) as e:
        logger.error("Import failed: {}", e)
        return 1
    except LottoError as e:
        logger.error("Import failed [{}]: {}", e.code, e.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
