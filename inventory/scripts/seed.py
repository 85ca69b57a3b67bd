"""
데이터베이스 시드: 데모 유저 2명 + fruit.csv 재고 데이터

inventory 폴더에서 실행:
  python -m scripts.seed [--csv PATH]

기존 유저는 모두 삭제된다. 데모 계정 비밀번호는 SEED_PASSWORD 환경변수.
"""
import argparse
import asyncio
import csv
import sys
from datetime import datetime
from pathlib import Path

from core.config import settings
from core.database import async_session, engine
from core.logger import get_logger
from models.refresh_token import RefreshToken  # noqa: F401 (User 관계 매핑용)
from models.users import User
from repository import fruit_repo, user_repo
from service.password_service import get_password_service

logger = get_logger("seed")

DEFAULT_CSV = Path(__file__).resolve().parent / "fruit.csv"
DEMO_USERS = [
    ("test", "test@test.com"),
    ("test2", "test2@test.com"),
]


def parse_fruit_csv(path: Path) -> list[dict]:
    """
    CSV 한 줄 → fruits_inventory 한 행

    컬럼: inventoryDate(yyyy-MM-dd), productName, color, amount, unit
    엑셀에서 저장한 파일은 첫 헤더에 BOM이 붙어 있어 utf-8-sig로 읽는다.
    """
    rows = []
    with path.open(newline="", encoding="utf-8-sig") as f:
        for raw in csv.DictReader(f):
            row = {key.strip(): value for key, value in raw.items()}
            rows.append({
                "inventory_date": datetime.strptime(row["inventoryDate"].strip(), "%Y-%m-%d").date(),
                "product_name": row["productName"].strip(),
                "color": row["color"].strip(),
                "amount": float(row["amount"]),
                "unit": int(row["unit"]),
            })
    return rows


async def seed(csv_path: Path) -> None:
    if not settings.seed_password:
        raise RuntimeError("SEED_PASSWORD가 설정되지 않았습니다.")

    fruits = parse_fruit_csv(csv_path)
    hashed = get_password_service().hash(settings.seed_password)

    async with async_session() as db:
        await user_repo.delete_all(db)
        for username, email in DEMO_USERS:
            await user_repo.create(db, User(username=username, email=email, password=hashed))
        inserted = await fruit_repo.bulk_create(db, fruits)

    logger.info(
        "Database seeded",
        extra={"extra_data": {"users": len(DEMO_USERS), "fruits": inserted}},
    )


async def _run(csv_path: Path) -> None:
    try:
        await seed(csv_path)
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo users and fruit inventory.")
    parser.add_argument("--csv", type=Path, default=DEFAULT_CSV, help="fruit CSV path")
    args = parser.parse_args()

    try:
        asyncio.run(_run(args.csv))
    except Exception:
        logger.exception("Seeding failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
