import asyncio
import logging
import sys

from gs_portfolio.core.database import SessionLocal, engine
from gs_portfolio.monitoring.setup import report_session_sweep
from gs_portfolio.repositories import AdminSessionRepository

logger = logging.getLogger("gs-portfolio")


async def cleanup_expired_sessions(session_factory=SessionLocal) -> int:
    async with session_factory() as db:
        deleted = await AdminSessionRepository(db).delete_expired()
    report_session_sweep(deleted)
    logger.info("session_cleanup deleted=%s", deleted)
    return deleted


async def _run() -> int:
    try:
        return await cleanup_expired_sessions()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        count = asyncio.run(_run())
    except Exception as e:
        print(f"[cleanup-sessions] Failed: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"[cleanup-sessions] Removed {count} expired sessions")
