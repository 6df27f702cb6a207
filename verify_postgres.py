import asyncio
import asyncpg
from carshare.app.core.config import settings

# asyncpg wants a plain DSN, without the SQLAlchemy driver suffix
db_url = settings.database_url.replace("+asyncpg", "")

print(f"Testing connection to: {db_url.split('@')[-1]}")

async def check_db():
    try:
        conn = await asyncpg.connect(db_url)
        server_version = conn.get_server_version()
        print(f"✅ Connection Successful! (PostgreSQL {server_version.major}.{server_version.minor})")
        await conn.close()
        return 0
    except Exception as e:
        print(f"❌ Connection Failed: {e}")
        return 1

if __name__ == "__main__":
    raise SystemExit(asyncio.run(check_db()))
