from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from upcycle_hub.config import settings
from alembic import command
from alembic.config import Config
import asyncio
import logging
import os

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    """Connection pool options for the configured database"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": {
            "connect_timeout": 5,  # 5 second connection timeout
        },
        "pool_timeout": 10,  # 10 second timeout for getting a connection from pool
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _display_url(database_url: str) -> str:
    # Never log credentials
    if '@' in database_url:
        return database_url.split('@')[-1]
    return database_url


async def wait_for_database(max_retries=30, retry_delay=2):
    """Wait for database to be available with retry logic"""
    logger.info(f"Waiting for database connection to {_display_url(settings.database_url)}...")

    for attempt in range(1, max_retries + 1):
        test_engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
        try:
            with test_engine.connect() as conn:
                result = conn.execute(text("SELECT 1"))
                result.fetchone()
            logger.info("Database connection successful")
            return True
        except Exception as e:
            if attempt < max_retries:
                logger.warning(f"Database connection attempt {attempt}/{max_retries} failed: {e}. Retrying in {retry_delay}s...")
                await asyncio.sleep(retry_delay)
            else:
                logger.error(f"Database connection failed after {max_retries} attempts: {e}")
                raise
        finally:
            test_engine.dispose()
    return False


def _find_alembic_ini() -> str:
    # In Docker the working directory holds alembic.ini; locally it sits next to the package
    alembic_ini_path = "alembic.ini"
    if os.path.exists(alembic_ini_path):
        return alembic_ini_path

    file_dir = os.path.dirname(os.path.abspath(__file__))
    service_root = os.path.dirname(os.path.dirname(file_dir))
    alembic_ini_path = os.path.join(service_root, "alembic.ini")
    if not os.path.exists(alembic_ini_path):
        raise FileNotFoundError(
            f"Could not find alembic.ini. Current directory: {os.getcwd()}, "
            f"Tried: alembic.ini and {alembic_ini_path}"
        )
    return alembic_ini_path


async def init_db():
    """Initialize database by running Alembic migrations"""
    logger.info("Running database migrations...")

    try:
        await wait_for_database(max_retries=30, retry_delay=2)
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise

    try:
        alembic_ini_path = _find_alembic_ini()
        logger.info(f"Using Alembic config: {os.path.abspath(alembic_ini_path)}")

        alembic_cfg = Config(alembic_ini_path)
        alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))

        logger.info("Starting Alembic migration to head...")

        # Run in a worker thread to avoid blocking the event loop
        try:
            await asyncio.wait_for(
                asyncio.to_thread(command.upgrade, alembic_cfg, "head"),
                timeout=60.0
            )
        except asyncio.TimeoutError:
            logger.error("Database migrations timed out after 60 seconds")
            raise

        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Error running migrations: {e}", exc_info=True)
        raise
