import mysql.connector
import logging
import time
from typing import Callable, Any, Dict, Iterable, List, Tuple
from . import config

logger = logging.getLogger(__name__)

# Retry configuration
RETRY_DELAY_SECONDS = 1  # Wait between retries
MAX_RETRY_DELAY_SECONDS = 30  # Cap for exponential backoff

RELEVANCE_INDEX_TABLE = "scm_relevance_index"


def _posts_table() -> str:
    return f"{config.WP_TABLE_PREFIX}posts"


def get_db_connection(max_attempts: int = None):
    """
    Establishes a connection to the MySQL content database.

    Retries with exponential backoff up to max_attempts (DB_MAX_RETRIES by default),
    then re-raises the last mysql.connector.Error so the caller can fall back.
    """
    max_attempts = max_attempts or config.DB_MAX_RETRIES
    delay = RETRY_DELAY_SECONDS

    for attempt in range(1, max_attempts + 1):
        try:
            conn = mysql.connector.connect(
                host=config.DB_HOST,
                user=config.DB_USER,
                password=config.DB_PASSWORD,
                database=config.DB_NAME
            )
            if attempt > 1:
                logger.info(f"[DB_RETRY] Successfully connected after {attempt - 1} retries")
            return conn
        except mysql.connector.Error as err:
            logger.error(f"[DB_RETRY] Connection attempt #{attempt} failed: {err}")
            if attempt == max_attempts:
                raise
            time.sleep(delay)
            # Exponential backoff with cap
            delay = min(delay * 2, MAX_RETRY_DELAY_SECONDS)


def execute_with_retry(operation: Callable[[], Any], operation_name: str = "database operation",
                       max_attempts: int = None) -> Any:
    """
    Execute a database operation, retrying on mysql.connector errors.

    Args:
        operation: A callable that performs the database operation and returns its result.
        operation_name: Human-readable name for logging purposes.
        max_attempts: Attempts before giving up (DB_MAX_RETRIES by default).

    Returns:
        The result from the operation.

    Raises:
        mysql.connector.Error: The last error once all attempts have failed.
    """
    max_attempts = max_attempts or config.DB_MAX_RETRIES
    delay = RETRY_DELAY_SECONDS

    for attempt in range(1, max_attempts + 1):
        try:
            result = operation()
            if attempt > 1:
                logger.info(f"[DB_RETRY] {operation_name} succeeded after {attempt - 1} retries")
            return result
        except mysql.connector.Error as err:
            logger.error(f"[DB_RETRY] {operation_name} attempt #{attempt} failed: {err}")
            if attempt == max_attempts:
                raise
            time.sleep(delay)
            delay = min(delay * 2, MAX_RETRY_DELAY_SECONDS)


def _fetch_rows(query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
    conn = get_db_connection()
    try:
        cursor = conn.cursor(dictionary=True)
        cursor.execute(query, params)
        rows = cursor.fetchall()
        cursor.close()
        return rows
    finally:
        conn.close()


def fetch_published_content() -> List[Dict[str, Any]]:
    """
    Returns every published post and page as {"id", "content"} rows.
    """
    query = f"""
        SELECT ID AS id, post_content AS content
        FROM {_posts_table()}
        WHERE post_status = %s AND (post_type = %s OR post_type = %s)
        ORDER BY ID
    """
    rows = execute_with_retry(
        lambda: _fetch_rows(query, ('publish', 'post', 'page')),
        "fetch_published_content",
    )
    logger.info(f"[DB] Fetched {len(rows)} published posts and pages")
    return rows


def fetch_content_by_ids(document_ids: Iterable[int]) -> List[Dict[str, Any]]:
    """
    Returns the published posts/pages with the given IDs, in the order requested.
    """
    ids = list(dict.fromkeys(document_ids))
    if not ids:
        return []

    placeholders = ", ".join(["%s"] * len(ids))
    query = f"""
        SELECT ID AS id, post_content AS content
        FROM {_posts_table()}
        WHERE post_status = %s AND ID IN ({placeholders})
    """
    rows = execute_with_retry(
        lambda: _fetch_rows(query, ('publish', *ids)),
        "fetch_content_by_ids",
    )
    by_id = {row["id"]: row for row in rows}
    return [by_id[i] for i in ids if i in by_id]


def init_relevance_index_table() -> None:
    """Creates the relevance index table if it doesn't exist."""
    def _create():
        conn = get_db_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {RELEVANCE_INDEX_TABLE} (
                    word VARCHAR(191) NOT NULL,
                    document_id BIGINT UNSIGNED NOT NULL,
                    score DOUBLE NOT NULL,
                    PRIMARY KEY (word, document_id)
                )
            """)
            conn.commit()
            cursor.close()
        finally:
            conn.close()

    execute_with_retry(_create, "init_relevance_index_table")


def lookup_relevance_scores(words: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Returns {"word", "document_id", "score"} rows for the given words.
    """
    words = list(dict.fromkeys(words))
    if not words:
        return []

    placeholders = ", ".join(["%s"] * len(words))
    query = f"""
        SELECT word, document_id, score
        FROM {RELEVANCE_INDEX_TABLE}
        WHERE word IN ({placeholders})
    """
    return execute_with_retry(lambda: _fetch_rows(query, tuple(words)), "lookup_relevance_scores")


def replace_relevance_index(rows: List[Tuple[str, int, float]], batch_size: int = 1000) -> int:
    """
    Replaces the whole relevance index with the given (word, document_id, score) rows.

    Rows are written to a staging table which is then swapped in with a single
    RENAME TABLE, so readers never see a half-written index.
    """
    staging = f"{RELEVANCE_INDEX_TABLE}_staging"
    retired = f"{RELEVANCE_INDEX_TABLE}_old"

    def _replace():
        conn = get_db_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"DROP TABLE IF EXISTS {staging}")
            cursor.execute(f"CREATE TABLE {staging} LIKE {RELEVANCE_INDEX_TABLE}")
            insert = f"INSERT INTO {staging} (word, document_id, score) VALUES (%s, %s, %s)"
            for start in range(0, len(rows), batch_size):
                cursor.executemany(insert, rows[start:start + batch_size])
            conn.commit()
            cursor.execute(f"DROP TABLE IF EXISTS {retired}")
            cursor.execute(
                f"RENAME TABLE {RELEVANCE_INDEX_TABLE} TO {retired}, {staging} TO {RELEVANCE_INDEX_TABLE}"
            )
            cursor.execute(f"DROP TABLE IF EXISTS {retired}")
            conn.commit()
            cursor.close()
        finally:
            conn.close()

    init_relevance_index_table()
    execute_with_retry(_replace, "replace_relevance_index")
    logger.info(f"[INDEX] Replaced relevance index with {len(rows)} rows")
    return len(rows)
