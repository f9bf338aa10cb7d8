"""
Pre-use health check for leased connections.

Only the local "closed" flag is consulted; there is no round-trip ping. A
session that died silently at the network level surfaces on the next
statement and is handled by the single reconnect retry in
ConnectionManager.with_connection.
"""
import psycopg

from pgmq_client.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


def verify_connection(conn) -> None:
    """
    Reset a closed connection's session in place.

    Must only be called by the caller holding the lease on conn.

    Raises:
        psycopg.OperationalError: the session could not be re-established
    """
    if not conn.closed:
        return

    logger.warning("Leased connection is closed, resetting session in place")
    conn.pgconn.reset()

    if conn.closed:
        detail = conn.pgconn.error_message
        if isinstance(detail, bytes):
            detail = detail.decode("utf-8", "replace")
        raise psycopg.OperationalError(
            f"the connection is closed and could not be reset: {detail.strip()}"
        )
    logger.success("Connection session reset succeeded")


__all__ = ["verify_connection"]
