from snapsync.database.connection import get_connection
from snapsync.database.models import PhotoRecord


class PhotosRepository:
    """Database operations for the photos table."""

    def select_filenames(self, range_start: int, range_end: int) -> list[str]:
        """Return filenames for rows in the inclusive range [range_start, range_end].

        Rows are ordered by id so consecutive ranges page through the table
        without gaps or repeats.
        """
        if range_end < range_start:
            return []
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT filename
                    FROM photos
                    ORDER BY id
                    LIMIT %s OFFSET %s
                    """,
                    (range_end - range_start + 1, range_start),
                )
                rows = cur.fetchall()
        return [row[0] for row in rows]

    def insert(self, record: PhotoRecord) -> None:
        """Insert one catalog row."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO photos (image_url, filename, created_at, "uploaderGamertag")
                VALUES (%s, %s, %s, %s)
                """,
                (
                    record.image_url,
                    record.filename,
                    record.created_at,
                    record.uploader_gamertag,
                ),
            )
            conn.commit()
