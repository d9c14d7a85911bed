"""
Message Service
Direct messages between users (poll-based)
"""

import logging
import uuid
from databases import Database
from fastapi import HTTPException, status
from app.auth import require_owner

logger = logging.getLogger(__name__)


class MessageService:
    """Service for messaging operations"""

    @staticmethod
    async def send_message(db: Database, sender_id: str, receiver_id: str, content: str) -> dict:
        """Send a message to an existing user"""

        receiver = await db.fetch_one(
            "SELECT id FROM users WHERE id = :id",
            {"id": str(receiver_id)}
        )

        if not receiver:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Receiver not found"
            )

        message = await db.fetch_one(
            """
            INSERT INTO messages (id, sender_id, receiver_id, content)
            VALUES (:id, :sender_id, :receiver_id, :content)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "sender_id": str(sender_id),
                "receiver_id": str(receiver_id),
                "content": content
            }
        )

        return dict(message)

    @staticmethod
    async def list_conversations(db: Database, user_id: str) -> list[dict]:
        """One row per counterpart with the most recent message, newest first"""

        rows = await db.fetch_all(
            """
            SELECT *
            FROM (
                SELECT DISTINCT ON (m.other_user_id)
                       m.other_user_id,
                       u.username,
                       u.profile_picture_url,
                       m.content AS last_message,
                       m.created_at AS last_message_time
                FROM (
                    SELECT CASE WHEN sender_id = :user_id THEN receiver_id ELSE sender_id END AS other_user_id,
                           content,
                           created_at
                    FROM messages
                    WHERE sender_id = :user_id OR receiver_id = :user_id
                ) m
                JOIN users u ON u.id = m.other_user_id
                ORDER BY m.other_user_id, m.created_at DESC
            ) conversations
            ORDER BY last_message_time DESC
            """,
            {"user_id": str(user_id)}
        )

        return [dict(row) for row in rows]

    @staticmethod
    async def get_thread(db: Database, user_id: str, other_id: str) -> list[dict]:
        """Full history between two users, oldest first"""

        rows = await db.fetch_all(
            """
            SELECT m.*, u.username, u.profile_picture_url
            FROM messages m
            JOIN users u ON m.sender_id = u.id
            WHERE (m.sender_id = :user_id AND m.receiver_id = :other_id)
               OR (m.sender_id = :other_id AND m.receiver_id = :user_id)
            ORDER BY m.created_at ASC
            """,
            {"user_id": str(user_id), "other_id": str(other_id)}
        )

        return [dict(row) for row in rows]

    @staticmethod
    async def mark_read(db: Database, message_id: str, caller_id: str) -> dict:
        """Flip the read flag; only the receiver may do this, repeats are no-ops"""

        message = await db.fetch_one(
            "SELECT * FROM messages WHERE id = :id",
            {"id": str(message_id)}
        )

        if not message:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Message not found"
            )

        require_owner(message, caller_id, "receiver_id", detail="Only the receiver can mark a message as read")

        if message["read"]:
            return dict(message)

        updated = await db.fetch_one(
            "UPDATE messages SET read = TRUE WHERE id = :id RETURNING *",
            {"id": str(message_id)}
        )

        return dict(updated)

    @staticmethod
    async def unread_count(db: Database, user_id: str) -> int:
        count = await db.fetch_val(
            "SELECT COUNT(*) FROM messages WHERE receiver_id = :user_id AND read = FALSE",
            {"user_id": str(user_id)}
        )
        return int(count or 0)


# Create singleton instance
message_service = MessageService()
