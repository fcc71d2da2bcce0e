"""チャット・コメントAPIサービス。"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from intervals_icu.decoders import (
    decode_chat,
    decode_chats,
    decode_message,
    decode_messages,
    decode_nothing,
    encode_body,
)
from intervals_icu.result import Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import Chat, Message, RequestOptions
from intervals_icu.validation import (
    build_query,
    normalize_athlete_id,
    normalize_date,
    validate_path_segment,
)


class AsyncChatsService:
    """非同期チャットサービス。"""

    def __init__(self, *, executor: RequestExecutor) -> None:
        self._executor = executor

    async def list(self, athlete_id: str | int = 0) -> Result[list[Chat]]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(f"athlete/{aid}/chats", decoder=decode_chats)

    async def get(self, chat_id: int) -> Result[Chat]:
        return await self._executor.request_json(f"chats/{int(chat_id)}", decoder=decode_chat)

    async def list_messages(
        self,
        chat_id: int,
        *,
        oldest: date | str | None = None,
        newest: date | str | None = None,
        limit: int | None = None,
    ) -> Result[list[Message]]:
        """チャット内のメッセージを取得する。

        Args:
            chat_id: チャットID。
            oldest: 最古の日付。
            newest: 最新の日付（この日を含む）。
            limit: 最大件数。

        Returns:
            ``Message`` のリストを保持する ``Result``。
        """

        params = build_query(
            {
                "oldest": normalize_date(oldest, param_name="oldest") if oldest is not None else None,
                "newest": normalize_date(newest, param_name="newest") if newest is not None else None,
                "limit": limit,
            }
        )
        return await self._executor.request_json(
            f"chats/{int(chat_id)}/messages",
            RequestOptions(params=params),
            decode_messages,
        )

    async def send_message(self, message: Message | Mapping[str, Any]) -> Result[Message]:
        """メッセージを送信する。"""

        return await self._executor.request_json(
            "chats/send-message",
            RequestOptions(method="POST", json=encode_body(message, Message)),
            decode_message,
        )

    async def mark_seen(self, chat_id: int, message_id: int) -> Result[None]:
        return await self._executor.request_json(
            f"chats/{int(chat_id)}/messages/{int(message_id)}/seen",
            RequestOptions(method="PUT"),
            decode_nothing,
        )

    async def delete_message(self, chat_id: int, message_id: int) -> Result[None]:
        return await self._executor.request_json(
            f"chats/{int(chat_id)}/messages/{int(message_id)}",
            RequestOptions(method="DELETE"),
            decode_nothing,
        )

    async def list_activity_messages(self, activity_id: str | int) -> Result[list[Message]]:
        """アクティビティへのコメントを取得する。"""

        act = validate_path_segment(str(activity_id), param_name="activity_id")
        return await self._executor.request_json(
            f"activity/{act}/messages",
            decoder=decode_messages,
        )

    async def add_activity_message(self, activity_id: str | int, text: str) -> Result[Message]:
        """アクティビティへコメントを追加する。"""

        act = validate_path_segment(str(activity_id), param_name="activity_id")
        return await self._executor.request_json(
            f"activity/{act}/messages",
            RequestOptions(method="POST", json={"text": text}),
            decode_message,
        )
