"""
Telegram Log Handler

Forwards WARNING and above to an operator chat, so failed audit or
notification writes after a successful admin mutation get noticed.
"""

import asyncio
import logging
from typing import List, Optional

import httpx


TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"
BATCH_DELAY_SECONDS = 2.0
MAX_BATCH_SIZE = 10
MAX_MESSAGE_LENGTH = 4000


class TelegramLogHandler(logging.Handler):
    """Queues formatted records and sends them in small batches."""

    def __init__(self, bot_token: str, chat_id: str, level: int = logging.WARNING):
        super().__init__(level=level)
        self.bot_token = bot_token
        self.chat_id = chat_id
        self._queue: List[str] = []
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    def format_record(self, record: logging.LogRecord) -> str:
        msg = self.format(record)
        return f"*{record.levelname}* `{record.name}`\n```\n{msg[:1000]}```"

    def emit(self, record: logging.LogRecord):
        try:
            self._queue.append(self.format_record(record))
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # Outside the event loop; the record waits for the next batch
                return
            if self._task is None or self._task.done():
                self._task = loop.create_task(self._send_batch())
        except Exception:
            self.handleError(record)

    def take_batch(self) -> Optional[str]:
        if not self._queue:
            return None
        messages = self._queue[:MAX_BATCH_SIZE]
        self._queue = self._queue[MAX_BATCH_SIZE:]
        combined = "\n\n".join(messages)
        if len(combined) > MAX_MESSAGE_LENGTH:
            combined = combined[:MAX_MESSAGE_LENGTH] + "...[truncated]"
        return combined

    async def _send_batch(self):
        await asyncio.sleep(BATCH_DELAY_SECONDS)

        async with self._lock:
            text = self.take_batch()
            if text is None:
                return
            try:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    await client.post(
                        TELEGRAM_API_URL.format(token=self.bot_token),
                        json={"chat_id": self.chat_id, "text": text, "parse_mode": "Markdown"},
                    )
            except httpx.HTTPError:
                # Logging here would feed the failure back into this handler
                pass


def setup_telegram_logging(bot_token: str, chat_id: str) -> Optional[TelegramLogHandler]:
    """Attach the handler to the root and uvicorn loggers."""
    if not bot_token or not chat_id:
        return None

    handler = TelegramLogHandler(bot_token, chat_id)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logging.getLogger().addHandler(handler)
    for logger_name in ["uvicorn", "uvicorn.error"]:
        logging.getLogger(logger_name).addHandler(handler)

    return handler
