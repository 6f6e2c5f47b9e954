from __future__ import annotations

import logging

from taskboard.boards.repository import BoardRepository
from taskboard.errors import NotFoundError, ValidationError
from taskboard.models import Board, BoardWithRole
from taskboard.tasks.repository import TaskRepository

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
  n = (name or "").strip()
  if not n:
    raise ValidationError("name is required")
  return n


class BoardService:
  def __init__(self, boards: BoardRepository, tasks: TaskRepository) -> None:
    self.boards = boards
    self.tasks = tasks

  async def create_board(self, name: str, creator_id: str) -> Board:
    b = await self.boards.create_board(_clean_name(name), creator_id)
    logger.info("Board %s created by %s", b.id, creator_id)
    return b

  async def get_board(self, board_id: str) -> Board:
    b = await self.boards.get_board(board_id)
    if not b:
      raise NotFoundError("Board not found")
    return b

  async def list_boards_for_user(self, user_id: str) -> list[BoardWithRole]:
    return await self.boards.list_boards_for_user(user_id)

  async def rename_board(self, board_id: str, name: str) -> Board:
    n = _clean_name(name)
    if not await self.boards.rename_board(board_id, n):
      raise NotFoundError("Board not found")
    return await self.get_board(board_id)

  async def delete_board(self, board_id: str) -> None:
    await self.get_board(board_id)
    # children first; each step commits on its own
    await self.tasks.delete_for_board(board_id)
    await self.boards.delete_permissions(board_id)
    await self.boards.delete_board(board_id)
    logger.info("Board %s deleted", board_id)
