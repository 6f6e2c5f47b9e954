from __future__ import annotations


class TaskboardError(RuntimeError):
  status_code = 500

  def __init__(self, message: str) -> None:
    super().__init__(message)
    self.message = message


class ValidationError(TaskboardError):
  status_code = 400


class UnauthorizedError(TaskboardError):
  status_code = 401


class ForbiddenError(TaskboardError):
  status_code = 403


class NotFoundError(TaskboardError):
  status_code = 404


class ConflictError(TaskboardError):
  status_code = 409


class MigrationError(TaskboardError):
  """A statement in a migration (or rollback) script failed.

  `filename` is the script being applied; `statement` is the text that the
  store rejected. The driver exception is chained as `__cause__`.
  """

  def __init__(self, filename: str, statement: str, reason: str) -> None:
    super().__init__(f"Migration {filename} failed: {reason}")
    self.filename = filename
    self.statement = statement
    self.reason = reason
