from taskboard.migrations.engine import Migrator, RollbackResult, split_statements

__all__ = ["Migrator", "RollbackResult", "split_statements"]
