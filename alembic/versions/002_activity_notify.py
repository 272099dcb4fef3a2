"""NOTIFY activity_inserts on new achievements / quiz_scores rows (Postgres only).

Payload: {"table", "id", "user_name", "title"}; read by PostgresChangeWatcher.
Other backends are watched by polling, so this revision is a no-op there.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CHANNEL = "activity_inserts"

# table -> column holding the event title
TITLE_COLUMNS = {"achievements": "name", "quiz_scores": "quiz_name"}


def _is_postgres() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def upgrade() -> None:
    if not _is_postgres():
        return

    op.execute(
        f"""
        CREATE OR REPLACE FUNCTION notify_activity_insert() RETURNS trigger AS $$
        DECLARE
            owner text;
        BEGIN
            SELECT name INTO owner FROM users WHERE id = NEW.user_id;
            PERFORM pg_notify(
                '{CHANNEL}',
                json_build_object(
                    'table', TG_TABLE_NAME,
                    'id', NEW.id,
                    'user_name', owner,
                    'title', to_jsonb(NEW) ->> TG_ARGV[0]
                )::text
            );
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    for table, title_column in TITLE_COLUMNS.items():
        op.execute(
            f"""
            CREATE TRIGGER {table}_notify_insert
            AFTER INSERT ON {table}
            FOR EACH ROW EXECUTE FUNCTION notify_activity_insert('{title_column}')
            """
        )


def downgrade() -> None:
    if not _is_postgres():
        return

    for table in TITLE_COLUMNS:
        op.execute(f"DROP TRIGGER IF EXISTS {table}_notify_insert ON {table}")
    op.execute("DROP FUNCTION IF EXISTS notify_activity_insert()")
